"""``issue_comment`` handling: schedule or cancel status moves via ``/status``.

A comment resolves to one of three outcomes, and each outcome maps to a
fixed set of calls:

- ``Cancelled``: delete the item's scheduled move, react ``+1``.
- ``Scheduled``: store the move, react ``+1``.
- ``Rejected``: react ``confused`` and reply to the commenter with the reason.

Store writes run in a worker thread and finish before the ``+1`` reaction,
so a failed write never leaves a misleading acknowledgement behind.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from boardwatch.commands import Cancel, ParseError, parse_command
from boardwatch.github.events import IssueCommentEvent
from boardwatch.models import ScheduledMove

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime

    from boardwatch.commands import Command
    from boardwatch.github.projects import IssueProjectItem
    from boardwatch.services import Services

logger = structlog.get_logger()

REACTION_OK = "+1"
REACTION_CONFUSED = "confused"

NOT_IN_PROJECT = (
    "this issue is not part of the project being watched - please add it to the project and try again."
)
NO_STATUS_FIELD = (
    "this project does not have a field named `Status` - please update the project and try again."
)


@dataclass(frozen=True)
class Cancelled:
    item_id: str


@dataclass(frozen=True)
class Scheduled:
    move: ScheduledMove


@dataclass(frozen=True)
class Rejected:
    reason: str


Outcome = Cancelled | Scheduled | Rejected


def resolve_command(
    command: Command,
    project_item: IssueProjectItem | None,
    event: IssueCommentEvent,
    installation_id: int,
) -> Outcome:
    """Turn a parsed command into an outcome for the issue's watched-project item."""
    if project_item is None:
        return Rejected(NOT_IN_PROJECT)

    if isinstance(command, ParseError):
        return Rejected(command.reason)

    if isinstance(command, Cancel):
        return Cancelled(project_item.id)

    status_field = project_item.status_field
    if status_field is None:
        return Rejected(NO_STATUS_FIELD)

    option = status_field.find_option(command.status_name)
    if option is None:
        return Rejected(
            f"this project does not have a status named `{command.status_name}` - please try again."
        )

    return Scheduled(
        ScheduledMove(
            item_id=project_item.id,
            project_id=project_item.project_id,
            scheduled_date=command.date,
            field_id=status_field.id,
            target_value_id=option.id,
            target_value_name=option.name,
            installation_id=installation_id,
            username=event.username,
            comments_url=event.issue_comments_url,
        )
    )


async def _apply_cancelled(
    outcome: Cancelled, event: IssueCommentEvent, installation_id: int, services: Services
) -> None:
    await asyncio.to_thread(services.store.delete, outcome.item_id)
    await services.github.create_reaction(event.comment_reactions_url, REACTION_OK, installation_id)


async def _apply_scheduled(
    outcome: Scheduled, event: IssueCommentEvent, installation_id: int, services: Services
) -> None:
    await asyncio.to_thread(services.store.put, outcome.move)
    await services.github.create_reaction(event.comment_reactions_url, REACTION_OK, installation_id)


async def _apply_rejected(
    outcome: Rejected, event: IssueCommentEvent, installation_id: int, services: Services
) -> None:
    await services.github.create_reaction(event.comment_reactions_url, REACTION_CONFUSED, installation_id)
    await services.github.create_comment(
        event.issue_comments_url,
        f"@{event.username} {outcome.reason}",
        installation_id,
    )


OUTCOME_ACTIONS: dict[type, Callable[..., Awaitable[None]]] = {
    Cancelled: _apply_cancelled,
    Scheduled: _apply_scheduled,
    Rejected: _apply_rejected,
}


async def apply_outcome(
    outcome: Outcome, event: IssueCommentEvent, installation_id: int, services: Services
) -> None:
    await OUTCOME_ACTIONS[type(outcome)](outcome, event, installation_id, services)


async def handle_issue_comment(
    payload: bytes,
    installation_id: int,
    services: Services,
    *,
    now: datetime | None = None,
) -> HTTPStatus:
    """Process a new ``/status`` comment on an issue in the watched repository."""
    try:
        event = IssueCommentEvent.model_validate_json(payload)
    except ValidationError as e:
        logger.error("comment.decode_failed", errors=e.error_count())
        return HTTPStatus.BAD_REQUEST

    # Edits are ignored so a command is never applied twice
    if event.action != "created":
        logger.info("comment.skipped_action", action=event.action)
        return HTTPStatus.NO_CONTENT

    settings = services.settings
    if event.repository_name != settings.github_repository:
        logger.info("comment.skipped_repository", repository=event.repository_name)
        return HTTPStatus.NO_CONTENT

    command = parse_command(event.comment_body, now=now)
    if command is None:
        logger.info("comment.not_a_command")
        return HTTPStatus.NO_CONTENT

    logger.info("comment.command_received", issue_id=event.issue_id, command=type(command).__name__)

    issue = await services.projects.get_issue(event.issue_id, installation_id)
    project_item = issue.item_in_project(settings.github_project_id)

    outcome = resolve_command(command, project_item, event, installation_id)
    if isinstance(outcome, Rejected):
        logger.info("comment.rejected", issue_id=event.issue_id, reason=outcome.reason)
    elif isinstance(outcome, Scheduled):
        logger.info(
            "comment.scheduled",
            item_id=outcome.move.item_id,
            date=outcome.move.scheduled_date.isoformat(),
            status=outcome.move.target_value_name,
        )
    else:
        logger.info("comment.cancelled", item_id=outcome.item_id)

    await apply_outcome(outcome, event, installation_id, services)
    return HTTPStatus.NO_CONTENT
