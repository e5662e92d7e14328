"""``projects_v2_item`` handling: announce status changes in Slack."""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from boardwatch.github.events import ProjectsItemEvent
from boardwatch.slack.notifier import fallback_text

if TYPE_CHECKING:
    from boardwatch.services import Services

logger = structlog.get_logger()


async def handle_project_item(payload: bytes, installation_id: int, services: Services) -> HTTPStatus:
    """Send a Slack message when an item's watched field changes on the watched project.

    Lookup and Slack failures propagate; the delivery is then reported as
    failed and GitHub may redeliver it.
    """
    try:
        event = ProjectsItemEvent.model_validate_json(payload)
    except ValidationError as e:
        logger.error("project_item.decode_failed", errors=e.error_count())
        return HTTPStatus.BAD_REQUEST

    settings = services.settings
    if (
        event.action != "edited"
        or event.project_id != settings.github_project_id
        or event.field_id is None
        or event.field_id != settings.github_project_field_id
    ):
        logger.info(
            "project_item.skipped",
            action=event.action,
            project_id=event.project_id,
            field_id=event.field_id,
        )
        return HTTPStatus.NO_CONTENT

    logger.info("project_item.processing", item_id=event.item_id)
    item = await services.projects.get_item(event.item_id, installation_id)

    status = item.status
    if status is None:
        logger.info("project_item.no_status", item_id=event.item_id)
        return HTTPStatus.NO_CONTENT

    await services.notifier.send_status_change(
        title=item.title,
        url=item.link,
        status=status,
        project_title=item.project_title,
        project_url=item.project_url,
        username=event.username,
        fallback=fallback_text(item.title, status, event.username),
    )
    return HTTPStatus.NO_CONTENT
