"""Tests for /status comment handling."""

from __future__ import annotations

import dataclasses
import threading
from datetime import UTC, date, datetime
from http import HTTPStatus
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from boardwatch.commands import USAGE
from boardwatch.github.projects import IssueDetail, IssueProjectItem, StatusField, StatusOption
from boardwatch.handlers.issue_comments import (
    NO_STATUS_FIELD,
    NOT_IN_PROJECT,
    handle_issue_comment,
)

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
REACTIONS_URL = "https://api.github.com/repos/test-owner/test-repo/issues/comments/99/reactions"
COMMENTS_URL = "https://api.github.com/repos/test-owner/test-repo/issues/7/comments"

STATUS_FIELD = StatusField(
    id="PVTSSF_status",
    options=[
        StatusOption("opt-todo", "Todo"),
        StatusOption("opt-progress", "In Progress"),
        StatusOption("opt-done", "Done"),
    ],
)


def _issue(project_id="PVT_watched", status_field=STATUS_FIELD):
    return IssueDetail(
        id="I_issue1",
        project_items=[IssueProjectItem(id="PVTI_item1", project_id=project_id, status_field=status_field)],
    )


@pytest.fixture
def _with_issue(services):
    services.projects.get_issue = AsyncMock(return_value=_issue())
    return services


async def _handle(services, payload):
    return await handle_issue_comment(payload, 4242, services, now=NOW)


@pytest.mark.asyncio
async def test_schedule_on_date_stores_move(_with_issue, comment_payload):
    services = _with_issue

    status = await _handle(services, comment_payload("/status in progress on 2024-03-15"))

    assert status == HTTPStatus.NO_CONTENT
    services.projects.get_issue.assert_awaited_once_with("I_issue1", 4242)
    move = services.store.get("PVTI_item1")
    assert move.project_id == "PVT_watched"
    assert move.scheduled_date == date(2024, 3, 15)
    assert move.field_id == "PVTSSF_status"
    assert move.target_value_id == "opt-progress"
    assert move.target_value_name == "In Progress"
    assert move.installation_id == 4242
    assert move.username == "octocat"
    assert move.comments_url == COMMENTS_URL
    services.github.create_reaction.assert_awaited_once_with(REACTIONS_URL, "+1", 4242)
    services.github.create_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_schedule_relative_date(_with_issue, comment_payload):
    services = _with_issue

    await _handle(services, comment_payload("/status Done in 2 weeks"))

    move = services.store.get("PVTI_item1")
    assert move.scheduled_date == date(2024, 3, 15)
    assert move.target_value_name == "Done"


@pytest.mark.asyncio
async def test_second_schedule_replaces_first(_with_issue, comment_payload):
    services = _with_issue

    await _handle(services, comment_payload("/status Done on 2024-03-15"))
    await _handle(services, comment_payload("/status Todo on 2024-04-01"))

    move = services.store.get("PVTI_item1")
    assert move.target_value_name == "Todo"
    assert move.scheduled_date == date(2024, 4, 1)


@pytest.mark.asyncio
async def test_cancel_removes_move(_with_issue, comment_payload):
    services = _with_issue
    await _handle(services, comment_payload("/status Done on 2024-03-15"))
    services.github.create_reaction.reset_mock()

    status = await _handle(services, comment_payload("/status cancel"))

    assert status == HTTPStatus.NO_CONTENT
    assert services.store.get("PVTI_item1") is None
    services.github.create_reaction.assert_awaited_once_with(REACTIONS_URL, "+1", 4242)


@pytest.mark.asyncio
async def test_cancel_without_pending_move(_with_issue, comment_payload):
    """Cancelling when nothing is scheduled still succeeds."""
    services = _with_issue

    status = await _handle(services, comment_payload("/status cancel"))

    assert status == HTTPStatus.NO_CONTENT
    services.github.create_reaction.assert_awaited_once_with(REACTIONS_URL, "+1", 4242)
    services.github.create_comment.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "reason"),
    [
        ("/status", USAGE),
        ("/status Done later", USAGE),
        ("/status Blocked on 2024-03-15", "this project does not have a status named `blocked` - please try again."),
        ("/status Done on 03-15-2024", "`03-15-2024` could not be parsed as a date in `YYYY-MM-DD` format - please try again."),
        ("/status Done in 0 days", "`0` must be greater than zero - please try again."),
    ],
)
async def test_rejected_commands_reply(_with_issue, comment_payload, body, reason):
    """Bad commands get a confused reaction and a reply, but the delivery succeeds."""
    services = _with_issue

    status = await _handle(services, comment_payload(body))

    assert status == HTTPStatus.NO_CONTENT
    assert services.github.mock_calls == [
        call.create_reaction(REACTIONS_URL, "confused", 4242),
        call.create_comment(COMMENTS_URL, f"@octocat {reason}", 4242),
    ]
    assert services.store.get("PVTI_item1") is None


@pytest.mark.asyncio
async def test_issue_outside_project_rejected(services, comment_payload):
    """Even a cancel is rejected when the issue is not on the watched project."""
    services.projects.get_issue = AsyncMock(return_value=_issue(project_id="PVT_other"))

    await _handle(services, comment_payload("/status cancel"))

    services.github.create_reaction.assert_awaited_once_with(REACTIONS_URL, "confused", 4242)
    services.github.create_comment.assert_awaited_once_with(COMMENTS_URL, f"@octocat {NOT_IN_PROJECT}", 4242)


@pytest.mark.asyncio
async def test_project_without_status_field_rejected(services, comment_payload):
    services.projects.get_issue = AsyncMock(return_value=_issue(status_field=None))

    await _handle(services, comment_payload("/status Done on 2024-03-15"))

    services.github.create_comment.assert_awaited_once_with(COMMENTS_URL, f"@octocat {NO_STATUS_FIELD}", 4242)


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["edited", "deleted"])
async def test_non_created_comments_ignored(_with_issue, comment_payload, action):
    """Edited comments are never parsed, even if they hold a valid command."""
    services = _with_issue

    status = await _handle(services, comment_payload("/status Done on 2024-03-15", action=action))

    assert status == HTTPStatus.NO_CONTENT
    services.projects.get_issue.assert_not_awaited()
    services.github.create_reaction.assert_not_awaited()
    assert services.store.get("PVTI_item1") is None


@pytest.mark.asyncio
async def test_other_repository_ignored(_with_issue, comment_payload):
    services = _with_issue

    status = await _handle(services, comment_payload("/status cancel", repository="someone/else"))

    assert status == HTTPStatus.NO_CONTENT
    services.projects.get_issue.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["", "Looks good to me", "please /status cancel"])
async def test_ordinary_comments_ignored(_with_issue, comment_payload, body):
    services = _with_issue

    status = await _handle(services, comment_payload(body))

    assert status == HTTPStatus.NO_CONTENT
    services.projects.get_issue.assert_not_awaited()
    services.github.create_reaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_malformed_payload_is_bad_request(services):
    status = await _handle(services, b'{"action": "created", "installation": {"id": 1}}')

    assert status == HTTPStatus.BAD_REQUEST


@pytest.mark.asyncio
async def test_store_failure_skips_reaction(_with_issue, comment_payload):
    """A failed write must not be acknowledged with +1."""
    store = MagicMock()
    store.put.side_effect = RuntimeError("database is locked")
    services = dataclasses.replace(_with_issue, store=store)

    with pytest.raises(RuntimeError):
        await _handle(services, comment_payload("/status Done on 2024-03-15"))
    services.github.create_reaction.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("body", "method"),
    [("/status Done on 2024-03-15", "put"), ("/status cancel", "delete")],
)
async def test_store_calls_run_off_the_event_loop(_with_issue, comment_payload, body, method):
    loop_thread = threading.get_ident()
    threads = []
    store = MagicMock()
    getattr(store, method).side_effect = lambda *args: threads.append(threading.get_ident())
    services = dataclasses.replace(_with_issue, store=store)

    await _handle(services, comment_payload(body))

    assert len(threads) == 1
    assert threads[0] != loop_thread
    services.github.create_reaction.assert_awaited_once_with(REACTIONS_URL, "+1", 4242)
