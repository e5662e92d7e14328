"""GitHub webhook endpoint: authenticate, decode the envelope, route by event."""

from __future__ import annotations

import base64
import binascii
from http import HTTPStatus
from typing import TYPE_CHECKING

import structlog
from fastapi import APIRouter, Depends, Header, Request, Response
from pydantic import ValidationError

from boardwatch.github.events import BaseWebhookEvent, IssueCommentEvent, ProjectsItemEvent
from boardwatch.github.signature import SIGNATURE_PREFIX, is_valid_mac, parse_signature
from boardwatch.handlers.issue_comments import handle_issue_comment
from boardwatch.handlers.project_items import handle_project_item
from boardwatch.services import Services

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

EVENT_HANDLERS: dict[str, Callable[[bytes, int, Services], Awaitable[HTTPStatus]]] = {
    ProjectsItemEvent.event_name: handle_project_item,
    IssueCommentEvent.event_name: handle_issue_comment,
}


def get_services(request: Request) -> Services:
    return request.app.state.services


def _decode_body(raw: bytes, transfer_encoding: str | None) -> bytes | None:
    if transfer_encoding and transfer_encoding.strip().lower() == "base64":
        try:
            return base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError):
            return None
    return raw


async def process_delivery(
    body: bytes | None,
    event_name: str | None,
    signature: str | None,
    services: Services,
    *,
    transfer_encoding: str | None = None,
) -> HTTPStatus:
    """Run a delivery through every gate and hand it to its event handler.

    Each failed gate answers immediately: 400 for anything that cannot be
    authenticated or decoded, 422 for an authentic delivery of an event
    type with no handler.
    """
    if not body:
        logger.error("webhook.no_body")
        return HTTPStatus.BAD_REQUEST

    if not event_name:
        logger.error("webhook.no_event_name")
        return HTTPStatus.BAD_REQUEST

    if not signature:
        logger.error("webhook.no_signature")
        return HTTPStatus.BAD_REQUEST

    if not signature.startswith(SIGNATURE_PREFIX):
        logger.error("webhook.signature_unprefixed", prefix=SIGNATURE_PREFIX)
        return HTTPStatus.BAD_REQUEST

    mac = parse_signature(signature)
    if mac is None:
        logger.error("webhook.signature_not_hex")
        return HTTPStatus.BAD_REQUEST

    payload = _decode_body(body, transfer_encoding)
    if payload is None:
        logger.error("webhook.body_not_decodable", encoding=transfer_encoding)
        return HTTPStatus.BAD_REQUEST

    if not is_valid_mac(payload, mac, services.settings.webhook_secret_bytes):
        logger.error("webhook.bad_signature", github_event=event_name)
        return HTTPStatus.BAD_REQUEST

    try:
        base = BaseWebhookEvent.model_validate_json(payload)
    except ValidationError:
        logger.error("webhook.base_decode_failed", github_event=event_name)
        return HTTPStatus.BAD_REQUEST

    handler = EVENT_HANDLERS.get(event_name)
    if handler is None:
        # Surfaced in GitHub's delivery log so new subscriptions are noticed
        logger.error("webhook.unrecognized_event", github_event=event_name)
        return HTTPStatus.UNPROCESSABLE_ENTITY

    logger.info("webhook.received", github_event=event_name, installation_id=base.installation_id)
    return await handler(payload, base.installation_id, services)


@router.post("/github")
async def github_webhook(
    request: Request,
    services: Services = Depends(get_services),
    x_github_event: str | None = Header(default=None),
    x_hub_signature_256: str | None = Header(default=None),
    content_transfer_encoding: str | None = Header(default=None),
) -> Response:
    """Handle incoming GitHub webhook events."""
    body = await request.body()
    status = await process_delivery(
        body,
        x_github_event,
        x_hub_signature_256,
        services,
        transfer_encoding=content_transfer_encoding,
    )
    return Response(status_code=status)
