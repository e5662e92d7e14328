"""Typed GitHub webhook payloads.

Decoding happens in two phases.  Every delivery is first decoded as a
``BaseWebhookEvent`` to learn which App installation sent it; the router
then hands the raw body to the handler registered for the
``X-GitHub-Event`` label, which decodes its own event model.  Each model
carries only the fields its handler needs, pulled out of GitHub's nested
payload with ``AliasPath``.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasPath, BaseModel, ConfigDict, Field


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BaseWebhookEvent(_Event):
    """Fields common to every GitHub App webhook delivery."""

    installation_id: int = Field(validation_alias=AliasPath("installation", "id"))


class ProjectsItemEvent(_Event):
    """A ``projects_v2_item`` delivery: an item on a project board changed."""

    event_name: ClassVar[str] = "projects_v2_item"

    action: str
    username: str = Field(validation_alias=AliasPath("sender", "login"))
    item_id: str = Field(validation_alias=AliasPath("projects_v2_item", "node_id"))
    project_id: str = Field(validation_alias=AliasPath("projects_v2_item", "project_node_id"))
    # Only present when action is "edited"
    field_id: str | None = Field(
        default=None,
        validation_alias=AliasPath("changes", "field_value", "field_node_id"),
    )


class IssueCommentEvent(_Event):
    """An ``issue_comment`` delivery."""

    event_name: ClassVar[str] = "issue_comment"

    action: str
    username: str = Field(validation_alias=AliasPath("sender", "login"))
    comment_body: str = Field(validation_alias=AliasPath("comment", "body"))
    comment_reactions_url: str = Field(validation_alias=AliasPath("comment", "reactions", "url"))
    issue_id: str = Field(validation_alias=AliasPath("issue", "node_id"))
    issue_comments_url: str = Field(validation_alias=AliasPath("issue", "comments_url"))
    repository_name: str = Field(validation_alias=AliasPath("repository", "full_name"))
