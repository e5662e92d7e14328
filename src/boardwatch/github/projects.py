"""GitHub Projects V2 lookups via GraphQL."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from boardwatch.github.client import GitHubClient

logger = structlog.get_logger()

STATUS_FIELD_NAME = "Status"

# Project item with its content, single-select values and parent project
QUERY_ITEM_DETAIL = """
query($id: ID!) {
  node(id: $id) {
    ... on ProjectV2Item {
      content {
        ... on DraftIssue { title }
        ... on Issue { title url }
        ... on PullRequest { title url }
      }
      fieldValues(first: 10) {
        nodes {
          ... on ProjectV2ItemFieldSingleSelectValue {
            name
            field { ... on ProjectV2FieldCommon { name } }
          }
        }
      }
      project { title url }
    }
  }
}
"""

# Issue with the project items it belongs to and each project's Status field
QUERY_ISSUE_DETAIL = """
query($id: ID!) {
  node(id: $id) {
    ... on Issue {
      id
      projectItems(first: 10) {
        nodes {
          id
          project {
            id
            field(name: "Status") {
              ... on ProjectV2SingleSelectField {
                id
                options { id name }
              }
            }
          }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True)
class FieldValue:
    """A single-select value set on a project item."""

    field_name: str | None
    value: str | None


@dataclass(frozen=True)
class ItemDetail:
    """A project item as shown in a status-change notification."""

    title: str
    url: str | None  # None for draft issues
    project_title: str
    project_url: str
    field_values: list[FieldValue] = field(default_factory=list)

    @property
    def status(self) -> str | None:
        """Value of the field named exactly "Status", if the item has one."""
        for fv in self.field_values:
            if fv.field_name == STATUS_FIELD_NAME:
                return fv.value
        return None

    @property
    def link(self) -> str:
        return self.url or self.project_url


@dataclass(frozen=True)
class StatusOption:
    id: str
    name: str


@dataclass(frozen=True)
class StatusField:
    """The single-select "Status" field of a project."""

    id: str
    options: list[StatusOption]

    def find_option(self, name: str) -> StatusOption | None:
        """Case-insensitive lookup of an option by name."""
        lower = name.lower()
        for option in self.options:
            if option.name.lower() == lower:
                return option
        return None


@dataclass(frozen=True)
class IssueProjectItem:
    """An issue's membership in one project."""

    id: str
    project_id: str
    status_field: StatusField | None


@dataclass(frozen=True)
class IssueDetail:
    id: str
    project_items: list[IssueProjectItem]

    def item_in_project(self, project_id: str) -> IssueProjectItem | None:
        for item in self.project_items:
            if item.project_id == project_id:
                return item
        return None


class ProjectsClient:
    """Read-only Projects V2 queries made on behalf of an App installation."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    async def get_item(self, item_id: str, installation_id: int) -> ItemDetail:
        """Fetch title, URL, parent project and field values for a project item."""
        data = await self._github.graphql(QUERY_ITEM_DETAIL, {"id": item_id}, installation_id)
        node = data["node"]
        content = node.get("content") or {}
        project = node["project"]

        field_values = [
            FieldValue(
                field_name=(fv.get("field") or {}).get("name"),
                value=fv.get("name"),
            )
            for fv in node["fieldValues"]["nodes"]
            if fv
        ]

        item = ItemDetail(
            title=content.get("title", ""),
            url=content.get("url"),
            project_title=project["title"],
            project_url=project["url"],
            field_values=field_values,
        )
        logger.info("projects.fetched_item", item_id=item_id, title=item.title, status=item.status)
        return item

    async def get_issue(self, issue_id: str, installation_id: int) -> IssueDetail:
        """Fetch the project items an issue belongs to, with each project's Status field."""
        data = await self._github.graphql(QUERY_ISSUE_DETAIL, {"id": issue_id}, installation_id)
        node = data["node"]

        items = []
        for item in node["projectItems"]["nodes"]:
            project = item["project"]
            items.append(
                IssueProjectItem(
                    id=item["id"],
                    project_id=project["id"],
                    status_field=self._parse_status_field(project.get("field")),
                )
            )

        logger.info("projects.fetched_issue", issue_id=issue_id, project_items=len(items))
        return IssueDetail(id=node["id"], project_items=items)

    @staticmethod
    def _parse_status_field(node: dict | None) -> StatusField | None:
        """Parse the Status field node.

        A field named "Status" that is not single-select comes back as an
        empty object from the inline fragment, and is treated as absent.
        """
        if not node or "id" not in node or "options" not in node:
            return None
        return StatusField(
            id=node["id"],
            options=[StatusOption(id=opt["id"], name=opt["name"]) for opt in node["options"]],
        )
