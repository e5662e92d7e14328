"""Process-wide collaborators shared by every webhook request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from slack_sdk import WebClient

from boardwatch.db import init_db
from boardwatch.github.client import GitHubClient
from boardwatch.github.projects import ProjectsClient
from boardwatch.scheduling.store import ScheduleStore
from boardwatch.slack.notifier import SlackNotifier

if TYPE_CHECKING:
    from boardwatch.config import Settings


@dataclass(frozen=True)
class Services:
    """Configuration plus remote collaborators, built once at startup.

    Nothing here is mutated while requests are served.
    """

    settings: Settings
    github: GitHubClient
    projects: ProjectsClient
    notifier: SlackNotifier
    store: ScheduleStore


def build_services(settings: Settings) -> Services:
    """Wire up the real GitHub, Slack and database collaborators."""
    settings.boardwatch_data_dir.mkdir(parents=True, exist_ok=True)
    engine = init_db(settings.database_path)

    github = GitHubClient(settings)
    return Services(
        settings=settings,
        github=github,
        projects=ProjectsClient(github),
        notifier=SlackNotifier(WebClient(token=settings.slack_bot_token), settings.slack_channel_id),
        store=ScheduleStore(engine),
    )
