"""Application configuration via environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All boardwatch configuration, loaded once from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # --- GitHub App ---
    github_app_id: str = Field(description="GitHub App ID used to mint installation tokens")
    github_private_key: str = Field(description="PEM-encoded GitHub App private key")
    github_webhook_secret: str = Field(description="HMAC shared secret for webhook signatures")

    # --- Watched target ---
    github_project_id: str = Field(description="GraphQL node ID of the watched project")
    github_project_field_id: str = Field(description="GraphQL node ID of the watched project field")
    github_repository: str = Field(description="Watched repository in owner/repo format")

    # --- Slack ---
    slack_bot_token: str = Field(description="Slack bot OAuth token (xoxb-)")
    slack_channel_id: str = Field(description="Slack channel ID for status notifications")

    # --- App ---
    boardwatch_log_level: str = Field(default="INFO", description="Log level")
    boardwatch_data_dir: Path = Field(default=Path("data"), description="Directory holding the scheduled-move database")

    @property
    def database_path(self) -> Path:
        return self.boardwatch_data_dir / "boardwatch.db"

    @property
    def webhook_secret_bytes(self) -> bytes:
        return self.github_webhook_secret.encode("utf-8")


def get_settings() -> Settings:
    """Create and return settings instance."""
    return Settings()  # type: ignore[call-arg]
