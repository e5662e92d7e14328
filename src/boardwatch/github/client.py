"""GitHub REST and GraphQL client, authenticated as a GitHub App installation."""

from __future__ import annotations

import asyncio
from functools import cached_property
from typing import TYPE_CHECKING

import httpx
import structlog
from github import Auth, GithubIntegration

if TYPE_CHECKING:
    from collections.abc import Callable

    from boardwatch.config import Settings

logger = structlog.get_logger()


class GraphQLError(RuntimeError):
    """GitHub answered a GraphQL request with an ``errors`` list."""

    def __init__(self, errors: list) -> None:
        super().__init__(f"GraphQL errors: {errors}")
        self.errors = errors


class GitHubClient:
    """Wrapper around PyGitHub (App auth) and httpx (GraphQL and REST calls).

    Every call names the installation it acts for; an installation access
    token is minted for that call and not kept afterwards.
    """

    GRAPHQL_URL = "https://api.github.com/graphql"

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        token_provider: Callable[[int], str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if settings is None and token_provider is None:
            raise ValueError("GitHubClient needs either settings or a token_provider")
        self._settings = settings
        self._token_provider = token_provider or self._installation_token
        self._transport = transport

    @cached_property
    def integration(self) -> GithubIntegration:
        """PyGitHub integration for minting installation access tokens."""
        auth = Auth.AppAuth(self._settings.github_app_id, self._settings.github_private_key)
        return GithubIntegration(auth=auth)

    def _installation_token(self, installation_id: int) -> str:
        return self.integration.get_access_token(installation_id).token

    async def _headers(self, installation_id: int) -> dict[str, str]:
        token = await asyncio.to_thread(self._token_provider, installation_id)
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    async def _post(self, url: str, payload: dict, installation_id: int) -> dict:
        headers = await self._headers(installation_id)
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(url, json=payload, headers=headers, timeout=30.0)
            response.raise_for_status()
            return response.json()

    async def graphql(self, query: str, variables: dict | None, installation_id: int) -> dict:
        """Execute a GraphQL query against GitHub's API."""
        data = await self._post(
            self.GRAPHQL_URL,
            {"query": query, "variables": variables or {}},
            installation_id,
        )
        if "errors" in data:
            raise GraphQLError(data["errors"])
        return data["data"]

    async def create_reaction(self, reactions_url: str, content: str, installation_id: int) -> None:
        """React to a comment; ``content`` is a GitHub reaction name like ``+1``."""
        await self._post(reactions_url, {"content": content}, installation_id)
        logger.info("github.reaction_created", url=reactions_url, content=content)

    async def create_comment(self, comments_url: str, body: str, installation_id: int) -> None:
        """Post a new comment to an issue's comments URL."""
        await self._post(comments_url, {"body": body}, installation_id)
        logger.info("github.comment_created", url=comments_url)
