"""GitHub repository lookup used by the profile repository passthrough."""

from datetime import datetime

import httpx
from pydantic import BaseModel, ConfigDict

from devconnector.config import Settings, get_settings
from devconnector.errors import RemoteNotFound, RemoteUnavailable
from devconnector.logging import get_logger

logger = get_logger("github")


class RepositorySummary(BaseModel):
    """The subset of a GitHub repository object exposed by the API."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    full_name: str | None = None
    html_url: str
    description: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
    created_at: datetime | None = None


class GitHubRepositoryLookup:
    """
    Lists a GitHub user's public repositories.

    Configuration (API base, token, timeout, page size) is taken from the
    settings passed at construction; ``transport`` lets tests plug in an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "DevConnector/1.0",
        }
        if self.settings.github_token:
            headers["Authorization"] = f"token {self.settings.github_token}"
        return headers

    def list_repositories(
        self, username: str, timeout: float | None = None
    ) -> list[RepositorySummary]:
        """
        Fetch the user's oldest repositories, up to ``github_repo_limit``.

        Args:
            username: GitHub login
            timeout: Seconds before giving up; defaults to ``github_timeout_seconds``

        Raises:
            RemoteNotFound: GitHub answered with a non-200 status
            RemoteUnavailable: GitHub could not be reached or returned garbage
        """
        url = f"{self.settings.github_api_base.rstrip('/')}/users/{username}/repos"
        params = {
            "per_page": self.settings.github_repo_limit,
            "sort": "created",
            "direction": "asc",
        }
        effective_timeout = timeout if timeout is not None else self.settings.github_timeout_seconds

        try:
            with httpx.Client(timeout=effective_timeout, transport=self._transport) as client:
                response = client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error("github_lookup_failed", username=username, error=str(e))
            raise RemoteUnavailable() from e

        if response.status_code != 200:
            logger.info("github_user_not_found", username=username, status=response.status_code)
            raise RemoteNotFound()

        try:
            payload = response.json()
            return [RepositorySummary.model_validate(item) for item in payload]
        except (TypeError, ValueError) as e:
            # JSONDecodeError and pydantic.ValidationError are ValueErrors
            logger.error("github_response_invalid", username=username, error=str(e))
            raise RemoteUnavailable() from e


__all__ = ["GitHubRepositoryLookup", "RepositorySummary"]
