"""
github_client.py — All GitHub REST API interactions.

Responsibilities:
  - Authenticate requests (PAT or unauthenticated)
  - Fetch a user profile and their most recently updated repositories
  - Raise typed exceptions for clean error handling upstream

No retries and no caching here; the lookup orchestrator owns both decisions.
"""

import logging

import httpx

from config import (
    GITHUB_API_BASE,
    GITHUB_REPOS_LIMIT,
    GITHUB_REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)


# ─── Custom Exceptions ────────────────────────────────────────────────────────

class GitHubUserNotFoundError(Exception):
    """Raised when the GitHub username does not exist (404)."""


class GitHubAPIError(Exception):
    """Network failure or unexpected status code from the GitHub API."""


class GitHubAuthError(GitHubAPIError):
    """Raised when the provided token is invalid (401)."""


class GitHubRateLimitError(GitHubAPIError):
    """Raised when the GitHub API rate limit is exceeded (403/429)."""
    def __init__(self, reset_timestamp: int | None = None):
        self.reset_timestamp = reset_timestamp
        super().__init__("GitHub API rate limit exceeded.")


def _parse_reset(value: str | None) -> int | None:
    """X-RateLimit-Reset as an epoch timestamp, or None when absent or malformed."""
    try:
        return int(value) if value else None
    except ValueError:
        return None


# ─── Client ──────────────────────────────────────────────────────────────────

class GitHubClient:
    """
    Thin async wrapper around the GitHub REST API v3.

    Usage:
        client = GitHubClient(token="ghp_...")
        profile = await client.fetch_profile("octocat")
        repos = await client.fetch_repos("octocat")
        await client.close()
    """

    def __init__(self, token: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.http = httpx.AsyncClient(
            base_url=GITHUB_API_BASE,
            headers=headers,
            timeout=GITHUB_REQUEST_TIMEOUT,
            follow_redirects=True,
            transport=transport,
        )

    # ── Internal request helper ───────────────────────────────────────────────

    async def _get_json(self, path: str, params: dict | None = None) -> dict | list:
        """
        Make a GET request to the GitHub API and decode the JSON body.
        Raises typed exceptions for known error codes.
        """
        try:
            response = await self.http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(f"GitHub request failed for {path}: {exc}") from exc

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as exc:
                raise GitHubAPIError(f"GitHub API returned invalid JSON for {path}") from exc
        elif response.status_code == 404:
            raise GitHubUserNotFoundError("GitHub user not found")
        elif response.status_code == 401:
            raise GitHubAuthError("Invalid or expired GitHub token.")
        elif response.status_code in (403, 429):
            raise GitHubRateLimitError(
                reset_timestamp=_parse_reset(response.headers.get("X-RateLimit-Reset"))
            )
        else:
            raise GitHubAPIError(
                f"GitHub API returned {response.status_code} for {path}"
            )

    # ── Public fetch methods ──────────────────────────────────────────────────

    async def fetch_profile(self, username: str) -> dict:
        """Fetch the public user profile."""
        logger.info(f"Fetching profile for: {username}")
        return await self._get_json(f"/users/{username}")

    async def fetch_repos(self, username: str) -> list[dict]:
        """
        Fetch up to GITHUB_REPOS_LIMIT public repositories, most recently updated first.
        An empty list is a valid answer (user with no public repositories).
        """
        logger.info(f"Fetching repos for: {username}")
        try:
            return await self._get_json(
                f"/users/{username}/repos",
                params={"sort": "updated", "per_page": GITHUB_REPOS_LIMIT},
            )
        except GitHubUserNotFoundError as exc:
            raise GitHubAPIError("Failed to fetch repositories") from exc
        except GitHubAPIError as exc:
            logger.warning(f"Repository fetch failed for {username}: {exc}")
            raise GitHubAPIError("Failed to fetch repositories") from exc

    async def close(self) -> None:
        if not self.http.is_closed:
            await self.http.aclose()
