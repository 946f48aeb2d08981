import httpx
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from interntrack.core.config import settings
from interntrack.core.exceptions import InternalError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)


class GitHubTransientError(Exception):
    """Network failure, rate limit or 5xx: worth another attempt."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GitHubClient:
    """Client for the GitHub REST endpoints used by the metrics cache."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_base_seconds: float = 0.5,
        backoff_max_seconds: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "InternTrack-Analytics",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("⚠️ No GitHub token configured, requests are unauthenticated and heavily rate limited")

        self.max_retries = max(1, max_retries if max_retries is not None else settings.GITHUB_MAX_RETRIES)
        self.backoff_base_seconds = backoff_base_seconds
        self.backoff_max_seconds = backoff_max_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.GITHUB_API_URL,
            headers=self.headers,
            timeout=timeout if timeout is not None else settings.GITHUB_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, path: str, params: Optional[Dict[str, Any]], context: str) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            raise GitHubTransientError(f"GitHub request failed for {context}: {e}") from e

        logger.debug(f"GitHub API response status: {response.status_code} for {path}")

        if response.status_code == 404:
            raise NotFoundError(f"GitHub resource not found: {context}", extra={"repository": context})
        if response.status_code == 401:
            raise UnauthorizedError("GitHub rejected the configured credentials", extra={"repository": context})
        if response.status_code == 429 or response.status_code >= 500:
            raise GitHubTransientError(
                f"GitHub API error {response.status_code} for {context}",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise InternalError(
                f"GitHub API error {response.status_code} for {context}: {response.text[:200]}",
                extra={"repository": context, "status_code": response.status_code},
            )
        return response.json()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, context: str = "") -> Any:
        """GET with retries on transient failures; everything else maps straight to the taxonomy."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_retries),
                wait=wait_exponential(multiplier=self.backoff_base_seconds, max=self.backoff_max_seconds),
                retry=retry_if_exception_type(GitHubTransientError),
                reraise=True,
            ):
                with attempt:
                    payload = await self._send(path, params, context)
        except GitHubTransientError as e:
            logger.error(f"GitHub request gave up after {self.max_retries} attempt(s): {e}")
            raise InternalError(str(e), extra={"repository": context, "status_code": e.status_code}) from e
        return payload

    async def list_commits(
        self,
        owner: str,
        repo: str,
        author: str,
        since: datetime,
        per_page: Optional[int] = None,
        max_pages: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List commits by `author` in `owner/repo` since the given time.

        Pages are followed until a short page or `max_pages` is reached.
        """
        per_page = per_page or settings.GITHUB_PER_PAGE
        max_pages = max_pages or settings.GITHUB_MAX_PAGES
        full_name = f"{owner}/{repo}"
        commits: List[Dict[str, Any]] = []

        for page in range(1, max_pages + 1):
            batch = await self._get(
                f"/repos/{owner}/{repo}/commits",
                params={
                    "author": author,
                    "since": since.strftime("%Y-%m-%dT%H:%M:%SZ"),
                    "per_page": per_page,
                    "page": page,
                },
                context=full_name,
            )
            if not isinstance(batch, list):
                raise InternalError(f"Unexpected commit listing payload for {full_name}", extra={"repository": full_name})
            commits.extend(batch)
            if len(batch) < per_page:
                break

        return commits

    async def get_commit(self, owner: str, repo: str, sha: str) -> Dict[str, Any]:
        """Commit detail, including `stats.additions` and `stats.deletions`."""
        return await self._get(f"/repos/{owner}/{repo}/commits/{sha}", context=f"{owner}/{repo}@{sha}")

    async def get_user(self, username: str) -> Dict[str, Any]:
        return await self._get(f"/users/{username}", context=f"user {username}")

    async def verify_username(self, username: str) -> bool:
        try:
            await self.get_user(username)
            return True
        except NotFoundError:
            logger.warning(f"GitHub username {username} does not exist")
            return False
