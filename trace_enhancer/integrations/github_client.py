"""
GitHub REST client - the three read-only calls the enhancer needs.
Implements: get_file_content, get_blob, get_latest_commit
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from trace_enhancer.shared.config import GitHubConfig
from trace_enhancer.shared.errors import HostingAPIError
from trace_enhancer.shared.interfaces import IHostingClient
from trace_enhancer.shared.models import FileContent

logger = logging.getLogger(__name__)


def _rate_remaining(headers) -> Optional[int]:
    raw = headers.get("X-RateLimit-Remaining")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class GitHubClient(IHostingClient):
    """Token-authenticated GitHub API client."""

    def __init__(self, access_token: str, config: Optional[GitHubConfig] = None):
        self._token = access_token
        self._config = config or GitHubConfig()

    @classmethod
    def factory(cls, config: Optional[GitHubConfig] = None):
        """Return a callable building a client from an access token."""
        def build(access_token: str) -> "GitHubClient":
            return cls(access_token, config)
        return build

    def _headers(self) -> dict:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": self._config.user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def _get_json(self, path: str, params: Optional[dict] = None) -> tuple[Any, Optional[int]]:
        url = f"{self._config.api_base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_seconds)
        try:
            async with aiohttp.ClientSession(headers=self._headers()) as session:
                async with session.get(url, params=params, timeout=timeout) as resp:
                    remaining = _rate_remaining(resp.headers)
                    if resp.status == 404:
                        return None, remaining
                    if resp.status >= 400:
                        text = await resp.text()
                        raise HostingAPIError(
                            f"GitHub {resp.status} for {path}: {text[:200]}",
                            status=resp.status,
                            rate_remaining=remaining,
                        )
                    return await resp.json(), remaining
        except aiohttp.ClientError as e:
            logger.error(f"GitHub request error for {path}: {e}")
            raise HostingAPIError(f"GitHub request failed for {path}: {e}") from e

    async def get_file_content(
        self, repo_path: str, file_path: str, revision: str
    ) -> Optional[FileContent]:
        path = f"/repos/{repo_path}/contents/{quote(file_path.lstrip('/'))}"
        data, remaining = await self._get_json(path, params={"ref": revision})
        if data is None:
            raise HostingAPIError(
                f"{file_path} not found in {repo_path}@{revision}",
                status=404,
                rate_remaining=remaining,
            )
        if not isinstance(data, dict):
            # A directory listing, not a file
            return None
        return FileContent(
            content=data.get("content"),
            sha=data.get("sha"),
            rate_remaining=remaining,
        )

    async def get_blob(self, repo_path: str, sha: str) -> str:
        data, remaining = await self._get_json(f"/repos/{repo_path}/git/blobs/{sha}")
        if not data:
            raise HostingAPIError(
                f"Blob {sha} not found in {repo_path}", status=404, rate_remaining=remaining
            )
        return data.get("content") or ""

    async def get_latest_commit(self, repo_path: str) -> str:
        data, remaining = await self._get_json(
            f"/repos/{repo_path}/commits", params={"per_page": "1"}
        )
        if not data:
            raise HostingAPIError(
                f"No commits found for {repo_path}", status=404, rate_remaining=remaining
            )
        return data[0]["sha"]
