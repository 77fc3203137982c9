"""
Maps a service version string to the commit to read files at.
"""

import logging
import re
from typing import Optional

from trace_enhancer.shared.config import EnhancementConfig
from trace_enhancer.shared.constants import COMMIT_SHA_PATTERN, REVISION_KEY_PREFIX
from trace_enhancer.shared.errors import HostingAPIError
from trace_enhancer.shared.interfaces import IHostingClient, ISharedStore
from trace_enhancer.shared.rate_limit_guard import RateLimitGuard

logger = logging.getLogger(__name__)

_COMMIT_SHA = re.compile(COMMIT_SHA_PATTERN)


def is_commit_sha(version: str) -> bool:
    """True if the version contains a standalone 5-40 char hex token."""
    return bool(version) and _COMMIT_SHA.search(version) is not None


class RevisionResolver:
    """Resolves versions to commits, caching default-branch lookups per repo."""

    def __init__(
        self,
        store: ISharedStore,
        guard: RateLimitGuard,
        config: Optional[EnhancementConfig] = None,
    ):
        self._store = store
        self._guard = guard
        self._config = config or EnhancementConfig()

    async def resolve(self, client: IHostingClient, repo_path: str, version: str) -> str:
        """Return a commit for version.

        Commit-like versions are returned as-is. Anything else resolves to
        the newest default-branch commit, cached with a soft/hard TTL.
        Raises RateLimitedError or HostingAPIError from the lookup.
        """
        if is_commit_sha(version):
            return version

        async def latest_commit() -> str:
            await self._guard.check(repo_path)
            try:
                sha = await client.get_latest_commit(repo_path)
            except HostingAPIError as e:
                await self._guard.observe_quota(repo_path, e.rate_remaining)
                raise
            logger.info(f"Resolved {repo_path} default branch to {sha[:12]}")
            return sha

        return await self._store.cached_eval(
            f"{REVISION_KEY_PREFIX}-{repo_path}",
            self._config.revision_soft_ttl_seconds,
            self._config.revision_hard_ttl_seconds,
            latest_commit,
        )
