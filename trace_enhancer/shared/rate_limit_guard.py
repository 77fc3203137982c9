"""
Circuit breaker for hosting API quota and repeated fetch failures.
Stops calls while the API quota is exhausted and disables services that keep failing.
"""

import logging
from typing import Optional

from .config import EnhancementConfig
from .constants import (
    FAILURE_COUNT_KEY_PREFIX,
    KILLSWITCH_MESSAGE,
    RATE_LIMIT_KEY_PREFIX,
)
from .errors import RateLimitedError, ServiceStateError
from .interfaces import IConfigurationStore, ISharedStore
from .models import Service, ServiceStatus, ServiceTransition

logger = logging.getLogger(__name__)


def evaluate_killswitch(
    status: ServiceStatus, failure_count: int, threshold: int
) -> ServiceTransition:
    """Decide whether a service moves to the error state.

    Fires only on the increment that reaches the threshold. The shared
    counter hands each count to exactly one caller, so concurrent callers
    holding stale healthy snapshots never trigger a second transition.
    """
    if status == ServiceStatus.HEALTHY and failure_count == threshold:
        return ServiceTransition(
            status=ServiceStatus.ERROR,
            triggered=True,
            messages=(KILLSWITCH_MESSAGE,),
        )
    return ServiceTransition(status=status)


def rate_limit_key(repo_path: str) -> str:
    return f"{RATE_LIMIT_KEY_PREFIX}:{repo_path}"


def failure_count_key(service_id: int) -> str:
    return f"{FAILURE_COUNT_KEY_PREFIX}:{service_id}"


class RateLimitGuard:
    """Shared quota flag and per-service failure counter.

    State lives in the shared store so every worker sees it. Two workers
    may both pass check() before either sets the flag; one extra call each
    is accepted.
    """

    def __init__(
        self,
        store: ISharedStore,
        config_store: IConfigurationStore,
        config: Optional[EnhancementConfig] = None,
    ):
        self._store = store
        self._config_store = config_store
        self._config = config or EnhancementConfig()

    async def is_exhausted(self, repo_path: str) -> bool:
        return await self._store.get_flag(rate_limit_key(repo_path))

    async def check(self, repo_path: str) -> None:
        """Raise RateLimitedError if the quota flag is set for this repo."""
        if await self.is_exhausted(repo_path):
            raise RateLimitedError(repo_path)

    async def observe_quota(self, repo_path: str, remaining: Optional[int]) -> bool:
        """Set the quota flag when the API reports nothing left. Returns True if set."""
        if remaining is None or remaining > 0:
            return False
        logger.warning(
            f"GitHub rate limit hit for {repo_path} - pausing calls for "
            f"{self._config.rate_limit_ttl_seconds:.0f}s"
        )
        await self._store.set_flag(
            rate_limit_key(repo_path), self._config.rate_limit_ttl_seconds
        )
        return True

    async def record_failure(self, service: Service) -> ServiceTransition:
        """Count a failed fetch and trip the killswitch at the threshold.

        The caller's Service snapshot is moved to the error state once the
        transition is persisted. If persisting fails the count is still
        consumed; the service trips again once the failure window resets.
        """
        count = await self._store.increment(
            failure_count_key(service.id), self._config.failure_window_seconds
        )
        transition = evaluate_killswitch(
            service.status, count, self._config.killswitch_threshold
        )
        if not transition.triggered:
            return transition

        logger.critical(
            f"KILLSWITCH TRIPPED: service {service.name} (id={service.id}) "
            f"failed {count} fetches >= {self._config.killswitch_threshold}"
        )
        try:
            await self._config_store.update_service_error_state(
                service.id, list(transition.messages)
            )
        except Exception as e:
            raise ServiceStateError(
                f"Failed to move service {service.id} to error state: {e}"
            ) from e

        service.status = transition.status
        service.error_messages = list(transition.messages)
        return transition
