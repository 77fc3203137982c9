"""
Abstract interfaces (Ports) for the trace enhancer.
Following Dependency Inversion Principle - depend on abstractions, not concretions.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from .models import (
    FileContent,
    IntegrationType,
    Service,
    SystemConfiguration,
    Workspace,
)


class IHostingClient(ABC):
    """Interface for the source hosting API (GitHub)."""

    @abstractmethod
    async def get_file_content(
        self, repo_path: str, file_path: str, revision: str
    ) -> Optional[FileContent]:
        """Fetch a file through the inline content endpoint.

        Raises HostingAPIError on error responses; the error carries the
        remaining quota when the API reported one.
        """

    @abstractmethod
    async def get_blob(self, repo_path: str, sha: str) -> str:
        """Fetch base64 content of a blob by its sha."""

    @abstractmethod
    async def get_latest_commit(self, repo_path: str) -> str:
        """Return the sha of the newest commit on the default branch."""


class ISharedStore(ABC):
    """Interface for the cache/store shared by every enhancement worker.

    Implementations must be safe for concurrent callers; no cross-call
    locking is assumed.
    """

    @abstractmethod
    async def get_bytes(self, key: str) -> Optional[bytes]:
        """Return cached bytes, or None on a miss."""

    @abstractmethod
    async def set_bytes(self, key: str, value: bytes) -> None:
        """Store bytes without expiry."""

    @abstractmethod
    async def get_flag(self, key: str) -> bool:
        """Return True if the flag is set and not expired."""

    @abstractmethod
    async def set_flag(self, key: str, ttl_seconds: float) -> None:
        """Set a flag that clears itself after ttl_seconds."""

    @abstractmethod
    async def increment(self, key: str, ttl_seconds: Optional[float] = None) -> int:
        """Atomically increment a counter and return the new value.

        ttl_seconds applies when the counter is created.
        """

    @abstractmethod
    async def cached_eval(
        self,
        key: str,
        soft_ttl_seconds: float,
        hard_ttl_seconds: float,
        compute: Callable[[], Awaitable[str]],
    ) -> str:
        """Return a cached value, recomputing it per the soft/hard TTL policy."""


class IConfigurationStore(ABC):
    """Interface for workspace, service and system configuration lookups."""

    @abstractmethod
    async def find_service(self, project_id: int, name: str) -> Optional[Service]:
        """Return the service named `name` in the project, or None."""

    @abstractmethod
    async def get_system_configuration(self) -> SystemConfiguration:
        """Return the global system configuration."""

    @abstractmethod
    async def update_service_error_state(self, service_id: int, messages: list[str]) -> None:
        """Persist the service's move into the error state."""

    @abstractmethod
    async def find_workspace_for_project(self, project_id: int) -> Optional[Workspace]:
        """Return the workspace owning the project, or None."""

    @abstractmethod
    async def get_workspace_access_token(
        self, workspace: Workspace, integration: IntegrationType
    ) -> Optional[str]:
        """Return the workspace's access token for the integration, or None."""
