"""
Fetches raw (base64 encoded) file content for a path at a revision.
Cache first, then the hosting API, falling back to the blob API for large files.
"""

import asyncio
import base64
import binascii
import logging
from typing import Awaitable, Optional, TypeVar

from trace_enhancer.shared.constants import FILE_CACHE_KEY_PREFIX
from trace_enhancer.shared.errors import (
    DeadlineExceededError,
    DecodeError,
    EmptyContentError,
    FetchError,
    HostingAPIError,
)
from trace_enhancer.shared.interfaces import IHostingClient, ISharedStore
from trace_enhancer.shared.models import Service
from trace_enhancer.shared.rate_limit_guard import RateLimitGuard

logger = logging.getLogger(__name__)

T = TypeVar("T")


def file_cache_key(file_path: str, revision: str) -> str:
    return f"{FILE_CACHE_KEY_PREFIX}:{revision}:{file_path}"


class ContentFetcher:
    """Rate-limit aware, write-through cached file fetcher."""

    def __init__(self, store: ISharedStore, guard: RateLimitGuard):
        self._store = store
        self._guard = guard

    async def fetch_file_content(
        self,
        client: IHostingClient,
        service: Service,
        file_path: str,
        revision: str,
        deadline: Optional[float] = None,
    ) -> bytes:
        """Return the encoded bytes of file_path at revision.

        deadline is an event loop time; in-flight requests are abandoned
        when it passes. Raises RateLimitedError, FetchError or
        ServiceStateError.
        """
        repo_path = service.repo_path
        await self._guard.check(repo_path)

        key = file_cache_key(file_path, revision)
        cached = await self._read_cache(key)
        if cached:
            return cached

        encoded = await self._download(client, service, file_path, revision, deadline)
        data = encoded.encode("utf-8")
        await self._write_cache(key, data)
        return data

    async def _download(
        self,
        client: IHostingClient,
        service: Service,
        file_path: str,
        revision: str,
        deadline: Optional[float],
    ) -> str:
        repo_path = service.repo_path
        try:
            response = await self._call(
                client.get_file_content(repo_path, file_path, revision), deadline
            )
        except DeadlineExceededError:
            raise
        except Exception as e:
            await self._on_failure(service, file_path, e)
            raise FetchError(f"Failed to fetch {file_path} from {repo_path}: {e}") from e

        if response is not None:
            await self._guard.observe_quota(repo_path, response.rate_remaining)

        if response is None or (response.content is None and not response.sha):
            raise EmptyContentError(
                f"GitHub returned empty content for {file_path} in {repo_path}"
            )

        if not response.needs_blob_fetch:
            return response.content

        # Files too large for the contents API are fetched as a blob
        logger.debug(f"{file_path} has no inline content, fetching blob {response.sha}")
        try:
            return await self._call(client.get_blob(repo_path, response.sha), deadline)
        except DeadlineExceededError:
            raise
        except Exception as e:
            await self._on_failure(service, file_path, e)
            raise FetchError(f"Failed to fetch blob for {file_path} from {repo_path}: {e}") from e

    async def _call(self, awaitable: Awaitable[T], deadline: Optional[float]) -> T:
        """Await a hosting API call, bounded by the caller's deadline."""
        if deadline is None:
            return await awaitable
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            # Close the unstarted coroutine so no call is made
            close = getattr(awaitable, "close", None)
            if close is not None:
                close()
            raise DeadlineExceededError("Deadline passed before the request was sent")
        return await asyncio.wait_for(awaitable, timeout=remaining)

    async def _on_failure(self, service: Service, file_path: str, error: Exception) -> None:
        if isinstance(error, HostingAPIError):
            await self._guard.observe_quota(service.repo_path, error.rate_remaining)
        logger.warning(f"GitHub fetch failed for {service.repo_path}/{file_path}: {error!r}")
        await self._guard.record_failure(service)

    async def _read_cache(self, key: str) -> Optional[bytes]:
        try:
            return await self._store.get_bytes(key)
        except Exception as e:
            logger.warning(f"File cache read failed for {key}, treating as miss: {e}")
            return None

    async def _write_cache(self, key: str, data: bytes) -> None:
        try:
            await self._store.set_bytes(key, data)
        except Exception as e:
            logger.error(f"File cache write failed for {key}: {e}")


def decode_content(raw: bytes) -> str:
    """Decode base64 file content as returned by the hosting API.

    Line breaks inside the base64 payload are ignored; any other character
    outside the base64 alphabet is an error. Raises DecodeError if the
    payload is malformed or decodes to nothing.
    """
    try:
        decoded = base64.b64decode(raw.replace(b"\n", b"").replace(b"\r", b""), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 file content: {e}") from e
    if not decoded:
        raise DecodeError("File content decoded to nothing")
    return decoded.decode("utf-8", errors="replace")
