"""
Exception hierarchy for the enhancement pipeline.

    EnhancementError
    ├── TraceParseError        (fatal: trace is unusable, raw text kept)
    ├── ResolutionError        (fatal: service/workspace/token/revision lookup failed)
    ├── RateLimitedError       (per frame: guard denied the call, no network access)
    ├── FetchError             (per frame: hosting API or network failure)
    │   ├── EmptyContentError
    │   └── DeadlineExceededError
    ├── ServiceStateError      (per frame: killswitch transition could not be persisted)
    └── DecodeError            (per frame: content could not be decoded)

HostingAPIError is raised by hosting clients and wrapped by the fetcher.
"""

from typing import Optional


class EnhancementError(Exception):
    """Base class for every error raised by the enhancement pipeline."""


class TraceParseError(EnhancementError):
    """Raw trace is neither JSON frames nor a recognizable text trace."""

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class ResolutionError(EnhancementError, LookupError):
    """Service, workspace, token, revision or configuration lookup failed outright."""


class RateLimitedError(EnhancementError):
    """Hosting API quota is exhausted; the call was not attempted."""

    def __init__(self, repo_path: str):
        super().__init__(f"Exceeded GitHub rate limit for {repo_path}")
        self.repo_path = repo_path


class FetchError(EnhancementError):
    """Fetching file content from the hosting API failed."""


class EmptyContentError(FetchError):
    """Hosting API returned no content for the requested file."""


class DeadlineExceededError(FetchError):
    """Caller deadline elapsed before or during the fetch."""


class ServiceStateError(EnhancementError):
    """Moving a service into its error state could not be persisted."""


class DecodeError(EnhancementError):
    """Fetched content is not valid base64 or decodes to nothing."""


class HostingAPIError(Exception):
    """Error response or transport failure from the hosting API."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        rate_remaining: Optional[int] = None,
    ):
        super().__init__(message)
        self.status = status
        self.rate_remaining = rate_remaining
