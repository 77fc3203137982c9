"""
Named constants: replaces magic numbers throughout the codebase.

All tunable limits and thresholds are defined here as named constants
with descriptive names. Runtime overrides go through shared.config.
"""

# ── Enhancement Loop ─────────────────────────────────────────

MAX_ENHANCED_DEPTH = 5
"""Only the first N frames of a trace are looked up in the repository.
Frames past this depth are returned unchanged with no fetch attempted."""

CONTEXT_LINES = 5
"""Radius of the source window around the failing line."""

# ── Rate Limiting / Killswitch ───────────────────────────────

KILLSWITCH_THRESHOLD = 20
"""Failed fetches for one service before it is moved to the error state."""

KILLSWITCH_MESSAGE = "Too many errors enhancing errors - Check service configuration."
"""Diagnostic message persisted with the service error state."""

DEFAULT_RATE_LIMIT_TTL_SECONDS = 60.0
"""Lifetime of the 'quota exhausted' flag once the hosting API reports zero remaining."""

DEFAULT_FAILURE_WINDOW_SECONDS = 3600.0
"""Lifetime of a service failure counter, measured from its first increment."""

# ── Revision Cache ───────────────────────────────────────────

REVISION_SOFT_TTL_SECONDS = 5.0
"""After this age a cached default-branch commit may be refreshed in the background."""

REVISION_HARD_TTL_SECONDS = 24 * 60 * 60.0
"""A cached default-branch commit is never served past this age."""

COMMIT_SHA_PATTERN = r"\b[0-9a-f]{5,40}\b"
"""Versions containing a hex token like this are used as the revision directly."""

# ── Store Keys ───────────────────────────────────────────────

RATE_LIMIT_KEY_PREFIX = "github-rate-limit-exceeded"
FAILURE_COUNT_KEY_PREFIX = "service-error-count"
REVISION_KEY_PREFIX = "git-main-hash"
FILE_CACHE_KEY_PREFIX = "github-file"

# ── File Cache ───────────────────────────────────────────────

MAX_CACHED_FILES = 1024
"""File contents kept by the in-process store before the least recently used are evicted."""
