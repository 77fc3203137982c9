"""
Centralized configuration management for the trace enhancer.
Uses environment variables with safe defaults following 12-factor app principles.
"""

import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

from .constants import (
    CONTEXT_LINES,
    DEFAULT_FAILURE_WINDOW_SECONDS,
    DEFAULT_RATE_LIMIT_TTL_SECONDS,
    KILLSWITCH_THRESHOLD,
    MAX_ENHANCED_DEPTH,
    REVISION_HARD_TTL_SECONDS,
    REVISION_SOFT_TTL_SECONDS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnhancementConfig:
    """Immutable tuning for the enhancement pipeline."""
    max_enhanced_depth: int = MAX_ENHANCED_DEPTH
    context_lines: int = CONTEXT_LINES
    killswitch_threshold: int = KILLSWITCH_THRESHOLD
    rate_limit_ttl_seconds: float = DEFAULT_RATE_LIMIT_TTL_SECONDS
    failure_window_seconds: float = DEFAULT_FAILURE_WINDOW_SECONDS
    revision_soft_ttl_seconds: float = REVISION_SOFT_TTL_SECONDS
    revision_hard_ttl_seconds: float = REVISION_HARD_TTL_SECONDS


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub REST API configuration."""
    api_base_url: str = "https://api.github.com"
    request_timeout_seconds: float = 10.0
    user_agent: str = "trace-enhancer"


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration - assembled from environment."""
    enhancement: EnhancementConfig = field(default_factory=EnhancementConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    log_file_dir: str = ""  # Directory for timestamped log files; empty = no file logging
    log_level: str = "INFO"
    environment: str = "production"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}={raw!r}, using {default}")
        return default


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.
    Defaults are used when env vars are not set or cannot be parsed.
    """
    load_dotenv()  # Load .env file if present

    enhancement = EnhancementConfig(
        max_enhanced_depth=_env_int("MAX_ENHANCED_DEPTH", MAX_ENHANCED_DEPTH),
        context_lines=_env_int("CONTEXT_LINES", CONTEXT_LINES),
        killswitch_threshold=_env_int("KILLSWITCH_THRESHOLD", KILLSWITCH_THRESHOLD),
        rate_limit_ttl_seconds=_env_float("RATE_LIMIT_TTL", DEFAULT_RATE_LIMIT_TTL_SECONDS),
        failure_window_seconds=_env_float("FAILURE_WINDOW", DEFAULT_FAILURE_WINDOW_SECONDS),
        revision_soft_ttl_seconds=_env_float("REVISION_SOFT_TTL", REVISION_SOFT_TTL_SECONDS),
        revision_hard_ttl_seconds=_env_float("REVISION_HARD_TTL", REVISION_HARD_TTL_SECONDS),
    )

    github = GitHubConfig(
        api_base_url=os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/"),
        request_timeout_seconds=_env_float("GITHUB_TIMEOUT", 10.0),
        user_agent=os.environ.get("GITHUB_USER_AGENT", "trace-enhancer"),
    )

    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        log_level = "INFO"  # Fail safe

    return AppConfig(
        enhancement=enhancement,
        github=github,
        log_file_dir=os.environ.get("LOG_FILE_DIR", ""),
        log_level=log_level,
        environment=os.environ.get("ENVIRONMENT", "production"),
    )
