"""Shared cross-cutting concerns: config, interfaces, models, errors, rate limiting."""

__all__ = [
    "config",
    "constants",
    "errors",
    "interfaces",
    "logging_setup",
    "models",
    "rate_limit_guard",
    "schemas",
]
