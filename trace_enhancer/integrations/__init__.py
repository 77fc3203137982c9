"""Hosting API integrations."""

from trace_enhancer.integrations.github_client import GitHubClient

__all__ = ["GitHubClient"]
