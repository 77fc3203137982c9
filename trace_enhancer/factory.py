"""
Wiring - builds an EnhancementOrchestrator from configuration.
"""

import logging
from typing import Optional

from trace_enhancer.enhancement.engine import EnhancementOrchestrator
from trace_enhancer.integrations.github_client import GitHubClient
from trace_enhancer.memory.store import InMemorySharedStore
from trace_enhancer.shared.config import AppConfig, load_config
from trace_enhancer.shared.interfaces import IConfigurationStore, ISharedStore
from trace_enhancer.shared.logging_setup import configure_logging

logger = logging.getLogger(__name__)


def create_enhancer(
    config_store: IConfigurationStore,
    store: Optional[ISharedStore] = None,
    config: Optional[AppConfig] = None,
    setup_logging: bool = False,
) -> EnhancementOrchestrator:
    """Build an orchestrator backed by GitHub.

    Without a store an in-process one is used, which only shares rate-limit
    state within this process.
    """
    config = config or load_config()
    if setup_logging:
        configure_logging(config)
    if store is None:
        logger.warning("No shared store given - rate limit state is process-local")
        store = InMemorySharedStore()
    return EnhancementOrchestrator(
        config_store=config_store,
        store=store,
        client_factory=GitHubClient.factory(config.github),
        config=config.enhancement,
    )
