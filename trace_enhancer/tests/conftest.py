"""
Shared test fixtures for the trace enhancer test suite.
"""

import os
import sys

import pytest

# Ensure trace_enhancer is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from trace_enhancer.memory.store import InMemorySharedStore
from trace_enhancer.shared.config import EnhancementConfig
from trace_enhancer.shared.models import Service, ServiceStatus
from trace_enhancer.shared.rate_limit_guard import RateLimitGuard
from trace_enhancer.tests.fakes import (
    REPO,
    FakeClock,
    FakeConfigurationStore,
    FakeGitHubClient,
    numbered_source,
)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemorySharedStore(clock=clock)


@pytest.fixture
def service():
    return Service(
        id=1,
        project_id=42,
        name="checkout",
        repo_path=REPO,
        build_prefix="/build/",
        repo_prefix="src/",
        status=ServiceStatus.HEALTHY,
    )


@pytest.fixture
def config_store(service):
    return FakeConfigurationStore(services=[service])


@pytest.fixture
def enhancement_config():
    return EnhancementConfig()


@pytest.fixture
def guard(store, config_store, enhancement_config):
    return RateLimitGuard(store, config_store, enhancement_config)


@pytest.fixture
def github():
    return FakeGitHubClient(files={
        "src/app/main.go": numbered_source(20),
        "src/app/handler.go": numbered_source(40),
    })
