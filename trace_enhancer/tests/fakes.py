"""
Test doubles: a GitHub client serving files from memory, a configuration
store, and a controllable clock.
"""

import base64
from typing import Optional

from trace_enhancer.shared.errors import HostingAPIError
from trace_enhancer.shared.interfaces import IConfigurationStore, IHostingClient
from trace_enhancer.shared.models import (
    FileContent,
    IntegrationType,
    SystemConfiguration,
    Workspace,
)

REPO = "acme/checkout"
COMMIT = "a1b2c3d4e5f60718293a4b5c6d7e8f9012345678"


def encode(text: str) -> str:
    """Base64 the way GitHub returns it: wrapped at 60 chars with newlines."""
    raw = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return "\n".join(raw[i:i + 60] for i in range(0, len(raw), 60)) + "\n"


def numbered_source(count: int) -> str:
    return "\n".join(f"line {i}" for i in range(1, count + 1))


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGitHubClient(IHostingClient):
    """Serves files from a dict and records every call."""

    def __init__(self, files: Optional[dict] = None, latest_commit: str = COMMIT):
        self.files = files or {}          # file path -> source text
        self.blobs: dict[str, str] = {}   # sha -> source text
        self.large_files: dict[str, str] = {}  # file path -> sha
        self.latest_commit = latest_commit
        self.rate_remaining: Optional[int] = 4999
        self.fail_with: Optional[Exception] = None
        self.calls: list[tuple] = []

    @property
    def content_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "content"]

    async def get_file_content(self, repo_path, file_path, revision):
        self.calls.append(("content", repo_path, file_path, revision))
        if self.fail_with is not None:
            raise self.fail_with
        if file_path in self.large_files:
            return FileContent(content="", sha=self.large_files[file_path],
                               rate_remaining=self.rate_remaining)
        if file_path not in self.files:
            raise HostingAPIError(f"{file_path} not found", status=404,
                                  rate_remaining=self.rate_remaining)
        return FileContent(content=encode(self.files[file_path]), sha="f" * 40,
                           rate_remaining=self.rate_remaining)

    async def get_blob(self, repo_path, sha):
        self.calls.append(("blob", repo_path, sha))
        return encode(self.blobs[sha])

    async def get_latest_commit(self, repo_path):
        self.calls.append(("commit", repo_path))
        if self.fail_with is not None:
            raise self.fail_with
        return self.latest_commit


class FakeConfigurationStore(IConfigurationStore):
    """In-memory configuration store with a single workspace."""

    def __init__(self, services=None, ignored_files=(), token: Optional[str] = "gh-token"):
        self.services = {(s.project_id, s.name): s for s in (services or [])}
        self.system_configuration = SystemConfiguration(ignored_files=tuple(ignored_files))
        self.workspace = Workspace(id=7, name="acme")
        self.token = token
        self.error_updates: list[tuple[int, list[str]]] = []
        self.fail_update = False

    async def find_service(self, project_id, name):
        return self.services.get((project_id, name))

    async def get_system_configuration(self):
        return self.system_configuration

    async def update_service_error_state(self, service_id, messages):
        if self.fail_update:
            raise RuntimeError("database unavailable")
        self.error_updates.append((service_id, messages))

    async def find_workspace_for_project(self, project_id):
        return self.workspace

    async def get_workspace_access_token(self, workspace, integration):
        assert integration == IntegrationType.GITHUB
        return self.token
