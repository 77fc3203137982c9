"""
Service context, everything an enhancement call needs about the service
that produced an error: its configuration, owning workspace and an
authenticated hosting client.
"""

from dataclasses import dataclass

from trace_enhancer.shared.interfaces import IHostingClient
from trace_enhancer.shared.models import Service, Workspace


@dataclass
class ServiceContext:
    """Resolved service plus the client used to read its repository."""
    service: Service
    workspace: Workspace
    client: IHostingClient

    @property
    def repo_path(self) -> str:
        return self.service.repo_path
