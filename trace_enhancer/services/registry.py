"""
Service Registry: resolves the service, workspace and hosting client for
an error event.

A service that is missing, has no repository configured, is in the error
state, or whose workspace has no GitHub token is "not configured": the
registry returns None and enhancement is skipped. A lookup that fails
outright raises ResolutionError.
"""

import logging
from typing import Callable, Optional

from trace_enhancer.services.models import ServiceContext
from trace_enhancer.shared.errors import ResolutionError
from trace_enhancer.shared.interfaces import IConfigurationStore, IHostingClient
from trace_enhancer.shared.models import IntegrationType

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], IHostingClient]


class ServiceRegistry:
    """Builds a ServiceContext from the configuration store."""

    def __init__(self, config_store: IConfigurationStore, client_factory: ClientFactory):
        self._config_store = config_store
        self._client_factory = client_factory

    async def resolve(self, project_id: int, service_name: str) -> Optional[ServiceContext]:
        """Return the context for (project_id, service_name), or None if not configured."""
        try:
            service = await self._config_store.find_service(project_id, service_name)
        except Exception as e:
            raise ResolutionError(
                f"Failed to look up service {service_name!r} in project {project_id}: {e}"
            ) from e

        if service is None:
            logger.debug(f"No service {service_name!r} in project {project_id}")
            return None
        if not service.has_repo():
            logger.debug(f"Service {service_name!r} has no repository configured")
            return None
        if not service.is_healthy:
            logger.info(f"Service {service_name!r} is in {service.status.value} state, skipping")
            return None

        try:
            workspace = await self._config_store.find_workspace_for_project(project_id)
        except Exception as e:
            raise ResolutionError(f"Failed to look up workspace for project {project_id}: {e}") from e
        if workspace is None:
            logger.warning(f"No workspace owns project {project_id}")
            return None

        try:
            token = await self._config_store.get_workspace_access_token(
                workspace, IntegrationType.GITHUB
            )
        except Exception as e:
            raise ResolutionError(
                f"Failed to load GitHub token for workspace {workspace.id}: {e}"
            ) from e
        if not token:
            logger.debug(f"Workspace {workspace.id} has no GitHub integration")
            return None

        try:
            client = self._client_factory(token)
        except Exception as e:
            raise ResolutionError(f"Failed to create GitHub client: {e}") from e

        return ServiceContext(service=service, workspace=workspace, client=client)
