"""
Service resolution for enhancement calls.

Looks up the service behind an error event, its workspace and GitHub
token, and builds the hosting client used to read its repository.
"""

from trace_enhancer.services.models import ServiceContext
from trace_enhancer.services.registry import ServiceRegistry

__all__ = [
    "ServiceContext",
    "ServiceRegistry",
]
