"""
Domain models for the trace enhancer.
Pure data classes with no external dependencies (Clean Architecture inner layer).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .schemas import Frame, serialize_frames


class ServiceStatus(Enum):
    """Enhancement health of a deployed service."""
    HEALTHY = "healthy"
    ERROR = "error"


class IntegrationType(Enum):
    """Hosting integrations a workspace can hold tokens for."""
    GITHUB = "GitHub"


class FrameOutcome(Enum):
    """What happened to a single frame during enhancement."""
    ENHANCED = "enhanced"
    UNCHANGED = "unchanged"  # lookup attempted but failed
    SKIPPED = "skipped"      # never looked up


@dataclass
class Service:
    """A deployed unit within a project, as configured by the user."""
    id: int
    project_id: int
    name: str
    repo_path: Optional[str] = None
    build_prefix: Optional[str] = None
    repo_prefix: Optional[str] = None
    status: ServiceStatus = ServiceStatus.HEALTHY
    error_messages: list = field(default_factory=list)

    def has_repo(self) -> bool:
        return bool(self.repo_path)

    @property
    def is_healthy(self) -> bool:
        return self.status == ServiceStatus.HEALTHY


@dataclass
class Workspace:
    """Owner of projects and of hosting integration tokens."""
    id: int
    name: str = ""


@dataclass
class ErrorObject:
    """The error event being enhanced. Only used for log correlation."""
    id: int
    project_id: int = 0
    event: str = ""


@dataclass(frozen=True)
class SystemConfiguration:
    """Global settings that apply to every enhancement call."""
    ignored_files: tuple = ()


@dataclass(frozen=True)
class FileContent:
    """Response of the hosting API's inline content endpoint."""
    content: Optional[str] = None
    sha: Optional[str] = None
    rate_remaining: Optional[int] = None

    @property
    def needs_blob_fetch(self) -> bool:
        """Files too large for the inline endpoint come back empty with a sha."""
        return not self.content and bool(self.sha)


@dataclass(frozen=True)
class ContextWindow:
    """Source lines around the failing line."""
    line_content: str
    lines_before: str
    lines_after: str


@dataclass(frozen=True)
class ServiceTransition:
    """Outcome of a killswitch evaluation."""
    status: ServiceStatus
    triggered: bool = False
    messages: tuple = ()


@dataclass
class FrameResult:
    """A frame as returned to the caller, tagged with how it was produced."""
    frame: Frame
    outcome: FrameOutcome
    reason: str = ""

    def to_dict(self) -> dict:
        return {
            "frame": self.frame.to_dict(),
            "outcome": self.outcome.value,
            "reason": self.reason,
        }


@dataclass
class EnhancementResult:
    """Ordered frames of one enhanced trace."""
    revision: Optional[str]
    results: list = field(default_factory=list)  # list[FrameResult]

    @property
    def frames(self) -> list[Frame]:
        return [r.frame for r in self.results]

    @property
    def serialized(self) -> str:
        return serialize_frames(self.frames)

    def count(self, outcome: FrameOutcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    def to_dict(self) -> dict:
        return {
            "revision": self.revision,
            "results": [r.to_dict() for r in self.results],
            "enhanced": self.count(FrameOutcome.ENHANCED),
            "unchanged": self.count(FrameOutcome.UNCHANGED),
            "skipped": self.count(FrameOutcome.SKIPPED),
        }
