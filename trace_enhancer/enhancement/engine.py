"""
Enhancement engine - drives one error event from raw trace to enhanced frames.

  parse -> resolve service -> resolve revision -> per frame:
      rewrite path -> fetch -> decode -> extract context window

Only parse and top-level resolution failures are raised. Every per-frame
failure leaves that frame as it was and the walk continues.
"""

import logging
import re
import uuid
from typing import Optional

from trace_enhancer.enhancement.content_fetcher import ContentFetcher, decode_content
from trace_enhancer.enhancement.context_window import extract_context_window
from trace_enhancer.enhancement.path_resolver import resolve_repo_path
from trace_enhancer.enhancement.revision_resolver import RevisionResolver
from trace_enhancer.parsing.stack_trace_parser import parse_stack_trace
from trace_enhancer.services.models import ServiceContext
from trace_enhancer.services.registry import ClientFactory, ServiceRegistry
from trace_enhancer.shared.config import EnhancementConfig
from trace_enhancer.shared.errors import (
    DecodeError,
    EnhancementError,
    RateLimitedError,
    ResolutionError,
    ServiceStateError,
)
from trace_enhancer.shared.interfaces import IConfigurationStore, ISharedStore
from trace_enhancer.shared.logging_setup import bind_event_id
from trace_enhancer.shared.models import (
    EnhancementResult,
    ErrorObject,
    FrameOutcome,
    FrameResult,
)
from trace_enhancer.shared.rate_limit_guard import RateLimitGuard
from trace_enhancer.shared.schemas import Frame

logger = logging.getLogger(__name__)


class EnhancementOrchestrator:
    """
    Attaches repository source context to the frames of an error's stack trace.

    Frames are handled one after another; only the first
    `max_enhanced_depth` frames are looked up. The orchestrator keeps no
    state between calls; shared state lives in the injected store.
    """

    def __init__(
        self,
        config_store: IConfigurationStore,
        store: ISharedStore,
        client_factory: ClientFactory,
        config: Optional[EnhancementConfig] = None,
    ):
        self._config = config or EnhancementConfig()
        self._config_store = config_store
        self._registry = ServiceRegistry(config_store, client_factory)
        self._guard = RateLimitGuard(store, config_store, self._config)
        self._revisions = RevisionResolver(store, self._guard, self._config)
        self._fetcher = ContentFetcher(store, self._guard)

    @property
    def guard(self) -> RateLimitGuard:
        return self._guard

    async def enhance(
        self,
        raw_trace: str,
        project_id: int,
        error_object: Optional[ErrorObject],
        service_name: str,
        service_version: str,
        deadline: Optional[float] = None,
    ) -> Optional[EnhancementResult]:
        """Parse raw_trace and enhance its frames.

        Returns None when enhancement does not apply (no service name,
        service or token not configured). Raises TraceParseError for an
        unusable trace and ResolutionError when a lookup fails outright.
        """
        frames = parse_stack_trace(raw_trace)
        return await self.enhance_frames(
            frames, project_id, error_object, service_name, service_version, deadline
        )

    async def enhance_frames(
        self,
        frames: list[Frame],
        project_id: int,
        error_object: Optional[ErrorObject],
        service_name: str,
        service_version: str,
        deadline: Optional[float] = None,
    ) -> Optional[EnhancementResult]:
        """Enhance already structured frames. See enhance()."""
        event_id = str(error_object.id) if error_object else uuid.uuid4().hex[:12]
        with bind_event_id(event_id):
            return await self._enhance(
                frames, project_id, service_name, service_version, deadline
            )

    async def _enhance(
        self,
        frames: list[Frame],
        project_id: int,
        service_name: str,
        service_version: str,
        deadline: Optional[float],
    ) -> Optional[EnhancementResult]:
        if not service_name:
            return None

        ctx = await self._registry.resolve(project_id, service_name)
        if ctx is None:
            return None

        try:
            revision = await self._revisions.resolve(ctx.client, ctx.repo_path, service_version)
        except RateLimitedError as e:
            logger.warning(f"{e} - returning {len(frames)} frames unchanged")
            return EnhancementResult(
                revision=None,
                results=[FrameResult(f, FrameOutcome.UNCHANGED, "rate_limited") for f in frames],
            )
        except Exception as e:
            raise ResolutionError(
                f"Failed to resolve version {service_version!r} of {ctx.repo_path}: {e}"
            ) from e

        ignored = await self._load_ignored_patterns()

        results = []
        for index, frame in enumerate(frames):
            if index >= self._config.max_enhanced_depth:
                results.append(FrameResult(frame, FrameOutcome.SKIPPED, "beyond_depth"))
                continue
            results.append(await self._enhance_frame(ctx, frame, revision, ignored, deadline))

        result = EnhancementResult(revision=revision, results=results)
        logger.info(
            f"Enhanced trace for {service_name}@{revision[:12]}: "
            f"{result.count(FrameOutcome.ENHANCED)} enhanced, "
            f"{result.count(FrameOutcome.UNCHANGED)} unchanged, "
            f"{result.count(FrameOutcome.SKIPPED)} skipped"
        )
        return result

    async def _load_ignored_patterns(self) -> list[re.Pattern]:
        try:
            system_config = await self._config_store.get_system_configuration()
        except Exception as e:
            raise ResolutionError(f"Failed to load system configuration: {e}") from e

        patterns = []
        for expr in system_config.ignored_files:
            try:
                patterns.append(re.compile(expr))
            except re.error as e:
                logger.error(f"Invalid ignored file pattern {expr!r}: {e}")
        return patterns

    async def _enhance_frame(
        self,
        ctx: ServiceContext,
        frame: Frame,
        revision: str,
        ignored: list[re.Pattern],
        deadline: Optional[float],
    ) -> FrameResult:
        if not frame.is_locatable:
            logger.warning(f"Cannot enhance frame without file and line: {frame.to_dict()}")
            return FrameResult(frame, FrameOutcome.SKIPPED, "missing_location")

        service = ctx.service
        file_path = resolve_repo_path(frame.file_name, service.build_prefix, service.repo_prefix)
        if any(p.search(file_path) for p in ignored):
            return FrameResult(frame, FrameOutcome.SKIPPED, "ignored")

        try:
            raw = await self._fetcher.fetch_file_content(
                ctx.client, service, file_path, revision, deadline
            )
            text = decode_content(raw)
        except RateLimitedError as e:
            logger.warning(f"{e}, leaving {file_path} unchanged")
            return FrameResult(frame, FrameOutcome.UNCHANGED, "rate_limited")
        except DecodeError as e:
            logger.warning(f"Cannot decode {file_path}@{revision}: {e}")
            return FrameResult(frame, FrameOutcome.UNCHANGED, "decode_failed")
        except ServiceStateError as e:
            logger.error(str(e))
            return FrameResult(frame, FrameOutcome.UNCHANGED, "service_state")
        except EnhancementError as e:
            logger.error(f"Failed to enhance {file_path}:{frame.line_number}: {e}")
            return FrameResult(frame, FrameOutcome.UNCHANGED, "fetch_failed")
        except Exception as e:
            logger.error(f"Unexpected error enhancing {file_path}:{frame.line_number}: {e!r}")
            return FrameResult(frame, FrameOutcome.UNCHANGED, "fetch_failed")

        window = extract_context_window(
            text.split("\n"), frame.line_number, self._config.context_lines
        )
        if window is None:
            return FrameResult(frame, FrameOutcome.UNCHANGED, "line_out_of_range")

        enhanced = Frame(
            file_name=frame.file_name,
            line_number=frame.line_number,
            function_name=frame.function_name,
            error=frame.error,
            source_mapping_metadata=frame.source_mapping_metadata,
            line_content=window.line_content,
            lines_before=window.lines_before,
            lines_after=window.lines_after,
        )
        return FrameResult(enhanced, FrameOutcome.ENHANCED)
