"""
Turns a raw stack trace string into ordered frames.

SDKs send traces as a JSON array of frame objects. Anything else is handed
to the text structurer, which understands plain runtime tracebacks.
"""

import logging

from pydantic import ValidationError

from trace_enhancer.parsing.text_structurer import structure_text_stack_trace
from trace_enhancer.shared.errors import TraceParseError
from trace_enhancer.shared.schemas import Frame, frames_from_json

logger = logging.getLogger(__name__)


def parse_stack_trace(raw_trace: str) -> list[Frame]:
    """Parse a raw trace into frames.

    If the JSON decode fails but the text structurer recognizes the trace,
    the JSON error is only logged at DEBUG. If both fail, TraceParseError
    is raised with the JSON error as its cause and the raw text attached.
    """
    try:
        return frames_from_json(raw_trace)
    except ValidationError as json_error:
        frames = structure_text_stack_trace(raw_trace)
        if frames:
            logger.debug(
                f"Trace is not JSON frames ({json_error.error_count()} errors), "
                f"structured {len(frames)} frames from text"
            )
            return frames
        raise TraceParseError(
            f"Stack trace is neither JSON frames nor a recognized text trace: "
            f"{json_error.errors()[0]['msg']}",
            raw_text=raw_trace,
        ) from json_error
