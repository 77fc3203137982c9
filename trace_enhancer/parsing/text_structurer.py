"""
Structures free-form stack trace text into frames.

Handles the formats runtimes print when a trace arrives as plain text
(e.g. an OTEL exception.stacktrace attribute):
  - Python tracebacks    File "/app/main.py", line 10, in handler
  - Node.js / V8         at handler (/app/index.js:12:5)
  - Go panics            main.handler(...)\n\t/app/main.go:12 +0x1d

Frames are returned innermost first for every format.
"""

import logging
import re
from typing import Optional

from trace_enhancer.shared.schemas import Frame

logger = logging.getLogger(__name__)

# File "/var/task/handler.py", line 42, in lambda_handler
_PY_FRAME = re.compile(r'^\s*File "([^"]+)", line (\d+)(?:, in (.+?))?\s*$', re.MULTILINE)

# at functionName (/path/to/file.js:10:5)
# at /path/to/file.js:10:5
_NODE_FRAME = re.compile(r"^\s*at (?:(.+?) \()?(.+?):(\d+):(\d+)\)?\s*$", re.MULTILINE)

# \t/app/main.go:12 +0x1d
_GO_FILE_LINE = re.compile(r"^\t(.+?\.go):(\d+)(?: \+0x[0-9a-f]+)?\s*$")
_GO_CALL_ARGS = re.compile(r"\([^()]*\)$")


def structure_text_stack_trace(text: str) -> list[Frame]:
    """Extract frames from a text trace. Returns [] if no format matches."""
    for parser in (_parse_python, _parse_node, _parse_go):
        frames = parser(text)
        if frames:
            logger.debug(f"Structured {len(frames)} frames with {parser.__name__}")
            return frames
    return []


def _parse_python(text: str) -> list[Frame]:
    matches = list(_PY_FRAME.finditer(text))
    if not matches:
        return []
    error = _python_error_line(text)
    frames = [
        Frame(
            file_name=m.group(1),
            line_number=int(m.group(2)),
            function_name=m.group(3),
            error=error,
        )
        for m in matches
    ]
    # Python prints the most recent call last
    frames.reverse()
    return frames


def _python_error_line(text: str) -> Optional[str]:
    """The exception line is the last unindented line after the frames."""
    for line in reversed(text.strip().splitlines()):
        if line.strip() and not line[:1].isspace():
            if line.startswith("Traceback ("):
                return None
            return line.strip()
    return None


def _parse_node(text: str) -> list[Frame]:
    matches = list(_NODE_FRAME.finditer(text))
    if not matches:
        return []
    header = text[: matches[0].start()].strip()
    error = header or None
    return [
        Frame(
            file_name=m.group(2),
            line_number=int(m.group(3)),
            function_name=m.group(1),
            error=error,
        )
        for m in matches
    ]


def _parse_go(text: str) -> list[Frame]:
    lines = text.splitlines()
    error = None
    for line in lines:
        if line.startswith("panic: "):
            error = line[len("panic: "):].strip()
            break

    frames = []
    previous = ""
    for line in lines:
        m = _GO_FILE_LINE.match(line)
        if m:
            function_name = _GO_CALL_ARGS.sub("", previous.strip()) or None
            frames.append(Frame(
                file_name=m.group(1),
                line_number=int(m.group(2)),
                function_name=function_name,
                error=error,
            ))
        previous = line
    return frames
