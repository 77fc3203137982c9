"""Extracts the source lines surrounding a failing line."""

from typing import Optional

from trace_enhancer.shared.constants import CONTEXT_LINES
from trace_enhancer.shared.models import ContextWindow


def extract_context_window(
    lines: list[str], line_number: int, radius: int = CONTEXT_LINES
) -> Optional[ContextWindow]:
    """Return the window [L - radius, L + radius] clamped to the file.

    line_number is 1-indexed. Returns None when it falls outside the file,
    in which case the frame should be left as it is.
    """
    total = len(lines)
    if line_number < 1 or line_number > total:
        return None

    first = max(1, line_number - radius)
    last = min(total, line_number + radius)

    before = lines[first - 1:line_number - 1]
    after = lines[line_number:last]
    return ContextWindow(
        line_content=lines[line_number - 1],
        lines_before="\n".join(before),
        lines_after="\n".join(after),
    )
