"""Stack trace parsing: JSON frames first, plain text tracebacks as fallback."""

from trace_enhancer.parsing.stack_trace_parser import parse_stack_trace
from trace_enhancer.parsing.text_structurer import structure_text_stack_trace

__all__ = [
    "parse_stack_trace",
    "structure_text_stack_trace",
]
