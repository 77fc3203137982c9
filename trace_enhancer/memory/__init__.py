"""Shared store implementations."""

from trace_enhancer.memory.store import InMemorySharedStore

__all__ = ["InMemorySharedStore"]
