"""
Runtime attachment layer.

Per-thread handles onto the hosted JVM runtime plus the pluggable backend that
performs the reflective primitives.
"""

from .backend import JPypeBackend, RuntimeBackend
from .handle import (
    RuntimeHandle,
    current_runtime,
    detach_runtime,
    get_backend,
    has_runtime,
    set_backend,
    with_runtime,
)

__all__ = [
    "JPypeBackend",
    "RuntimeBackend",
    "RuntimeHandle",
    "current_runtime",
    "detach_runtime",
    "get_backend",
    "has_runtime",
    "set_backend",
    "with_runtime",
]
