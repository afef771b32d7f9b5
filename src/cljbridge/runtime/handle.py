"""
Per-thread runtime handles.

The hosted runtime's attach/detach model is thread scoped, so every OS thread
gets its own :class:`RuntimeHandle`, created lazily on the first bridge call
made by that thread and kept in ``threading.local`` storage. Handles are never
shared: each primitive checks that it runs on the thread that attached it.

Usage:
    result = with_runtime(lambda rt: rt.invoke_static("java.lang.Math", "abs", [rt.box(-3)]))
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Sequence, TypeVar

from cljbridge.config.logging_config import get_logger
from cljbridge.errors import AttachmentError, BridgeError
from cljbridge.runtime.backend import JPypeBackend, RuntimeBackend

log = get_logger(__name__)

R = TypeVar("R")

_backend: Optional[RuntimeBackend] = None
_backend_lock = threading.Lock()
_local = threading.local()


def set_backend(backend: Optional[RuntimeBackend]) -> None:
    """Install the process-wide backend. ``None`` restores the JPype default.

    Handles already attached on other threads keep the backend they were
    created with; call :func:`detach_runtime` on those threads first.
    """
    global _backend
    with _backend_lock:
        _backend = backend


def get_backend() -> RuntimeBackend:
    global _backend
    with _backend_lock:
        if _backend is None:
            _backend = JPypeBackend()
        return _backend


class RuntimeHandle:
    """A thread's attachment to the hosted runtime."""

    def __init__(self, backend: RuntimeBackend, thread_id: int) -> None:
        self._backend = backend
        self._thread_id = thread_id
        self._detached = False

    @classmethod
    def attach(cls, backend: RuntimeBackend) -> "RuntimeHandle":
        backend.attach_thread()
        handle = cls(backend, threading.get_ident())
        log.debug("Attached runtime handle on thread %s", threading.current_thread().name)
        return handle

    @property
    def thread_id(self) -> int:
        return self._thread_id

    @property
    def backend(self) -> RuntimeBackend:
        return self._backend

    def _check_thread(self) -> None:
        if self._detached:
            raise BridgeError("Runtime handle used after detach")
        if threading.get_ident() != self._thread_id:
            raise BridgeError(
                f"Runtime handle of thread {self._thread_id} used from thread {threading.get_ident()}"
            )

    def static_class(self, name: str) -> Any:
        self._check_thread()
        return self._backend.static_class(name)

    def invoke_static(self, class_name: str, method: str, args: Sequence[Any] = ()) -> Any:
        self._check_thread()
        return self._backend.invoke(self._backend.static_class(class_name), method, args)

    def field(self, target: Any, name: str) -> Any:
        self._check_thread()
        return self._backend.field(target, name)

    def invoke(self, target: Any, method: str, args: Sequence[Any] = ()) -> Any:
        self._check_thread()
        return self._backend.invoke(target, method, args)

    def box(self, value: Any) -> Any:
        self._check_thread()
        return self._backend.box(value)

    def unbox(self, ref: Any) -> Any:
        self._check_thread()
        return self._backend.unbox(ref)

    def detach(self) -> None:
        self._check_thread()
        self._backend.detach_thread()
        self._detached = True
        log.debug("Detached runtime handle on thread %s", threading.current_thread().name)


def current_runtime() -> RuntimeHandle:
    """Return this thread's handle, attaching it on first use.

    A failed attach is remembered and re-raised on every later call from the
    same thread; it is never retried.
    """
    handle = getattr(_local, "handle", None)
    if handle is not None:
        return handle

    failure = getattr(_local, "failure", None)
    if failure is not None:
        raise AttachmentError(f"Runtime attach previously failed on this thread: {failure}") from failure

    if getattr(_local, "attaching", False):
        raise AttachmentError("Runtime attach re-entered while attaching on this thread")

    _local.attaching = True
    try:
        handle = RuntimeHandle.attach(get_backend())
    except AttachmentError as exc:
        _local.failure = exc
        log.error("Attaching thread %s failed: %s", threading.current_thread().name, exc)
        raise
    except Exception as exc:
        error = AttachmentError(f"Runtime attach failed: {exc}")
        _local.failure = error
        log.error("Attaching thread %s failed: %s", threading.current_thread().name, exc)
        raise error from exc
    finally:
        _local.attaching = False

    _local.handle = handle
    return handle


def with_runtime(fn: Callable[[RuntimeHandle], R]) -> R:
    """Run ``fn`` with this thread's runtime handle, attaching it first if needed."""
    return fn(current_runtime())


def detach_runtime() -> bool:
    """Detach this thread's handle, if any.

    Also forgets a recorded attach failure. Returns True when a live handle
    was detached.
    """
    handle = getattr(_local, "handle", None)
    _local.handle = None
    _local.failure = None
    if handle is None:
        return False
    handle.detach()
    return True


def has_runtime() -> bool:
    """Return True if this thread currently holds an attached handle."""
    return getattr(_local, "handle", None) is not None
