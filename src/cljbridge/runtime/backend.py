"""
Runtime backends.

A backend performs the raw reflective primitives against the hosted runtime:
attaching threads, looking up classes, reading fields, calling methods and
boxing primitives. Everything thrown by the host is re-raised as
:class:`~cljbridge.errors.HostException`.

:class:`JPypeBackend` is the production backend. It expects a JVM that was
already started in this process (``jpype.startJVM``).
"""

from __future__ import annotations

import threading
from typing import Any, Protocol, Sequence

import jpype

from cljbridge.config.logging_config import get_logger
from cljbridge.errors import AttachmentError, HostException, MarshallingError

log = get_logger(__name__)

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1


class RuntimeBackend(Protocol):
    """Primitives a runtime handle needs from the hosted runtime."""

    def attach_thread(self) -> None:
        """Attach the calling OS thread. Raises AttachmentError on failure."""
        ...

    def detach_thread(self) -> None:
        """Detach the calling OS thread."""
        ...

    def static_class(self, name: str) -> Any:
        ...

    def field(self, target: Any, name: str) -> Any:
        ...

    def invoke(self, target: Any, method: str, args: Sequence[Any]) -> Any:
        ...

    def box(self, value: Any) -> Any:
        """Convert a Python primitive (None, bool, int, float, str) to a host object."""
        ...

    def unbox(self, ref: Any) -> Any:
        """Convert a boxed host primitive back to Python. Raises MarshallingError."""
        ...


def _host_exception(exc: BaseException) -> HostException:
    """Translate a JPype/Java exception into a HostException."""
    if isinstance(exc, jpype.JException):
        class_name = str(exc.getClass().getName())
        message = exc.getMessage()
        try:
            stacktrace = exc.stacktrace()
        except Exception:
            stacktrace = None
        return HostException(class_name, str(message) if message is not None else None, stacktrace)
    return HostException(type(exc).__name__, str(exc))


class JPypeBackend:
    """Backend driving an in-process JVM through JPype."""

    # Checked in order; Boolean must precede the numeric boxes
    _UNBOXERS = (
        ("java.lang.String", str),
        ("java.lang.Boolean", lambda ref: bool(ref.booleanValue())),
        ("java.lang.Long", lambda ref: int(ref.longValue())),
        ("java.lang.Integer", lambda ref: int(ref.longValue())),
        ("java.lang.Short", lambda ref: int(ref.longValue())),
        ("java.lang.Byte", lambda ref: int(ref.longValue())),
        ("java.lang.Double", lambda ref: float(ref.doubleValue())),
        ("java.lang.Float", lambda ref: float(ref.doubleValue())),
    )

    def attach_thread(self) -> None:
        if not jpype.isJVMStarted():
            raise AttachmentError("No JVM is running in this process; start one before using the bridge")
        try:
            thread_cls = jpype.JClass("java.lang.Thread")
            if not thread_cls.isAttached():
                thread_cls.attach()
                log.debug("JPype attached OS thread to the JVM")
        except (jpype.JException, RuntimeError) as exc:
            raise AttachmentError(f"Could not attach thread to the JVM: {exc}") from exc

    def detach_thread(self) -> None:
        if not jpype.isJVMStarted():
            return
        # The thread that started the JVM stays attached until shutdown
        if threading.current_thread() is threading.main_thread():
            return
        jpype.JClass("java.lang.Thread").detach()
        log.debug("JPype detached OS thread from the JVM")

    def static_class(self, name: str) -> Any:
        try:
            return jpype.JClass(name)
        except (jpype.JException, TypeError) as exc:
            raise _host_exception(exc) from exc

    def field(self, target: Any, name: str) -> Any:
        try:
            return getattr(target, name)
        except (jpype.JException, AttributeError) as exc:
            raise _host_exception(exc) from exc

    def invoke(self, target: Any, method: str, args: Sequence[Any]) -> Any:
        try:
            bound = getattr(target, method)
        except AttributeError as exc:
            raise HostException("java.lang.NoSuchMethodException", f"{method} on {target!r}") from exc
        try:
            return bound(*args)
        except jpype.JException as exc:
            raise _host_exception(exc) from exc
        except TypeError as exc:
            # JPype reports overload mismatches as TypeError
            raise HostException("java.lang.IllegalArgumentException", str(exc)) from exc

    def box(self, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, bool):
            return jpype.JClass("java.lang.Boolean").valueOf(value)
        if isinstance(value, int):
            if not _LONG_MIN <= value <= _LONG_MAX:
                raise OverflowError(f"{value} does not fit in a java.lang.Long")
            return jpype.JClass("java.lang.Long").valueOf(jpype.JLong(value))
        if isinstance(value, float):
            return jpype.JClass("java.lang.Double").valueOf(jpype.JDouble(value))
        if isinstance(value, str):
            return jpype.JString(value)
        raise TypeError(f"Cannot box {type(value).__name__} for the JVM")

    def unbox(self, ref: Any) -> Any:
        # JPype boxes subclass int/float, so match exact Python types only
        if ref is None or type(ref) in (bool, int, float, str):
            return ref
        for class_name, convert in self._UNBOXERS:
            if isinstance(ref, jpype.JClass(class_name)):
                return convert(ref)
        raise MarshallingError(f"No primitive conversion for {ref.getClass().getName()}")
