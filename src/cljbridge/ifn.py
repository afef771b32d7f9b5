"""Invocable wrapper around resolved hosted-runtime functions."""

from __future__ import annotations

from typing import Any, Sequence

from cljbridge.arguments import InvocationArg
from cljbridge.config.logging_config import get_logger
from cljbridge.errors import HostException, InvocationError
from cljbridge.runtime.handle import with_runtime
from cljbridge.value import OpaqueValue

log = get_logger(__name__)


class IFn:
    """
    A resolved function (usually a Var) of the hosted runtime.

    Hosted functions are objects with a uniform ``invoke`` method, so every
    arity goes through the same call; only the number of arguments differs.
    Instances are immutable and may be shared between threads: each call
    runs on the calling thread's own runtime handle.

    Example:
        core = CljCore()
        inc = core.var("inc")
        inc.invoke1(41).to_primitive()  # 42
        core.var("+")(1, 2, 3).to_primitive()  # 6
    """

    __slots__ = ("_inner", "_namespace", "_name")

    def __init__(self, inner: OpaqueValue, namespace: str | None = None, name: str | None = None) -> None:
        self._inner = inner
        self._namespace = namespace
        self._name = name

    @property
    def qualified_name(self) -> str:
        if self._name is None:
            return "<fn>"
        return f"{self._namespace}/{self._name}" if self._namespace else self._name

    def invoke0(self) -> OpaqueValue:
        return self.invoke(())

    def invoke1(self, arg: Any) -> OpaqueValue:
        return self.invoke((arg,))

    def invoke(self, args: Sequence[Any]) -> OpaqueValue:
        """Call the function with ``args`` (InvocationArgs or convertible values).

        Raises:
            TypeError: If ``args`` is a string rather than a sequence of arguments.
        """
        if isinstance(args, (str, bytes)):
            raise TypeError(f"args must be a sequence of arguments, not {type(args).__name__}")
        call_args = InvocationArg.many(args)
        target = self._inner.ref

        def _call(rt):
            return rt.invoke(target, "invoke", [arg.to_host(rt) for arg in call_args])

        try:
            result = with_runtime(_call)
        except HostException as exc:
            log.debug("Invoking %s with %d args failed: %s", self.qualified_name, len(call_args), exc)
            raise InvocationError.from_host(f"Invoking {self.qualified_name} failed", exc) from exc
        return OpaqueValue(result)

    def __call__(self, *args: Any) -> OpaqueValue:
        return self.invoke(args)

    def into_inner(self) -> OpaqueValue:
        """Return the function object itself, e.g. to pass it to ``map``."""
        return self._inner

    def __repr__(self) -> str:
        return f"IFn({self.qualified_name})"
