"""Conversion of Python values into call-ready invocation arguments."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from cljbridge.runtime.handle import RuntimeHandle
from cljbridge.value import OpaqueValue

if TYPE_CHECKING:
    from cljbridge.ifn import IFn

_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1


class InvocationArg:
    """
    One argument for a hosted-runtime call.

    Accepts ``None``, ``bool``, ``int`` (signed 64 bit), ``float``, ``str``,
    :class:`OpaqueValue` and :class:`~cljbridge.ifn.IFn`. Anything else is
    rejected here, before any runtime call is made. Opaque values and
    callables are passed by reference; primitives are boxed when the call
    happens.
    """

    __slots__ = ("_value", "_is_ref")

    def __init__(self, value: Any) -> None:
        from cljbridge.ifn import IFn

        if isinstance(value, InvocationArg):
            self._value = value._value
            self._is_ref = value._is_ref
            return
        if isinstance(value, IFn):
            value = value.into_inner()
        if isinstance(value, OpaqueValue):
            self._value = value
            self._is_ref = True
            return
        if value is None or isinstance(value, (bool, float, str)):
            self._value = value
            self._is_ref = False
            return
        if isinstance(value, int):
            if not _LONG_MIN <= value <= _LONG_MAX:
                raise OverflowError(f"Integer {value} does not fit in a signed 64-bit argument")
            self._value = value
            self._is_ref = False
            return
        raise TypeError(f"Unsupported invocation argument type: {type(value).__name__}")

    @classmethod
    def of(cls, value: Any) -> "InvocationArg":
        """Return ``value`` if it is already an argument, else convert it."""
        if isinstance(value, InvocationArg):
            return value
        return cls(value)

    @classmethod
    def many(cls, values: Iterable[Any]) -> list["InvocationArg"]:
        return [cls.of(value) for value in values]

    @property
    def value(self) -> Any:
        return self._value

    @property
    def is_ref(self) -> bool:
        return self._is_ref

    def to_host(self, rt: RuntimeHandle) -> Any:
        """Produce the host object handed to the runtime call."""
        if self._is_ref:
            return self._value.ref
        return rt.box(self._value)

    def __repr__(self) -> str:
        return f"InvocationArg({self._value!r})"
