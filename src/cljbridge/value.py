"""Opaque handles onto hosted-runtime objects."""

from __future__ import annotations

import threading
from typing import Any

from cljbridge.errors import MarshallingError, ReleasedValueError
from cljbridge.runtime.handle import with_runtime


class OpaqueValue:
    """
    A Python-side handle owning one hosted-runtime object reference.

    The referenced object is not inspected on the Python side; pass the value
    back into bridge calls, or convert boxed primitives with
    :meth:`to_primitive`. Clojure ``nil`` is a value whose reference is None.

    The reference is released exactly once, either explicitly through
    :meth:`release` (or by leaving a ``with`` block) or when the handle is
    garbage collected. Copies share the same handle.
    """

    __slots__ = ("_ref", "_released", "_lock", "__weakref__")

    def __init__(self, ref: Any) -> None:
        self._ref = ref
        self._released = False
        self._lock = threading.Lock()

    @property
    def ref(self) -> Any:
        """The underlying host reference."""
        if self._released:
            raise ReleasedValueError("Opaque value was already released")
        return self._ref

    @property
    def released(self) -> bool:
        return self._released

    @property
    def is_nil(self) -> bool:
        return self.ref is None

    def release(self) -> bool:
        """Drop the host reference. Returns False if it was already released."""
        with self._lock:
            if self._released:
                return False
            self._released = True
            self._ref = None
            return True

    def to_primitive(self) -> Any:
        """Convert a boxed string, boolean or number (or nil) to Python."""
        ref = self.ref
        if ref is None:
            return None

        def _unbox(rt):
            return rt.unbox(ref)

        try:
            return with_runtime(_unbox)
        except MarshallingError:
            raise
        except TypeError as exc:
            raise MarshallingError(str(exc)) from exc

    def __enter__(self) -> "OpaqueValue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __copy__(self) -> "OpaqueValue":
        return self

    def __deepcopy__(self, memo: dict) -> "OpaqueValue":
        return self

    def __repr__(self) -> str:
        if self._released:
            return "OpaqueValue(<released>)"
        if self._ref is None:
            return "OpaqueValue(nil)"
        return f"OpaqueValue(<{type(self._ref).__name__}>)"
