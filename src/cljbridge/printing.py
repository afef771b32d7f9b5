"""Printing helpers for opaque values."""

from __future__ import annotations

from cljbridge.errors import HostException, InvocationError
from cljbridge.namespace import CljCore
from cljbridge.runtime.handle import with_runtime
from cljbridge.value import OpaqueValue


def print_value(value: OpaqueValue) -> None:
    """Print ``value`` with the JVM's ``System.out.println``.

    Lazy sequences print as their class name; use :func:`print_lazy` for them.
    nil prints as ``nil``.
    """
    ref = value.ref

    def _println(rt):
        system = rt.static_class("java.lang.System")
        out = rt.field(system, "out")
        # A null argument matches several println overloads
        rt.invoke(out, "println", [rt.box("nil") if ref is None else ref])

    try:
        with_runtime(_println)
    except HostException as exc:
        raise InvocationError.from_host("Printing value failed", exc) from exc


def pr_str(value: OpaqueValue) -> str:
    """Return the readable printed form of ``value``, realizing lazy sequences."""
    return CljCore().var("pr-str").invoke1(value).to_primitive()


def print_lazy(value: OpaqueValue) -> None:
    """Realize ``value`` through ``pr-str`` and print the resulting text."""
    print_value(CljCore().var("pr-str").invoke1(value))
