"""
Public operation surface of the bridge.

Thin functions over :mod:`cljbridge.namespace` and :mod:`cljbridge.ifn` for
callers that prefer plain calls to methods.
"""

from __future__ import annotations

from typing import Any, Sequence

from cljbridge.ifn import IFn
from cljbridge.namespace import CljCore, CljNs, eval_string, read_string
from cljbridge.value import OpaqueValue


def resolve_namespace(name: str) -> CljNs:
    """Return a handle for the loaded namespace ``name`` (SymbolLookupError otherwise)."""
    return CljCore().find_ns(name)


def require_namespace(root: CljCore, name: str) -> CljNs:
    """Load ``name`` through ``root`` and return its handle (LoadError on failure)."""
    return root.require(name)


def lookup_var(handle: CljNs, name: str) -> IFn:
    """Resolve ``name`` within ``handle`` (SymbolLookupError on failure)."""
    return handle.var(name)


def invoke(fn: IFn, args: Sequence[Any] = ()) -> OpaqueValue:
    """Call ``fn`` with ``args`` (InvocationError on failure, TypeError if ``args`` is a string)."""
    return fn.invoke(args)


def parse(text: str) -> OpaqueValue:
    """Read ``text`` as data (ParseError on failure)."""
    return read_string(text)


def evaluate(text: str) -> OpaqueValue:
    """Evaluate ``text`` as code (EvaluationError on failure)."""
    return eval_string(text)
