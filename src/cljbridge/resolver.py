"""Resolution of namespace-qualified names into callables.

Lookups go through ``clojure.lang.Namespace.find`` and
``Namespace.findInternedVar``. Both are read-only: a failed lookup never
creates a namespace or interns a Var, so it leaves the runtime as it was.
"""

from __future__ import annotations

from typing import Any

from cljbridge.config.logging_config import get_logger
from cljbridge.errors import HostException, SymbolLookupError
from cljbridge.ifn import IFn
from cljbridge.runtime.handle import RuntimeHandle, with_runtime
from cljbridge.value import OpaqueValue

log = get_logger(__name__)

SYMBOL_CLASS = "clojure.lang.Symbol"
NAMESPACE_CLASS = "clojure.lang.Namespace"


def intern_symbol(rt: RuntimeHandle, name: str) -> Any:
    """Build a symbol from ``name`` verbatim, without going through the reader."""
    return rt.invoke_static(SYMBOL_CLASS, "intern", [rt.box(name)])


def _find_ns(rt: RuntimeHandle, namespace: str) -> Any:
    return rt.invoke_static(NAMESPACE_CLASS, "find", [intern_symbol(rt, namespace)])


def find_namespace(namespace: str) -> OpaqueValue:
    """Return the namespace object for ``namespace`` without loading it.

    Raises:
        SymbolLookupError: If no namespace of that name exists in the runtime.
    """
    try:
        ns = with_runtime(lambda rt: _find_ns(rt, namespace))
    except HostException as exc:
        raise SymbolLookupError.from_host(f"Could not look up namespace {namespace}", exc) from exc
    if ns is None:
        raise SymbolLookupError(f"Namespace {namespace} is not loaded")
    return OpaqueValue(ns)


def resolve(namespace: str, name: str) -> IFn:
    """Resolve ``namespace/name`` to a callable.

    Every call goes to the runtime; nothing is cached, so the result always
    reflects what is currently loaded. Names are not validated locally.
    Only Vars interned in ``namespace`` itself resolve; names it merely
    refers to from other namespaces do not.

    Raises:
        SymbolLookupError: If the lookup throws, the namespace is not loaded,
            or the name has no bound Var in it.
    """

    def _lookup(rt):
        ns = _find_ns(rt, namespace)
        if ns is None:
            return False, None, False
        var = rt.invoke(ns, "findInternedVar", [intern_symbol(rt, name)])
        if var is None:
            return True, None, False
        return True, var, bool(rt.invoke(var, "isBound"))

    try:
        ns_found, var, bound = with_runtime(_lookup)
    except HostException as exc:
        log.debug("Resolving %s/%s failed: %s", namespace, name, exc)
        raise SymbolLookupError.from_host(f"Could not resolve {namespace}/{name}", exc) from exc

    if not ns_found:
        raise SymbolLookupError(f"Could not resolve {namespace}/{name}: namespace {namespace} is not loaded")
    if not bound:
        log.debug("%s/%s has no bound var", namespace, name)
        raise SymbolLookupError(f"{namespace}/{name} is not bound")

    log.debug("Resolved %s/%s", namespace, name)
    return IFn(OpaqueValue(var), namespace=namespace, name=name)
