"""
Namespace handles, the root context, and the read/eval entry points.

    core = CljCore()
    checker = core.require("elle.rw-register")
    history = core.require("jepsen.history").var("history").invoke1(read_string("[...]"))
    result = checker.var("check").invoke1(history)
"""

from __future__ import annotations

from cljbridge.config.environment import Environment
from cljbridge.config.logging_config import get_logger
from cljbridge.errors import EvaluationError, HostException, InvocationError, LoadError, ParseError, SymbolLookupError
from cljbridge.ifn import IFn
from cljbridge.resolver import find_namespace, intern_symbol, resolve
from cljbridge.runtime.handle import with_runtime
from cljbridge.value import OpaqueValue

log = get_logger(__name__)


CORE_NAMESPACE = "clojure.core"


class CljNs:
    """A namespace of the hosted runtime.

    Holds only the name; every :meth:`var` call resolves again. The bridge
    keeps no record of which namespaces were loaded, so looking up a Var in
    a namespace that was never required fails at lookup time.
    """

    def __init__(self, ns: str) -> None:
        self._ns = ns

    @property
    def name(self) -> str:
        return self._ns

    def var(self, name: str) -> IFn:
        return resolve(self._ns, name)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CljNs) and other._ns == self._ns

    def __hash__(self) -> int:
        return hash(self._ns)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._ns!r})"


class CljCore(CljNs):
    """The root context: ``clojure.core``, always loaded."""

    def __init__(self) -> None:
        super().__init__(CORE_NAMESPACE)

    def __repr__(self) -> str:
        return "CljCore()"

    def require(self, ns: str) -> CljNs:
        """Load ``ns`` in the hosted runtime and return a handle scoped to it.

        The name becomes a symbol verbatim, so the handle always names the
        namespace that was loaded. Loading may run arbitrary initialization
        code in the runtime.

        Raises:
            LoadError: If the namespace is missing, or its code fails to
                compile or initialize.
        """
        log.debug("Requiring namespace %s", ns)
        try:
            symbol = OpaqueValue(with_runtime(lambda rt: intern_symbol(rt, ns)))
            self.var("require").invoke1(symbol)
        except HostException as exc:
            raise LoadError.from_host(f"Could not load namespace {ns}", exc) from exc
        except (InvocationError, SymbolLookupError) as exc:
            log.debug("Requiring %s failed: %s", ns, exc)
            raise LoadError(
                f"Could not load namespace {ns}: {exc}",
                host_class=exc.host_class,
                host_message=exc.host_message,
            ) from exc
        return CljNs(ns)

    def find_ns(self, ns: str) -> CljNs:
        """Return a handle for an already loaded namespace without loading it.

        Raises:
            SymbolLookupError: If no namespace of that name is loaded.
        """
        find_namespace(ns)
        return CljNs(ns)


def read_string(text: str) -> OpaqueValue:
    """Parse ``text`` as data without evaluating it.

    Only the first form is read.

    Raises:
        ParseError: If the text is not readable.
    """
    entry_class = Environment.get_bridge_config().entry_class

    def _read(rt):
        return rt.invoke_static(entry_class, "read", [rt.box(text)])

    try:
        return OpaqueValue(with_runtime(_read))
    except HostException as exc:
        log.debug("Reading %r failed: %s", text, exc)
        raise ParseError.from_host("Could not read source text", exc) from exc


def eval_string(text: str) -> OpaqueValue:
    """Load and evaluate ``text`` as code, returning the last form's value.

    Raises:
        EvaluationError: If reading, compiling or running the code fails.
    """
    load_string = CljCore().var("load-string")
    try:
        return load_string.invoke1(text)
    except InvocationError as exc:
        log.debug("Evaluating %r failed: %s", text, exc)
        raise EvaluationError(
            f"Could not evaluate source text: {exc}",
            host_class=exc.host_class,
            host_message=exc.host_message,
        ) from exc
