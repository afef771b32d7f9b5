"""
Pytest configuration and fixtures for cljbridge tests.

Most tests run against ``FakeBackend``, an in-memory stand-in for the JVM
that hosts a tiny Clojure-like world: namespaces of Python callables, Vars
with Clojure's intern-on-lookup behaviour, a toy reader and an attach
counter. Tests marked ``jvm`` need a real JVM with Clojure (and, for the
checker scenarios, elle/jepsen) on ``CLJBRIDGE_CLASSPATH``.
"""

from __future__ import annotations

import itertools
import re
import threading
from typing import Any, Callable

import pytest

from cljbridge.config.environment import Environment
from cljbridge.errors import AttachmentError, HostException, MarshallingError
from cljbridge.runtime.handle import detach_runtime, set_backend


class FakeHostError(Exception):
    """An exception thrown "inside" the fake runtime."""

    def __init__(self, class_name: str, message: str):
        self.class_name = class_name
        self.message = message
        super().__init__(f"{class_name}: {message}")


class FakeSymbol:
    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FakeSymbol) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("sym", self.name))


class FakeKeyword:
    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FakeKeyword) and other.name == self.name

    def __hash__(self) -> int:
        return hash(("kw", self.name))


class FakeColl:
    """A read list, vector or map; compares by kind and items like Clojure's ``=``."""

    def __init__(self, kind: str, items: list[Any]) -> None:
        self.kind = kind
        self.items = tuple(items)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FakeColl) and (other.kind, other.items) == (self.kind, self.items)

    def __hash__(self) -> int:
        return hash((self.kind, self.items))

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


_OPENERS = {"(": ("list", ")"), "[": ("vector", "]"), "{": ("map", "}")}
_TOKEN = re.compile(r'[()\[\]{}]|"(?:\\.|[^"\\])*"|[^\s,()\[\]{}"]+')


def read_first_form(text: str) -> Any:
    """Read the first form of ``text``, raising the errors Clojure's reader raises."""
    tokens = _TOKEN.findall(text)
    if not tokens:
        raise FakeHostError("java.lang.RuntimeException", "EOF while reading")
    form, _ = _read_form(tokens, 0)
    return form


def _read_form(tokens: list[str], pos: int) -> tuple[Any, int]:
    if pos >= len(tokens):
        raise FakeHostError("java.lang.RuntimeException", "EOF while reading")
    token = tokens[pos]
    if token in _OPENERS:
        kind, closer = _OPENERS[token]
        items: list[Any] = []
        pos += 1
        while True:
            if pos >= len(tokens):
                raise FakeHostError("java.lang.RuntimeException", "EOF while reading")
            if tokens[pos] == closer:
                return FakeColl(kind, items), pos + 1
            item, pos = _read_form(tokens, pos)
            items.append(item)
    if token in ")]}":
        raise FakeHostError("java.lang.RuntimeException", f"Unmatched delimiter: {token}")
    return _read_atom(token), pos + 1


def _read_atom(token: str) -> Any:
    if re.fullmatch(r"-?\d+", token):
        return int(token)
    if token in ("nil", "true", "false"):
        return {"nil": None, "true": True, "false": False}[token]
    if token.startswith('"'):
        return token[1:-1].replace('\\"', '"')
    if token.startswith(":"):
        return FakeKeyword(token[1:])
    return FakeSymbol(token)


class FakeFn:
    def __init__(self, fn: Callable[..., Any], label: str = "fn") -> None:
        self.fn = fn
        self.label = label

    def invoke(self, *args: Any) -> Any:
        try:
            return self.fn(*args)
        except TypeError as exc:
            raise FakeHostError(
                "clojure.lang.ArityException",
                f"Wrong number of args ({len(args)}) passed to: {self.label}",
            ) from exc


class FakeVar(FakeFn):
    def __init__(self, ns: str, name: str) -> None:
        super().__init__(self._unbound, label=f"{ns}/{name}")
        self.ns = ns
        self.name = name
        self.root: Callable[..., Any] | None = None

    def _unbound(self, *args: Any) -> Any:
        raise FakeHostError("java.lang.IllegalStateException", f"Attempting to call unbound fn: #'{self.label}")

    def bind(self, fn: Callable[..., Any]) -> None:
        self.root = fn
        self.fn = fn

    def isBound(self) -> bool:
        return self.root is not None


class FakeNamespace:
    def __init__(self, name: str) -> None:
        self.name = name
        self.mappings: dict[str, FakeVar] = {}

    def findInternedVar(self, sym: FakeSymbol) -> FakeVar | None:
        return self.mappings.get(sym.name)


class FakeSymbolClass:
    """Stands in for ``clojure.lang.Symbol``."""

    @staticmethod
    def intern(name: str) -> FakeSymbol:
        return FakeSymbol(name)


class FakeNamespaceClass:
    """Stands in for ``clojure.lang.Namespace``."""

    def __init__(self, world: "FakeWorld") -> None:
        self._world = world

    def find(self, sym: FakeSymbol) -> FakeNamespace | None:
        return self._world.namespaces.get(sym.name)


class FakePrintStream:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def println(self, value: Any) -> None:
        if value is None:
            # JPype cannot pick among println(String/Object/char[]) for null
            raise FakeHostError("java.lang.IllegalArgumentException", "Ambiguous overloads found for println(null)")
        self.lines.append(value if isinstance(value, str) else pr(value))


class FakeSystem:
    def __init__(self) -> None:
        self.out = FakePrintStream()


def pr(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"' + value.replace('"', '\\"') + '"'
    if isinstance(value, FakeSymbol):
        return value.name
    if isinstance(value, FakeKeyword):
        return ":" + value.name
    if isinstance(value, FakeColl):
        opener = {"list": "(", "vector": "[", "map": "{"}[value.kind]
        return opener + " ".join(pr(item) for item in value) + _OPENERS[opener][1]
    if isinstance(value, (list, tuple)):
        return "(" + " ".join(pr(item) for item in value) + ")"
    return str(value)


class FakeEntry:
    """Stands in for ``clojure.java.api.Clojure``."""

    @staticmethod
    def read(text: str) -> Any:
        return read_first_form(text)


class FakeWorld:
    """Namespaces, Vars and loadable code of the fake runtime."""

    def __init__(self) -> None:
        self.namespaces: dict[str, FakeNamespace] = {}
        self.vars: dict[tuple[str, str], FakeVar] = {}
        self.loaded: set[str] = set()
        self.require_calls: list[str] = []
        self.entry = FakeEntry()
        self.symbol_class = FakeSymbolClass()
        self.namespace_class = FakeNamespaceClass(self)
        self.system = FakeSystem()
        self.eval_table: dict[str, Callable[[], Any]] = {
            "(+ 1 2)": lambda: 3,
            '(str "a" "b")': lambda: "ab",
            "#(assoc % :new-key :new-value)": lambda: FakeFn(lambda m: ("assoc", m), label="assoc-fn"),
        }
        self.loadable: dict[str, dict[str, Callable[..., Any]]] = {
            "demo.alpha": {"f": lambda: "alpha", "g": lambda x: x * 2},
            "demo.beta": {"f": lambda: "beta"},
            "demo.gen": {"gen": lambda: itertools.count()},
        }
        self._define(
            "clojure.core",
            {
                "require": self._require,
                "find-ns": lambda sym: self.namespaces.get(sym.name),
                "load-string": self._load_string,
                "take": lambda n, coll: list(itertools.islice(coll, n)),
                "count": lambda coll: len(coll),
                "map": lambda f, coll: [f.invoke(item) for item in coll],
                "pr-str": pr,
                "inc": lambda x: x + 1,
                "+": lambda *xs: sum(xs),
                "=": lambda a, b: a == b,
                "identity": lambda x: x,
                "constantly-42": lambda: 42,
            },
        )

    def intern(self, ns: str, name: str) -> FakeVar:
        """Like ``Var.intern``: creates the namespace and an unbound Var as needed."""
        namespace = self.namespaces.setdefault(ns, FakeNamespace(ns))
        var = namespace.mappings.get(name)
        if var is None:
            var = FakeVar(ns, name)
            namespace.mappings[name] = var
            self.vars[(ns, name)] = var
        return var

    def _define(self, ns: str, defs: dict[str, Callable[..., Any]]) -> None:
        for name, fn in defs.items():
            self.intern(ns, name).bind(fn)
        self.loaded.add(ns)

    def _require(self, sym: Any) -> None:
        if not isinstance(sym, FakeSymbol):
            raise FakeHostError("java.lang.Exception", "require takes symbols")
        self.require_calls.append(sym.name)
        if sym.name == "demo.broken":
            raise FakeHostError("clojure.lang.Compiler$CompilerException", "Syntax error compiling at (demo/broken.clj:3:1)")
        if sym.name in self.loaded:
            return None
        if sym.name not in self.loadable:
            raise FakeHostError(
                "java.io.FileNotFoundException",
                f"Could not locate {sym.name.replace('.', '/')}__init.class on classpath",
            )
        self._define(sym.name, self.loadable[sym.name])
        return None

    def _load_string(self, text: str) -> Any:
        if text in self.eval_table:
            return self.eval_table[text]()
        try:
            read_first_form(text)
        except FakeHostError as exc:
            raise FakeHostError("clojure.lang.Compiler$CompilerException", f"Syntax error reading source: {exc.message}")
        raise FakeHostError("clojure.lang.Compiler$CompilerException", f"Unable to resolve symbol in: {text}")


class FakeBackend:
    """In-memory runtime backend with attach bookkeeping."""

    def __init__(self, world: FakeWorld, fail_attach: bool = False) -> None:
        self.world = world
        self.fail_attach = fail_attach
        self.attach_calls = 0
        self.detach_calls = 0
        self.attached_threads: list[int] = []
        self.boxed: list[Any] = []
        self._lock = threading.Lock()

    def attach_thread(self) -> None:
        with self._lock:
            self.attach_calls += 1
            self.attached_threads.append(threading.get_ident())
        if self.fail_attach:
            raise AttachmentError("No JVM is running in this process")

    def detach_thread(self) -> None:
        with self._lock:
            self.detach_calls += 1

    def static_class(self, name: str) -> Any:
        if name == Environment.get_entry_class():
            return self.world.entry
        if name == "java.lang.System":
            return self.world.system
        if name == "clojure.lang.Symbol":
            return self.world.symbol_class
        if name == "clojure.lang.Namespace":
            return self.world.namespace_class
        raise HostException("java.lang.ClassNotFoundException", name)

    def field(self, target: Any, name: str) -> Any:
        try:
            return getattr(target, name)
        except AttributeError as exc:
            raise HostException("java.lang.NoSuchFieldException", name) from exc

    def invoke(self, target: Any, method: str, args: Any) -> Any:
        bound = getattr(target, method, None)
        if bound is None:
            raise HostException("java.lang.NoSuchMethodException", method)
        try:
            return bound(*args)
        except FakeHostError as exc:
            raise HostException(exc.class_name, exc.message) from exc

    def box(self, value: Any) -> Any:
        with self._lock:
            self.boxed.append(value)
        return value

    def unbox(self, ref: Any) -> Any:
        if ref is None or isinstance(ref, (bool, int, float, str)):
            return ref
        raise MarshallingError(f"No primitive conversion for {type(ref).__name__}")


@pytest.fixture
def fake_world() -> FakeWorld:
    return FakeWorld()


@pytest.fixture
def fake_host(fake_world):
    """Install a FakeBackend for the duration of a test."""
    Environment.settings = {}
    detach_runtime()
    backend = FakeBackend(fake_world)
    set_backend(backend)
    yield backend
    detach_runtime()
    set_backend(None)
    Environment.reset()


@pytest.fixture(scope="session")
def jvm():
    """Start a real JVM through JPype from CLJBRIDGE_CLASSPATH, or skip."""
    import jpype

    Environment.reset()
    config = Environment.get_bridge_config()
    if not config.classpath:
        pytest.skip("CLJBRIDGE_CLASSPATH is not set")
    if not jpype.isJVMStarted():
        try:
            jvm_path = config.jvm_path or jpype.getDefaultJVMPath()
            jpype.startJVM(jvm_path, classpath=config.classpath, convertStrings=False)
        except (OSError, RuntimeError, jpype.JVMNotFoundException) as exc:
            pytest.skip(f"Could not start a JVM: {exc}")
    yield jpype


@pytest.fixture
def jvm_runtime(jvm):
    """Route the bridge to the real JVM for one test."""
    from cljbridge.runtime.backend import JPypeBackend

    detach_runtime()
    set_backend(JPypeBackend())
    yield
    detach_runtime()
    set_backend(None)
