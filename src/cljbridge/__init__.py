from .api import evaluate, invoke, lookup_var, parse, require_namespace, resolve_namespace
from .arguments import InvocationArg
from .errors import (
    AttachmentError,
    BridgeError,
    EvaluationError,
    HostException,
    InvocationError,
    LoadError,
    MarshallingError,
    ParseError,
    ReleasedValueError,
    SymbolLookupError,
)
from .ifn import IFn
from .literals import cljeval, cljread
from .namespace import CljCore, CljNs, eval_string, read_string
from .printing import pr_str, print_lazy, print_value
from .resolver import resolve
from .runtime import detach_runtime, with_runtime
from .value import OpaqueValue

__all__ = [
    "AttachmentError",
    "BridgeError",
    "CljCore",
    "CljNs",
    "EvaluationError",
    "HostException",
    "IFn",
    "InvocationArg",
    "InvocationError",
    "LoadError",
    "MarshallingError",
    "OpaqueValue",
    "ParseError",
    "ReleasedValueError",
    "SymbolLookupError",
    "cljeval",
    "cljread",
    "detach_runtime",
    "eval_string",
    "evaluate",
    "invoke",
    "lookup_var",
    "parse",
    "pr_str",
    "print_lazy",
    "print_value",
    "read_string",
    "require_namespace",
    "resolve",
    "resolve_namespace",
    "with_runtime",
]
