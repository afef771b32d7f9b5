"""
Exception classes for the bridge.

Backends raise :class:`HostException` for anything thrown inside the hosted
runtime. Bridge operations chain it into one of the :class:`BridgeError`
subclasses, so callers can tell a malformed literal from a failing function.
"""


class HostException(Exception):
    """Raised by runtime backends when the hosted runtime throws."""

    def __init__(self, class_name: str, message: str | None = None, stacktrace: str | None = None):
        self.class_name = class_name
        self.message = message
        self.stacktrace = stacktrace
        super().__init__(f"{class_name}: {message}" if message else class_name)


class BridgeError(Exception):
    """Base exception for bridge errors."""

    def __init__(self, message: str, host_class: str | None = None, host_message: str | None = None):
        self.host_class = host_class
        self.host_message = host_message
        super().__init__(message)

    @classmethod
    def from_host(cls, message: str, exc: HostException) -> "BridgeError":
        """Build an error carrying the host exception's diagnostics."""
        return cls(f"{message}: {exc}", host_class=exc.class_name, host_message=exc.message)


class AttachmentError(BridgeError):
    """Raised when the current thread cannot attach to the hosted runtime."""

    pass


class SymbolLookupError(BridgeError, LookupError):
    """Raised when a namespace or symbol does not resolve."""

    pass


class LoadError(BridgeError):
    """Raised when requiring a namespace fails."""

    pass


class InvocationError(BridgeError):
    """Raised when an invoked function throws inside the hosted runtime."""

    pass


class ParseError(BridgeError):
    """Raised when source text cannot be read as data."""

    pass


class EvaluationError(BridgeError):
    """Raised when evaluating source text fails."""

    pass


class ReleasedValueError(BridgeError):
    """Raised when an opaque value is used after it was released."""

    pass


class MarshallingError(BridgeError, TypeError):
    """Raised when a host value has no primitive Python counterpart."""

    pass
