import logging
import os
import sys
from typing import ClassVar, Optional

_DEFAULT_FORMAT = os.getenv(
    "CLJBRIDGE_LOG_FORMAT",
    "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s",
)
_DEFAULT_DATEFMT = os.getenv("CLJBRIDGE_LOG_DATEFMT", "%Y-%m-%d %H:%M:%S")
_configured: str | int | bool = False


def _supports_color() -> bool:
    try:
        return sys.stderr.isatty() and os.getenv("NO_COLOR") is None
    except Exception:
        return False


class _LevelColorFormatter(logging.Formatter):
    COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\x1b[37m",  # light gray
        "INFO": "\x1b[32m",  # green
        "WARNING": "\x1b[33m",  # yellow
        "ERROR": "\x1b[31m",  # red
        "CRITICAL": "\x1b[41m",  # red background
    }

    RESET: ClassVar[str] = "\x1b[0m"

    def __init__(self, fmt: str, datefmt: str, use_color: bool) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(levelname, "") if self.use_color else ""
        record.levelname_color = f"{color}{levelname}{self.RESET}" if color else levelname
        return super().format(record)


def configure_logging(
    level: Optional[str | int] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
) -> str | int:
    """Configure the ``cljbridge`` logger tree once with a consistent format.

    The bridge is a library, so only the ``cljbridge`` logger is touched; the
    root logger stays under the embedding application's control.

    Environment overrides:
    - `CLJBRIDGE_LOG_LEVEL`
    - `CLJBRIDGE_LOG_FORMAT`
    - `CLJBRIDGE_LOG_DATEFMT`
    """
    from cljbridge.config.environment import Environment

    global _configured

    if isinstance(level, str):
        level = level.upper()

    if level is None:
        level = Environment.get_log_level()

    if _configured and _configured == level:
        return level
    _configured = level

    use_color = _supports_color()
    if fmt is None:
        if os.getenv("CLJBRIDGE_LOG_FORMAT") is None and use_color:
            fmt = "\x1b[90m%(asctime)s\x1b[0m | %(levelname_color)s | \x1b[36m%(name)s\x1b[0m | %(threadName)s | %(message)s"
        else:
            fmt = _DEFAULT_FORMAT
    datefmt = datefmt if datefmt is not None else _DEFAULT_DATEFMT

    package_logger = logging.getLogger("cljbridge")
    package_logger.setLevel(level)

    # Reuse our handler on reconfiguration instead of stacking a new one
    handler = next(
        (h for h in package_logger.handlers if isinstance(h.formatter, _LevelColorFormatter)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        package_logger.addHandler(handler)
    handler.setLevel(level)
    handler.setFormatter(_LevelColorFormatter(fmt=fmt, datefmt=datefmt, use_color=use_color))
    package_logger.propagate = False

    # JPype logs class loading chatter on its own logger
    logging.getLogger("jpype").setLevel(logging.WARNING)
    return level


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger."""
    configure_logging()
    return logging.getLogger(name)
