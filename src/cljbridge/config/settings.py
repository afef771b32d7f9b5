"""Utility functions for reading the bridge configuration file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from cljbridge.config.configuration import register_setting

# Constants
SETTINGS_FILE = "settings.yaml"
MISSING_MESSAGE = "Missing required setting: {}"
NOT_GIVEN = object()

# Built-in settings are registered here so that embedding packages can list
# them via :func:`get_settings_registry`.

register_setting(
    package_name="cljbridge",
    env_var="CLJBRIDGE_LOG_LEVEL",
    group="Logging",
    description="Log level of the cljbridge logger tree",
    default="INFO",
    enum=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
)
register_setting(
    package_name="cljbridge",
    env_var="CLJBRIDGE_ENTRY_CLASS",
    group="Runtime",
    description=(
        "Fully qualified name of the JVM class exposing the static `read` "
        "entry point of the hosted Clojure runtime."
    ),
    default="clojure.java.api.Clojure",
)
register_setting(
    package_name="cljbridge",
    env_var="CLJBRIDGE_CLASSPATH",
    group="JVM",
    description=(
        "Classpath (os.pathsep separated) holding Clojure and the namespaces to load. "
        "The bridge never starts a JVM itself; the test suite uses this to boot one."
    ),
)
register_setting(
    package_name="cljbridge",
    env_var="CLJBRIDGE_JVM_PATH",
    group="JVM",
    description="Path to libjvm used when the test suite boots a JVM; JPype's default lookup otherwise",
)


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_system_file_path(filename: str) -> Path:
    """Return the path to the configuration file for the current OS."""
    import platform

    os_name = platform.system()
    if os_name in {"Linux", "Darwin"}:
        return Path.home() / ".config" / "cljbridge" / filename
    elif os_name == "Windows":
        appdata = os.getenv("APPDATA")
        if appdata is not None:
            return Path(appdata) / "cljbridge" / filename
        return Path("data") / filename
    return Path("data") / filename


# ---------------------------------------------------------------------------
# Settings helpers
# ---------------------------------------------------------------------------


def load_settings() -> Dict[str, Any]:
    """Load settings from the YAML settings file."""
    settings_file = get_system_file_path(SETTINGS_FILE)

    settings: Dict[str, Any] = {}
    if settings_file.exists():
        with open(settings_file, "r") as f:
            settings = yaml.safe_load(f) or {}

    return settings


def get_value(
    key: str,
    settings: Dict[str, Any],
    default_env: Dict[str, Any],
    default: Any = NOT_GIVEN,
) -> Any:
    """Retrieve a configuration value from settings, environment, or defaults."""
    value = settings.get(key)
    if value is None or str(value) == "":
        value = os.environ.get(key)

    if value is None:
        value = default_env.get(key)

    if value is None:
        value = default

    if value is not NOT_GIVEN:
        return value
    raise KeyError(MISSING_MESSAGE.format(key))
