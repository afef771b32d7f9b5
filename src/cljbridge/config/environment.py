"""
Environment Configuration Management Module

This module provides centralized configuration for the bridge through the
Environment class. Values are looked up in this order:

- Settings file (settings.yaml)
- Environment variables (including those loaded from .env files)
- Defaults registered in :mod:`cljbridge.config.settings`

Only values that describe how to *talk to* an already running JVM live here
(entry class, log level). The classpath and JVM path are read
by the test suite when it boots a JVM; the bridge itself never starts one.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from cljbridge.config.configuration import get_setting_defaults
from cljbridge.config.settings import get_value, load_settings


class BridgeConfig(BaseModel):
    """
    Resolved configuration of the bridge.

    Attributes:
        entry_class: JVM class exposing the static ``read`` entry point.
        classpath: Classpath entries for booting a JVM (tests only).
        jvm_path: Explicit libjvm path for booting a JVM (tests only).
    """

    entry_class: str = Field("clojure.java.api.Clojure", description="Class providing the static read entry point")
    classpath: list[str] = Field(default_factory=list, description="Classpath entries for booting a JVM")
    jvm_path: str | None = Field(None, description="libjvm used when booting a JVM; JPype's default otherwise")

    @field_validator("classpath", mode="before")
    @classmethod
    def split_classpath(cls, v: Any) -> Any:
        """Accept an ``os.pathsep`` separated string; drop empty entries."""
        if v is None:
            return []
        if isinstance(v, str):
            return [entry for entry in v.split(os.pathsep) if entry]
        return [str(entry) for entry in v if str(entry)]


def load_dotenv_files():
    """Load environment variables from .env files based on current environment."""
    from dotenv import load_dotenv

    env_name = os.environ.get("ENV", "development")

    # Later files override earlier ones
    env_files = [
        Path.cwd() / ".env",
        Path.cwd() / f".env.{env_name}",
        Path.cwd() / f".env.{env_name}.local",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)


class Environment(object):
    """
    Central access point for bridge settings.

    All accessors are classmethods; settings are loaded lazily on first use
    and cached on the class. Tests reset the cache by assigning
    ``Environment.settings = {}`` or calling :meth:`reset`.
    """

    settings: Optional[Dict[str, Any]] = None

    @classmethod
    def load_settings(cls):
        load_dotenv_files()
        cls.settings = load_settings()

    @classmethod
    def get_settings(cls) -> Dict[str, Any]:
        if cls.settings is None:
            cls.load_settings()
        assert cls.settings is not None
        return cls.settings

    @classmethod
    def reset(cls):
        """Forget cached settings so the next access reloads them."""
        cls.settings = None

    @classmethod
    def get(cls, key: str, default: Any = None):
        return get_value(key, cls.get_settings(), get_setting_defaults(), default)

    @classmethod
    def get_log_level(cls) -> str:
        """
        The log level of the ``cljbridge`` logger tree.
        """
        return str(cls.get("CLJBRIDGE_LOG_LEVEL", "INFO")).upper()

    @classmethod
    def get_entry_class(cls) -> str:
        """
        The JVM class whose static ``read`` parses source text.
        """
        return cls.get("CLJBRIDGE_ENTRY_CLASS")

    @classmethod
    def get_classpath(cls) -> list[str]:
        """
        Classpath entries for booting a JVM, split on ``os.pathsep``.

        A list in the settings file is used as-is.
        """
        return cls.get_bridge_config().classpath

    @classmethod
    def get_bridge_config(cls) -> BridgeConfig:
        return BridgeConfig(
            entry_class=cls.get_entry_class(),
            classpath=cls.get("CLJBRIDGE_CLASSPATH"),
            jvm_path=cls.get("CLJBRIDGE_JVM_PATH"),
        )
