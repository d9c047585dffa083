"""
Configuration Management for unihook

Process-wide settings for the hook system. Settings are only ever changed by
shallow merges; the configuration object itself is never replaced once handed
out.
"""

import os
import threading
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional


@dataclass
class HookConfig:
    """Main configuration class for unihook."""

    # Core settings
    debug: bool = True
    auto_restore_on_teardown: bool = False

    # Logging settings
    log_level: str = "INFO"

    # Resolver settings
    default_timeout_ms: int = 10000
    poll_interval_ms: int = 100

    def merge(self, updates: Dict[str, Any]) -> "HookConfig":
        """Overlay known keys from ``updates``; unknown keys are ignored."""
        for key, value in updates.items():
            if key in _FIELD_NAMES:
                setattr(self, key, value)
        return self

    def copy(self) -> "HookConfig":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_FIELD_NAMES = frozenset(f.name for f in fields(HookConfig))


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Global configuration singleton."""

    _instance: Optional[HookConfig] = None
    _lock = threading.RLock()

    @classmethod
    def initialize(cls, **kwargs) -> HookConfig:
        """Apply environment overrides and kwargs to the live configuration.

        Only settings the environment actually provides are merged, so earlier
        changes to other keys survive.
        """
        with cls._lock:
            return cls.get_instance().merge(cls.environment_overrides()).merge(kwargs)

    @classmethod
    def environment_overrides(cls) -> Dict[str, Any]:
        """Settings provided by ``UNIHOOK_*`` environment variables."""
        overrides: Dict[str, Any] = {}

        debug = os.environ.get("UNIHOOK_DEBUG")
        if debug is not None:
            overrides["debug"] = _env_flag(debug)

        timeout = os.environ.get("UNIHOOK_TIMEOUT_MS")
        if timeout:
            try:
                overrides["default_timeout_ms"] = int(timeout)
            except ValueError:
                pass

        level = os.environ.get("UNIHOOK_LOG_LEVEL")
        if level:
            overrides["log_level"] = level.upper()

        return overrides

    @classmethod
    def from_environment(cls) -> HookConfig:
        """Build a fresh config with ``UNIHOOK_*`` environment variables applied."""
        return HookConfig().merge(cls.environment_overrides())

    @classmethod
    def get_instance(cls) -> HookConfig:
        """Get the configuration instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls.from_environment()
            return cls._instance

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        instance = cls.get_instance()
        return getattr(instance, key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        """Set a configuration value."""
        cls.update({key: value})

    @classmethod
    def update(cls, updates: Dict[str, Any]) -> HookConfig:
        """Update multiple configuration values."""
        with cls._lock:
            return cls.get_instance().merge(updates)

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return cls.get_instance().to_dict()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access re-reads the environment.

        Test isolation only: managers that already hold the old instance keep
        it, so never call this while hooks are installed.
        """
        with cls._lock:
            cls._instance = None


def get_config() -> HookConfig:
    """Get the current configuration."""
    return Config.get_instance()
