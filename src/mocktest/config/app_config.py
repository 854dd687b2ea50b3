"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml
(or the file named by $MOCKTEST_CONFIG) with built-in defaults when
no file is present.

Usage:
    from mocktest.config.app_config import load_app_config

    config = load_app_config()
    limit = config.engine.free_test_limit
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")
CONFIG_ENV_VAR = "MOCKTEST_CONFIG"

DEFAULT_STREAMS: dict[str, tuple[str, ...]] = {
    "PCM": ("physics-11th-12th", "chemistry", "mathematics"),
    "PCB": ("physics-11th-12th", "chemistry", "biology"),
}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


@dataclass(frozen=True)
class EngineConfig:
    """Catalog and quota settings consumed by the gate and the composer.

    Instances are immutable; `streams` is exposed as a read-only mapping
    of stream name to an ordered tuple of subject slugs.
    """

    free_test_limit: int = 5
    single_subject_count: int = 60
    stream_subject_count: int = 20
    chapter_practice_count: int = 30
    streams: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_STREAMS)
    )

    def __post_init__(self) -> None:
        for name in (
            "free_test_limit",
            "single_subject_count",
            "stream_subject_count",
            "chapter_practice_count",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")

        frozen: dict[str, tuple[str, ...]] = {}
        for stream, slugs in dict(self.streams).items():
            slugs = tuple(slugs or ())
            if not slugs:
                raise ConfigError(f"Stream '{stream}' has no subjects")
            frozen[str(stream)] = slugs
        object.__setattr__(self, "streams", MappingProxyType(frozen))

    def stream_subjects(self, stream: str) -> tuple[str, ...] | None:
        """Subject slugs for a stream, or None if the stream is unknown."""
        return self.streams.get(stream)


@dataclass
class AppConfig:
    """Application-wide configuration."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        return Path(self.paths.get("db_path", "db/mocktest.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "engine": {
            "free_test_limit": 5,
            "single_subject_count": 60,
            "stream_subject_count": 20,
            "chapter_practice_count": 30,
            "streams": {name: list(slugs) for name, slugs in DEFAULT_STREAMS.items()},
        },
        "paths": {
            "db_path": "db/mocktest.db",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()
    engine_data = {**defaults["engine"], **(data.get("engine") or {})}

    engine = EngineConfig(
        free_test_limit=engine_data["free_test_limit"],
        single_subject_count=engine_data["single_subject_count"],
        stream_subject_count=engine_data["stream_subject_count"],
        chapter_practice_count=engine_data["chapter_practice_count"],
        streams=engine_data["streams"],
    )

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(engine=engine, paths=paths)


def _config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.

    Raises:
        ConfigError: If the file contains invalid values.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    path = _config_path()
    data: dict[str, Any]

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
