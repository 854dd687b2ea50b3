"""Configuration package for the mock test engine."""

from mocktest.config.app_config import (
    AppConfig,
    ConfigError,
    EngineConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "EngineConfig",
    "clear_config_cache",
    "load_app_config",
]
