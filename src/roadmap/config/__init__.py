"""Configuration package for the roadmap tracker."""

from roadmap.config.app_config import (
    AppConfig,
    PathsConfig,
    WebConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "PathsConfig",
    "WebConfig",
    "clear_config_cache",
    "load_app_config",
]
