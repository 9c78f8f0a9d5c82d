"""Application configuration loader.

Loads centralized configuration from data/config/roadmap_v1.yaml, falling
back to built-in defaults when the file is missing.

Environment overrides:
- ROADMAP_DATA_DIR: base directory holding content/ (manifest + markdown)
- ROADMAP_DB_PATH: progress database file

Usage:
    from roadmap.config.app_config import load_app_config

    config = load_app_config()
    print(config.paths.manifest_path)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/roadmap_v1.yaml")

DATA_DIR_ENV = "ROADMAP_DATA_DIR"
DB_PATH_ENV = "ROADMAP_DB_PATH"


@dataclass
class PathsConfig:
    """Filesystem locations."""

    content_dir: str = "data/content"
    manifest: str = "topics_list.json"
    db_path: str = "db/roadmap.db"

    @property
    def manifest_path(self) -> Path:
        return Path(self.content_dir) / self.manifest


@dataclass
class WebConfig:
    """Settings for the web API server."""

    host: str = "127.0.0.1"
    port: int = 8000
    keepalive_seconds: float = 30.0


@dataclass
class AppConfig:
    """Application-wide configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "paths": {
            "content_dir": "data/content",
            "manifest": "topics_list.json",
            "db_path": "db/roadmap.db",
        },
        "web": {
            "host": "127.0.0.1",
            "port": 8000,
            "keepalive_seconds": 30.0,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    paths_data = {**defaults["paths"], **(data.get("paths") or {})}
    paths = PathsConfig(
        content_dir=str(paths_data["content_dir"]),
        manifest=str(paths_data["manifest"]),
        db_path=str(paths_data["db_path"]),
    )

    web_data = {**defaults["web"], **(data.get("web") or {})}
    web = WebConfig(
        host=str(web_data["host"]),
        port=int(web_data["port"]),
        keepalive_seconds=float(web_data["keepalive_seconds"]),
    )

    return AppConfig(paths=paths, web=web)


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides on top of file config."""
    data_dir = os.environ.get(DATA_DIR_ENV)
    if data_dir:
        config.paths.content_dir = str(Path(data_dir) / "content")
        logger.debug("config_env_override", key=DATA_DIR_ENV, value=data_dir)

    db_path = os.environ.get(DB_PATH_ENV)
    if db_path:
        config.paths.db_path = db_path
        logger.debug("config_env_override", key=DB_PATH_ENV, value=db_path)

    return config


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _apply_env_overrides(_parse_config(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
