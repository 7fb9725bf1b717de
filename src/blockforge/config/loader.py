"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides
- Config caching with reset support
- Conversion from dict to typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from blockforge.config.merge import merge_configs
from blockforge.config.paths import get_config_paths
from blockforge.config.schema import (
    DEFAULT_HISTORY_LIMIT,
    Config,
    DragDropConfig,
    HistoryConfig,
    IdConfig,
    LoggingConfig,
    StorageConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("blockforge.config")

_cached_config: Config | None = None

_KNOWN_SECTIONS = {"history", "ids", "dragdrop", "storage", "logging", "blocks"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def env_overrides() -> dict[str, Any]:
    """Build config dict from environment variables (highest priority)."""
    overrides: dict[str, Any] = {}

    log_path = os.environ.get("BLOCKFORGE_LOG")
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    history_limit = os.environ.get("BLOCKFORGE_HISTORY_LIMIT")
    if history_limit:
        try:
            overrides.setdefault("history", {})["max_entries"] = int(history_limit)
        except ValueError:
            _log.warning("Ignoring non-integer BLOCKFORGE_HISTORY_LIMIT=%r", history_limit)

    return overrides


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _history_limit(value: Any) -> int:
    try:
        limit = int(value)
    except (TypeError, ValueError):
        _log.warning("Invalid history.max_entries %r, using %d", value, DEFAULT_HISTORY_LIMIT)
        return DEFAULT_HISTORY_LIMIT
    if limit < 1:
        _log.warning("history.max_entries must be >= 1, got %d", limit)
        return DEFAULT_HISTORY_LIMIT
    return limit


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert merged dict to typed Config dataclass."""
    history_data = _section(data, "history")
    history = HistoryConfig(
        max_entries=_history_limit(history_data.get("max_entries", DEFAULT_HISTORY_LIMIT)),
    )

    ids_data = _section(data, "ids")
    ids = IdConfig(
        prefix=str(ids_data.get("prefix", "block")),
        include_type=bool(ids_data.get("include_type", False)),
    )

    dragdrop_data = _section(data, "dragdrop")
    snap = dragdrop_data.get("snap_distance")
    try:
        snap_distance = float(snap) if snap is not None else None
    except (TypeError, ValueError):
        _log.warning("Invalid dragdrop.snap_distance %r, ignoring", snap)
        snap_distance = None
    dragdrop = DragDropConfig(snap_distance=snap_distance)

    storage_data = _section(data, "storage")
    storage = StorageConfig(root=str(storage_data.get("root", StorageConfig.root)))

    log_data = _section(data, "logging")
    components = _section(log_data, "components")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
        components={str(name): str(level) for name, level in components.items()},
    )

    blocks = {
        str(block_type): payload
        for block_type, payload in _section(data, "blocks").items()
        if isinstance(payload, dict)
    }

    extra = {k: v for k, v in data.items() if k not in _KNOWN_SECTIONS}

    return Config(
        history=history,
        ids=ids,
        dragdrop=dragdrop,
        storage=storage,
        logging=logging_config,
        blocks=blocks,
        extra=extra,
    )


def load_config(project_root: str | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables
    2. Project config ($project_root/.blockforge/config.yaml)
    3. User config
    4. System config

    Args:
        project_root: Project directory for project-level config.
        reload: Force reload even if cached.
    """
    global _cached_config

    if _cached_config is not None and not reload and project_root is None:
        return _cached_config

    layers: list[dict[str, Any]] = []
    for path in get_config_paths(project_root):
        layer = load_yaml_file(path)
        if layer:
            _log.debug("Loaded config from %s", path)
            layers.append(layer)

    env_layer = env_overrides()
    if env_layer:
        layers.append(env_layer)

    config = dict_to_config(merge_configs(*layers))

    # Only the global config (no project_root) is cached
    if project_root is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Drop the cached config so the next get_config() reloads."""
    global _cached_config
    _cached_config = None
