"""Configuration management for Blockforge.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/blockforge/ or %PROGRAMDATA%)
- User-level config (~/.config/blockforge/, ~/.blockforge/ or %APPDATA%)
- Project-level config ($project_root/.blockforge/)
- Environment variable overrides (highest priority)

Example usage:
    from blockforge.config import load_config, get_config

    config = load_config(project_root="/path/to/site")
    print(config.history.max_entries)
"""

from blockforge.config.loader import (
    get_config,
    load_config,
    reset_config,
)
from blockforge.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from blockforge.config.schema import (
    Config,
    DragDropConfig,
    HistoryConfig,
    IdConfig,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "HistoryConfig",
    "IdConfig",
    "DragDropConfig",
    "StorageConfig",
    "LoggingConfig",
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "get_project_config_path",
]
