"""Configuration schema dataclasses for Blockforge.

Defines the structure of configuration at all levels (system, user, project).
Every field has a default so partial configs merge cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_HISTORY_LIMIT = 50


@dataclass
class HistoryConfig:
    """Undo/redo history settings."""

    max_entries: int = DEFAULT_HISTORY_LIMIT  # Oldest snapshot is evicted beyond this


@dataclass
class IdConfig:
    """Fresh node id generation.

    Example config.yaml:
        ids:
          prefix: block
          include_type: true   # ids look like "block-heading-3f9a0c1b2d4e"
    """

    prefix: str = "block"
    include_type: bool = False


@dataclass
class DragDropConfig:
    """Drop target resolution settings."""

    # Max distance (px) between pointer and the nearest root slot when no
    # container claims the pointer. None means always snap to the nearest slot.
    snap_distance: float | None = None


@dataclass
class StorageConfig:
    """File-backed document store settings."""

    root: str = ".blockforge/documents"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR
    verbose: int | None = None  # 0-4, overrides level
    file: str | None = None  # Log file path
    components: dict[str, str] = field(default_factory=dict)  # e.g. {"dragdrop": "TRACE"}


@dataclass
class Config:
    """Root configuration object.

    ``blocks`` maps a block type to the default payload a newly created node of
    that type receives, for use with StaticBlockRegistry.from_config().

    Example config.yaml:
        blocks:
          heading:
            settings: {text: "Add your heading here", level: 2}
          container:
            settings: {maxWidth: "1200px"}
            children: []
    """

    history: HistoryConfig = field(default_factory=HistoryConfig)
    ids: IdConfig = field(default_factory=IdConfig)
    dragdrop: DragDropConfig = field(default_factory=DragDropConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    blocks: dict[str, dict[str, Any]] = field(default_factory=dict)

    # Unknown top-level sections are kept here
    extra: dict[str, Any] = field(default_factory=dict)
