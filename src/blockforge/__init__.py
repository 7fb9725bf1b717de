"""Blockforge: block-tree document editing with drag-and-drop and undo history."""

__version__ = "0.1.0"

# Public API
from blockforge.config import Config, get_config, load_config
from blockforge.document import IdFactory, Node
from blockforge.dragdrop import (
    DragPayload,
    DropAction,
    DropHost,
    DropTarget,
    DropTargetResolver,
    Point,
    Rect,
    SlotLayout,
    build_layout,
)
from blockforge.errors import (
    BlockforgeError,
    DocumentError,
    LoadError,
    RegistryError,
    SaveError,
)
from blockforge.history import HistoryManager, Snapshot
from blockforge.session import (
    ChangeKind,
    EditingSession,
    StaticBlockRegistry,
    Viewport,
    YamlDocumentStore,
)

__all__ = [
    # Session
    "EditingSession",
    "ChangeKind",
    "Viewport",
    "StaticBlockRegistry",
    "YamlDocumentStore",
    # Document
    "Node",
    "IdFactory",
    # Drag and drop
    "DragPayload",
    "DropAction",
    "DropHost",
    "DropTarget",
    "DropTargetResolver",
    "Point",
    "Rect",
    "SlotLayout",
    "build_layout",
    # History
    "HistoryManager",
    "Snapshot",
    # Config
    "Config",
    "load_config",
    "get_config",
    # Errors
    "BlockforgeError",
    "DocumentError",
    "LoadError",
    "RegistryError",
    "SaveError",
]
