"""Editing sessions and their external collaborators."""

from blockforge.session.controller import EditingSession
from blockforge.session.protocols import (
    BlockRegistry,
    ChangeKind,
    DocumentStore,
    LoadedDocument,
    SessionListener,
    Viewport,
)
from blockforge.session.registry import StaticBlockRegistry
from blockforge.session.storage import YamlDocumentStore

__all__ = [
    "BlockRegistry",
    "ChangeKind",
    "DocumentStore",
    "EditingSession",
    "LoadedDocument",
    "SessionListener",
    "StaticBlockRegistry",
    "Viewport",
    "YamlDocumentStore",
]
