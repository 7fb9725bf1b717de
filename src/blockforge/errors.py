"""Exception types raised by Blockforge.

Lookups that miss (unknown node ids, rejected moves, empty undo stacks) are
never errors; they return their input unchanged. The exceptions here cover
failures a caller cannot detect by comparing values: malformed documents,
malformed registry payloads and persistence failures.
"""

from __future__ import annotations

from dataclasses import dataclass


class BlockforgeError(Exception):
    """Base class for all Blockforge errors."""


class DocumentError(BlockforgeError):
    """Raised when serialized document content is malformed."""


class RegistryError(BlockforgeError):
    """Raised when the block-type registry returns an unusable payload."""


@dataclass
class SaveError(BlockforgeError):
    """Raised when persisting a document fails.

    The live document and the dirty flag are left untouched, so the caller
    can surface the failure and retry.
    """

    document_id: str | None
    reason: str

    def __str__(self) -> str:
        return f"Failed to save document {self.document_id!r}: {self.reason}"


@dataclass
class LoadError(BlockforgeError):
    """Raised when a document cannot be fetched from its store."""

    document_id: str
    reason: str

    def __str__(self) -> str:
        return f"Failed to load document {self.document_id!r}: {self.reason}"
