"""Fresh node id generation."""

from __future__ import annotations

import uuid
from collections.abc import Container
from dataclasses import dataclass

from blockforge.config.schema import IdConfig


@dataclass(frozen=True)
class IdFactory:
    """Generates node ids that are not already taken.

    Ids look like ``block-3f9a0c1b2d4e`` or, with ``include_type``,
    ``block-heading-3f9a0c1b2d4e``.
    """

    prefix: str = "block"
    include_type: bool = False

    @classmethod
    def from_config(cls, config: IdConfig) -> IdFactory:
        return cls(prefix=config.prefix, include_type=config.include_type)

    def new_id(self, block_type: str | None = None, taken: Container[str] = ()) -> str:
        """Return an id absent from ``taken``.

        Args:
            block_type: Type of the node the id is for.
            taken: Ids already in use (typically every id in the document).
        """
        parts = [self.prefix] if self.prefix else []
        if self.include_type and block_type:
            parts.append(block_type)
        while True:
            candidate = "-".join([*parts, uuid.uuid4().hex[:12]])
            if candidate not in taken:
                return candidate
