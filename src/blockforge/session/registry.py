"""Block registry backed by a static mapping of defaults."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from blockforge.config.schema import Config
from blockforge.errors import RegistryError


class StaticBlockRegistry:
    """Serves default payloads from a fixed ``{block_type: payload}`` mapping.

    Each call returns an independent copy, so sessions can freely keep what
    they receive.
    """

    def __init__(self, defaults: Mapping[str, Mapping[str, Any]]) -> None:
        self._defaults = {block_type: dict(payload) for block_type, payload in defaults.items()}

    @classmethod
    def from_config(cls, config: Config) -> StaticBlockRegistry:
        return cls(config.blocks)

    @property
    def block_types(self) -> list[str]:
        return sorted(self._defaults)

    def create_default(self, block_type: str) -> dict[str, Any]:
        """Default payload for ``block_type``.

        Raises:
            RegistryError: If the type is not registered.
        """
        payload = self._defaults.get(block_type)
        if payload is None:
            raise RegistryError(f"Unknown block type: {block_type!r}")
        result = copy.deepcopy(payload)
        result.setdefault("settings", {})
        return result

    def __contains__(self, block_type: str) -> bool:
        return block_type in self._defaults
