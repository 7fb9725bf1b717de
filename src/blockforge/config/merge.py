"""Layer merging for configuration cascading."""

from __future__ import annotations

import copy
from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` on top of ``base`` without touching either input.

    Rules:
    - Nested dicts merge key by key
    - Lists and scalars from ``override`` replace the base value
    - None in ``override`` leaves the base value in place

    Returns:
        A new dict; nested values are copies, never aliases of the inputs.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if value is None:
            continue
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def merge_configs(*layers: dict[str, Any]) -> dict[str, Any]:
    """Merge config layers in order, later layers winning."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged = deep_merge(merged, layer)
    return merged
