from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


def merge_layers(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Fold configuration layers left to right into a new dict.

    Sections (mappings) are merged key by key at every depth; any other value
    in a later layer, lists included, replaces the earlier one. ``None`` layers
    are skipped. The input mappings are never modified or aliased.
    """
    merged: Dict[str, Any] = {}
    for layer in layers:
        if layer is None:
            continue
        for key, value in layer.items():
            if isinstance(value, Mapping):
                current = merged.get(key)
                merged[key] = merge_layers(current if isinstance(current, Mapping) else None, value)
            else:
                merged[key] = value
    return merged


__all__ = ["merge_layers"]
