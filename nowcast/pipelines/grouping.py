from __future__ import annotations

from typing import Dict, Hashable, Iterable, List


def group_positions(keys: Iterable[Hashable]) -> Dict[Hashable, List[int]]:
    """Map each distinct key to the positions holding it, keys in first-seen order."""
    positions: Dict[Hashable, List[int]] = {}
    for idx, key in enumerate(keys):
        positions.setdefault(key, []).append(idx)
    return positions


__all__ = ["group_positions"]
