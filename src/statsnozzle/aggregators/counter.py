"""Per-dimension category tallies."""
from __future__ import annotations

from collections import Counter as _Counter


def sort_counts(counts: dict[str, int]) -> list[tuple[str, int]]:
    """Order (key, count) pairs by count descending, then key ascending."""
    return sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))


class Tally:
    """Count occurrences of category keys for a single dimension.

    Not thread-safe on its own: callers serialize access through the
    aggregator lock.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._counts: _Counter[str] = _Counter()

    def increment(self, key: str) -> None:
        self._counts[key] += 1

    def get(self, key: str) -> int:
        return self._counts.get(key, 0)

    def snapshot_sorted(self) -> list[tuple[str, int]]:
        return sort_counts(self._counts)

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"Tally(name={self.name!r}, keys={len(self._counts)})"
