"""Monotonic entity id source.

Ids are ``<prefix>-<n>`` with a per-prefix counter starting at 1, so two
runs that perform the same actions produce the same ids.
"""

from __future__ import annotations

import itertools


class IdGenerator:
    """Hands out unique, reproducible ids per entity kind."""

    def __init__(self) -> None:
        self._counters: dict[str, itertools.count] = {}

    def next_id(self, prefix: str) -> str:
        counter = self._counters.setdefault(prefix, itertools.count(1))
        return f"{prefix}-{next(counter)}"

    def reset(self) -> None:
        self._counters.clear()
