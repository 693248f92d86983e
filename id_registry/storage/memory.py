"""
In-memory identifier storage.

This module provides the transient backend used for:
- Unit tests
- Registries that do not need to survive the process
- The reference behavior every other backend must match

Invariants:
    - All data is lost on process exit
    - Types whose last code was removed are no longer reported by
      get_all_types()
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Set
import logging

from .base import check_counter_value

logger = logging.getLogger(__name__)


class InMemoryIdStorage:
    """In-memory implementation of IdStorage.

    Holds a type -> set-of-codes map and a type -> counter map. Nothing
    here suspends, so every call runs to completion once awaited.

    Example:
        >>> storage = InMemoryIdStorage()
        >>> await storage.set_counter("invoice", 41)
        >>> await storage.get_counter("invoice")
        41
    """

    def __init__(self) -> None:
        self._codes: Dict[str, Set[str]] = defaultdict(set)
        self._counters: Dict[str, int] = {}

    async def add(self, id_type: str, id_code: str) -> None:
        self._codes[id_type].add(id_code)
        logger.debug(
            "Code added to in-memory storage",
            extra={"id_type": id_type, "id_code": id_code},
        )

    async def remove(self, id_type: str, id_code: str) -> None:
        codes = self._codes.get(id_type)
        if codes is None:
            return
        codes.discard(id_code)
        if not codes:
            del self._codes[id_type]

    async def contains(self, id_type: str, id_code: str) -> bool:
        codes = self._codes.get(id_type)
        return codes is not None and id_code in codes

    async def get_all(self, id_type: str) -> Set[str]:
        return set(self._codes.get(id_type, ()))

    async def get_all_types(self) -> Set[str]:
        return {id_type for id_type, codes in self._codes.items() if codes}

    async def get_counter(self, id_type: str) -> int:
        return self._counters.get(id_type, 0)

    async def set_counter(self, id_type: str, value: int) -> None:
        self._counters[id_type] = check_counter_value(value)

    async def clear(self) -> None:
        self._codes.clear()
        self._counters.clear()
        logger.debug("In-memory storage cleared")
