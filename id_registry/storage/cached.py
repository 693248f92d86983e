"""
Caching decorator for identifier storage.

CachedIdStorage wraps any IdStorage and mirrors code sets in memory,
one type at a time, the first time the type is read or written.

Invariants:
    - add() and remove() are write-through: the backend is written first and
      the mirror follows only if that write succeeds
    - A mirrored type is answered from memory; an unmirrored type costs
      exactly one backend get_all() and is mirrored from then on
    - Counters and get_all_types() always go to the backend
    - The mirror belongs to this instance; a second decorator over the same
      backend does not see this instance's writes until it fetches the type
      itself (there is no cross-instance invalidation)

How to change safely:
    - Any new read path must either consult the mirror or bypass it
      entirely; never answer from a partially populated mirror entry
"""

from __future__ import annotations

from typing import Dict, Optional, Set
import logging

from .base import IdStorage

logger = logging.getLogger(__name__)


class CachedIdStorage:
    """Write-through cache over another IdStorage.

    The wrapped storage is referenced, not owned: closing or clearing the
    decorator does not replace it, and it can be shared with other
    components.

    Example:
        >>> storage = CachedIdStorage(FileIdStorage("ids.json"))
        >>> await storage.contains("isbn", "0306406152")  # one backend fetch
        >>> await storage.contains("isbn", "9780306406157")  # from memory
    """

    def __init__(self, storage: IdStorage) -> None:
        self._storage = storage
        self._cache: Dict[str, Set[str]] = {}

    @property
    def storage(self) -> IdStorage:
        """The wrapped backend."""
        return self._storage

    async def _mirror(self, id_type: str) -> Set[str]:
        codes = self._cache.get(id_type)
        if codes is None:
            codes = set(await self._storage.get_all(id_type))
            self._cache[id_type] = codes
            logger.debug(
                "Type mirrored from backend",
                extra={"id_type": id_type, "codes": len(codes)},
            )
        return codes

    async def add(self, id_type: str, id_code: str) -> None:
        # Populate first so the entry never holds only the new code.
        codes = await self._mirror(id_type)
        await self._storage.add(id_type, id_code)
        codes.add(id_code)

    async def remove(self, id_type: str, id_code: str) -> None:
        await self._storage.remove(id_type, id_code)
        codes = self._cache.get(id_type)
        if codes is not None:
            codes.discard(id_code)

    async def contains(self, id_type: str, id_code: str) -> bool:
        return id_code in await self._mirror(id_type)

    async def get_all(self, id_type: str) -> Set[str]:
        return set(await self._mirror(id_type))

    async def get_all_types(self) -> Set[str]:
        return await self._storage.get_all_types()

    async def get_counter(self, id_type: str) -> int:
        return await self._storage.get_counter(id_type)

    async def set_counter(self, id_type: str, value: int) -> None:
        await self._storage.set_counter(id_type, value)

    async def clear(self) -> None:
        await self._storage.clear()
        self._cache.clear()

    def invalidate(self, id_type: Optional[str] = None) -> None:
        """Drop the mirror for one type, or for every type.

        The next read of a dropped type fetches it from the backend again.
        """
        if id_type is None:
            self._cache.clear()
        else:
            self._cache.pop(id_type, None)

    def cached_types(self) -> Set[str]:
        """Types currently mirrored in memory."""
        return set(self._cache)
