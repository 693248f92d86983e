"""
Base protocol for identifier storage backends.

This module defines the IdStorage protocol that all backends must implement,
plus the factory that builds a backend from settings.

Invariants:
    - Codes are unique within a type (set semantics)
    - add() and remove() are idempotent
    - "Not found" is never an error: absence is an empty result, False or 0
    - Counters are non-negative and default to 0
    - Every backend is observably equivalent to InMemoryIdStorage

How to change safely:
    - Protocol changes require updating all implementations
    - Run the shared backend test suite against any new backend
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol, Set, TYPE_CHECKING, runtime_checkable
import logging

if TYPE_CHECKING:
    from ..config import RegistrySettings

logger = logging.getLogger(__name__)


@runtime_checkable
class IdStorage(Protocol):
    """Protocol for identifier storage backends.

    Backends keep two tables:
    - registered codes: id_type -> set of id_code
    - counters: id_type -> non-negative integer

    Backends share no base-class state; composition (for example a cache
    over a file backend) is done by wrapping, see CachedIdStorage.

    Example:
        >>> storage = InMemoryIdStorage()
        >>> await storage.add("isbn", "0306406152")
        >>> await storage.contains("isbn", "0306406152")
        True
    """

    @abstractmethod
    async def add(self, id_type: str, id_code: str) -> None:
        """Add a code to the set for its type (no-op if present)."""
        ...

    @abstractmethod
    async def remove(self, id_type: str, id_code: str) -> None:
        """Remove a code from the set for its type (no-op if absent)."""
        ...

    @abstractmethod
    async def contains(self, id_type: str, id_code: str) -> bool:
        """Whether the code is registered under the type."""
        ...

    @abstractmethod
    async def get_all(self, id_type: str) -> Set[str]:
        """Return a copy of all codes for a type (empty if unknown)."""
        ...

    @abstractmethod
    async def get_all_types(self) -> Set[str]:
        """Return the types that have at least one registered code."""
        ...

    @abstractmethod
    async def get_counter(self, id_type: str) -> int:
        """Return the counter for a type, 0 if never set."""
        ...

    @abstractmethod
    async def set_counter(self, id_type: str, value: int) -> None:
        """Set the counter for a type.

        Raises:
            ValueError: If value is negative
        """
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove all codes and counters."""
        ...


def check_counter_value(value: int) -> int:
    """Validate a counter value before it is stored."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Counter value must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"Counter value must be non-negative, got {value}")
    return value


def create_storage(settings: "RegistrySettings") -> IdStorage:
    """Factory function to create a storage backend from settings.

    Args:
        settings: Registry settings

    Returns:
        Backend selected by ``storage_backend``, wrapped in CachedIdStorage
        when ``cache_enabled`` is set

    Raises:
        ValueError: If backend is not supported
    """
    from ..config import StorageBackend
    from .cached import CachedIdStorage
    from .file import FileIdStorage
    from .memory import InMemoryIdStorage

    storage: IdStorage
    if settings.storage_backend == StorageBackend.MEMORY:
        storage = InMemoryIdStorage()
    elif settings.storage_backend == StorageBackend.FILE:
        storage = FileIdStorage(settings.storage_path, strict_load=settings.strict_load)
    else:
        raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")

    if settings.cache_enabled:
        storage = CachedIdStorage(storage)

    logger.debug(
        "Storage backend created",
        extra={
            "backend": settings.storage_backend.value,
            "cache_enabled": settings.cache_enabled,
        },
    )
    return storage
