"""
Storage abstraction for the identifier registry.

This module provides a pluggable storage interface supporting:
- In-memory (transient, reference behavior)
- JSON file (persistent, whole-file rewrite on every mutation)
- Caching decorator (write-through mirror over any backend)

Invariants:
    - Every backend implements the IdStorage protocol
    - Backends are observably equivalent for all protocol operations
    - Absence is never an error

How to change safely:
    - New backends must implement IdStorage
    - Backends can be composed by wrapping, never by inheritance
"""

from .base import IdStorage, check_counter_value, create_storage
from .cached import CachedIdStorage
from .file import FileIdStorage
from .memory import InMemoryIdStorage

__all__ = [
    # Protocol
    "IdStorage",
    "check_counter_value",
    # Factory
    "create_storage",
    # Implementations
    "InMemoryIdStorage",
    "FileIdStorage",
    "CachedIdStorage",
]
