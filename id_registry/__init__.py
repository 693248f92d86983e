"""
id_registry - Global uniqueness for typed identifiers.

Callers group the identifiers of one logical entity (an ISBN, an EAN and
an internal code for the same book, say) into an IdPairSet and register
the set as a unit. The registry rejects the set if any identifier already
exists under its type, and otherwise marks every identifier as taken.

Architecture:
    ┌─────────────┐     ┌──────────────────────────────┐
    │   Caller    │────▶│          IdRegistry          │
    │ (IdPairSet) │     │ validators │ generators      │
    └─────────────┘     └──────────────┬───────────────┘
                                       │ IdStorage protocol
                                       ▼
                        ┌──────────────────────────────┐
                        │  CachedIdStorage (optional)  │
                        └──────────────┬───────────────┘
                                       │
                        ┌──────────────┴───────────────┐
                        ▼                              ▼
                 ┌─────────────┐               ┌─────────────┐
                 │  In-memory  │               │  JSON file  │
                 └─────────────┘               └─────────────┘

Invariants:
    - (id_type, id_code) is registered at most once
    - Data flows one way: registry -> storage protocol -> backend
    - Generated ids are registered before they are returned

How to change safely:
    - New backends implement IdStorage and pass the shared backend tests
    - Keep the JSON file format stable
"""

from ._version import __version__
from .config import RegistrySettings, StorageBackend
from .errors import (
    DuplicateIdError,
    GeneratorNotConfiguredError,
    IdGenerationError,
    IdValidationError,
    PersistenceError,
    RegistryError,
    StorageError,
    StorageLoadError,
)
from .generators import GeneratorKind
from .models import IdPair, IdPairSet
from .registry import FailureKind, IdRegistry, RegistrationResult
from .storage import (
    CachedIdStorage,
    FileIdStorage,
    IdStorage,
    InMemoryIdStorage,
    create_storage,
)
from .validators import (
    IdValidator,
    Isbn13IdValidator,
    IsbnIdValidator,
    OrcidIdValidator,
    get_builtin_validator,
    is_valid_isbn10,
    is_valid_isbn13,
    is_valid_orcid,
)

__all__ = [
    # Version
    "__version__",
    # Identifier types
    "IdPair",
    "IdPairSet",
    # Registry
    "IdRegistry",
    "RegistrationResult",
    "FailureKind",
    "GeneratorKind",
    # Storage
    "IdStorage",
    "InMemoryIdStorage",
    "FileIdStorage",
    "CachedIdStorage",
    "create_storage",
    # Validators
    "IdValidator",
    "OrcidIdValidator",
    "IsbnIdValidator",
    "Isbn13IdValidator",
    "get_builtin_validator",
    "is_valid_isbn10",
    "is_valid_isbn13",
    "is_valid_orcid",
    # Configuration
    "RegistrySettings",
    "StorageBackend",
    # Errors
    "RegistryError",
    "DuplicateIdError",
    "IdValidationError",
    "GeneratorNotConfiguredError",
    "IdGenerationError",
    "StorageError",
    "PersistenceError",
    "StorageLoadError",
]
