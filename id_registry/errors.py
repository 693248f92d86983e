"""
Error types for the identifier registry.

This module defines the exceptions raised by the registry and its
storage backends:
- RegistryError: Base exception
- DuplicateIdError: Identifier already registered under its type
- IdValidationError: A per-type validator rejected a code
- GeneratorNotConfiguredError: generate_id() for a type without generator
- IdGenerationError: Auto-increment gave up after too many collisions
- StorageError / PersistenceError / StorageLoadError: Backend failures

Invariants:
    - All errors inherit from RegistryError
    - Duplicate and validation errors carry the offending type and code
    - Errors are surfaced to the immediate caller, never retried
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RegistryError(Exception):
    """Base exception for all registry errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REGISTRY_ERROR"
        self.details = details or {}


class DuplicateIdError(RegistryError):
    """Identifier already exists in the registry.

    Callers may retry with a different code or ignore the failure.
    """

    def __init__(self, id_type: str, id_code: str) -> None:
        super().__init__(
            f"{id_type}:{id_code} already exists in registry",
            code="DUPLICATE_ID",
            details={"id_type": id_type, "id_code": id_code},
        )
        self.id_type = id_type
        self.id_code = id_code


class IdValidationError(RegistryError):
    """Identifier code failed the validator registered for its type."""

    def __init__(self, id_type: str, id_code: str) -> None:
        super().__init__(
            f"{id_type}:{id_code} does not pass validation",
            code="VALIDATION_FAILED",
            details={"id_type": id_type, "id_code": id_code},
        )
        self.id_type = id_type
        self.id_code = id_code


class GeneratorNotConfiguredError(RegistryError):
    """No generator registered for the requested type."""

    def __init__(self, id_type: str) -> None:
        super().__init__(
            f"No generator registered for idType: {id_type}",
            code="GENERATOR_NOT_CONFIGURED",
            details={"id_type": id_type},
        )
        self.id_type = id_type


class IdGenerationError(RegistryError):
    """Generator could not find a free code within the attempt bound."""

    def __init__(self, id_type: str, attempts: int) -> None:
        super().__init__(
            f"Could not generate a free id for {id_type} after {attempts} attempts",
            code="GENERATION_FAILED",
            details={"id_type": id_type, "attempts": attempts},
        )
        self.id_type = id_type
        self.attempts = attempts


class StorageError(RegistryError):
    """Base class for storage backend failures."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        path: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code=code or "STORAGE_ERROR",
            details={"path": path},
        )
        self.path = path


class PersistenceError(StorageError):
    """Writing registry state to disk failed (disk full, permission denied)."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="PERSISTENCE_FAILED", path=path)


class StorageLoadError(StorageError):
    """Stored registry state could not be read or parsed.

    Only raised when strict loading is enabled; otherwise the file
    backend starts from an empty state.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message, code="STORAGE_LOAD_FAILED", path=path)
