"""
Configuration for the identifier registry.

Uses pydantic-settings for environment variable loading. Every setting
can be provided as ``ID_REGISTRY_<NAME>`` (for example
``ID_REGISTRY_STORAGE_BACKEND=file``).

Invariants:
    - All settings have sensible defaults for local development and tests
    - The default backend is in-memory; nothing touches disk unless asked
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""

    MEMORY = "memory"
    FILE = "file"


class RegistrySettings(BaseSettings):
    """Registry configuration loaded from environment."""

    # Storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.MEMORY, description="Storage backend (memory or file)"
    )
    storage_path: str = Field(
        default="id_registry.json", description="JSON file used by the file backend"
    )
    cache_enabled: bool = Field(
        default=False, description="Wrap the backend in a write-through cache"
    )
    strict_load: bool = Field(
        default=False,
        description="Raise on a corrupt registry file instead of starting empty",
    )

    # Registry behavior
    atomic_register: bool = Field(
        default=True,
        description="Check every pair of a set before writing any of them",
    )
    max_generate_attempts: int = Field(
        default=1000, ge=1, description="Collision retries for auto-increment ids"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="text", description="Log format (text or json)")

    model_config = {"env_prefix": "ID_REGISTRY_"}

    def log_settings(self) -> None:
        """Log the effective configuration."""
        logger.info(
            "Registry configuration loaded",
            extra={
                "storage_backend": self.storage_backend.value,
                "storage_path": self.storage_path
                if self.storage_backend == StorageBackend.FILE
                else None,
                "cache_enabled": self.cache_enabled,
                "strict_load": self.strict_load,
                "atomic_register": self.atomic_register,
                "max_generate_attempts": self.max_generate_attempts,
            },
        )
