"""Identifier generator kinds."""

from __future__ import annotations

from enum import Enum


class GeneratorKind(Enum):
    """Strategies for creating unique codes on demand."""

    # "1", "2", "3", ... per type, backed by the storage counter
    AUTO_INCREMENT = "auto-increment"
    # Random UUID4 in canonical string form
    UUID = "uuid"
