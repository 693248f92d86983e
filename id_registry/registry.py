"""
Identifier Registry.

The IdRegistry is the central authority for identifier uniqueness. It
combines one storage backend with per-type validators and per-type
generators and provides:
- Registration of identifier sets with validation and duplicate checks
- Unregistration, lookup and enumeration
- Unique id generation (auto-increment or UUID)

Invariants:
    - (id_type, id_code) is registered at most once
    - Pairs of one set are checked and written in the set's order
    - With atomic registration (the default) a rejected set writes nothing;
      without it, pairs before the rejected one stay registered
    - Check-then-act sequences run under one lock, so concurrent tasks
      cannot both pass the duplicate check for the same pair
    - Generated ids are registered before they are returned
    - clear() resets codes, counters and validators; generators survive
      unless clear(include_generators=True) is used

How to change safely:
    - Keep storage access behind the IdStorage protocol
    - Any new write path must take self._lock

Example:
    >>> registry = IdRegistry()
    >>> registry.set_validator("isbn", is_valid_isbn10)
    >>> await registry.register(IdPairSet([("isbn", "0306406152")]))
    >>> registry.register_generator("invoice", GeneratorKind.AUTO_INCREMENT)
    >>> await registry.generate_id("invoice")
    '1'
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union, TYPE_CHECKING

from .errors import (
    DuplicateIdError,
    GeneratorNotConfiguredError,
    IdGenerationError,
    IdValidationError,
)
from .generators import GeneratorKind
from .models import IdPair, IdPairSet, normalize_type
from .storage import IdStorage, InMemoryIdStorage, create_storage
from .validators import IdValidator, ValidatorFunc

if TYPE_CHECKING:
    from .config import RegistrySettings

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r"[0-9]+")


class FailureKind(Enum):
    """Why a registration was rejected."""

    DUPLICATE = "duplicate"
    VALIDATION = "validation"


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration attempt.

    Attributes:
        applied: Pairs written to storage by this attempt
        failure: Why the attempt was rejected, None on success
        id_type: Type of the rejected pair
        id_code: Code of the rejected pair

    A failed result with a non-empty ``applied`` means the set was
    partially registered (only possible with atomic registration off).
    """

    applied: Tuple[IdPair, ...] = ()
    failure: Optional[FailureKind] = None
    id_type: Optional[str] = None
    id_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def is_partial(self) -> bool:
        """Whether the attempt failed after writing some pairs."""
        return not self.ok and bool(self.applied)

    def raise_for_failure(self) -> None:
        """Raise the exception matching this result, if it failed.

        Raises:
            DuplicateIdError: For a duplicate failure
            IdValidationError: For a validation failure
        """
        if self.failure is FailureKind.DUPLICATE:
            raise DuplicateIdError(self.id_type or "", self.id_code or "")
        if self.failure is FailureKind.VALIDATION:
            raise IdValidationError(self.id_type or "", self.id_code or "")


class IdRegistry:
    """Registry enforcing global uniqueness of typed identifiers.

    The registry owns the validator and generator tables; the storage
    backend owns codes and counters.

    Thread-safety:
        Safe for concurrent use from coroutines on one event loop. Not
        coordinated across processes, even when they share a file.

    Attributes:
        atomic_register: Check every pair before writing any of them
        max_generate_attempts: Collision retries for auto-increment ids

    Example:
        >>> registry = IdRegistry(storage=FileIdStorage("ids.json"))
        >>> await registry.register(IdPairSet([("isbn", "0306406152")]))
        >>> await registry.is_registered("isbn", "0306406152")
        True
    """

    def __init__(
        self,
        storage: Optional[IdStorage] = None,
        *,
        atomic_register: bool = True,
        max_generate_attempts: int = 1000,
    ) -> None:
        """Initialize the registry.

        Args:
            storage: Storage backend (in-memory if not provided)
            atomic_register: Check every pair before writing any of them
            max_generate_attempts: Collision retries for auto-increment ids
        """
        if max_generate_attempts < 1:
            raise ValueError("max_generate_attempts must be at least 1")
        self._storage: IdStorage = storage if storage is not None else InMemoryIdStorage()
        self._validators: Dict[str, ValidatorFunc] = {}
        self._generators: Dict[str, GeneratorKind] = {}
        self._lock = asyncio.Lock()
        self.atomic_register = atomic_register
        self.max_generate_attempts = max_generate_attempts

    @classmethod
    def from_settings(cls, settings: "RegistrySettings") -> IdRegistry:
        """Build a registry and its storage backend from settings."""
        return cls(
            storage=create_storage(settings),
            atomic_register=settings.atomic_register,
            max_generate_attempts=settings.max_generate_attempts,
        )

    @property
    def storage(self) -> IdStorage:
        """The storage backend."""
        return self._storage

    # Registration

    async def register(self, id_pair_set: IdPairSet) -> None:
        """Register every pair of a set.

        Args:
            id_pair_set: Identifiers describing one logical entity

        Raises:
            IdValidationError: If a validator rejects a code
            DuplicateIdError: If a pair is already registered
        """
        result = await self.try_register(id_pair_set)
        result.raise_for_failure()

    async def try_register(self, id_pair_set: IdPairSet) -> RegistrationResult:
        """Register a set, reporting rejection as a result instead of raising.

        Args:
            id_pair_set: Identifiers describing one logical entity

        Returns:
            RegistrationResult describing what was written and, on
            failure, which pair was rejected and why
        """
        pairs = list(id_pair_set)
        async with self._lock:
            if self.atomic_register:
                result = await self._register_atomic(pairs)
            else:
                result = await self._register_in_order(pairs)

        if result.ok:
            logger.debug(
                "Identifier set registered",
                extra={"pairs": [str(p) for p in result.applied]},
            )
        else:
            logger.debug(
                "Identifier set rejected",
                extra={
                    "failure": result.failure.value if result.failure else None,
                    "id_type": result.id_type,
                    "id_code": result.id_code,
                    "applied": len(result.applied),
                },
            )
        return result

    async def _check(self, pair: IdPair) -> Optional[FailureKind]:
        validator = self._validators.get(pair.id_type)
        if validator is not None and not validator(pair.id_code):
            return FailureKind.VALIDATION
        if await self._storage.contains(pair.id_type, pair.id_code):
            return FailureKind.DUPLICATE
        return None

    async def _register_atomic(self, pairs: List[IdPair]) -> RegistrationResult:
        for pair in pairs:
            failure = await self._check(pair)
            if failure is not None:
                return RegistrationResult(
                    failure=failure, id_type=pair.id_type, id_code=pair.id_code
                )
        for pair in pairs:
            await self._storage.add(pair.id_type, pair.id_code)
        return RegistrationResult(applied=tuple(pairs))

    async def _register_in_order(self, pairs: List[IdPair]) -> RegistrationResult:
        applied: List[IdPair] = []
        for pair in pairs:
            failure = await self._check(pair)
            if failure is not None:
                return RegistrationResult(
                    applied=tuple(applied),
                    failure=failure,
                    id_type=pair.id_type,
                    id_code=pair.id_code,
                )
            await self._storage.add(pair.id_type, pair.id_code)
            applied.append(pair)
        return RegistrationResult(applied=tuple(applied))

    async def unregister(self, id_pair_set: IdPairSet) -> None:
        """Remove every pair of a set; pairs that are not registered are ignored."""
        async with self._lock:
            for pair in id_pair_set:
                await self._storage.remove(pair.id_type, pair.id_code)
        logger.debug(
            "Identifier set unregistered",
            extra={"pairs": [str(p) for p in id_pair_set]},
        )

    # Lookup

    async def is_registered(self, id_type: Any, id_code: Any) -> bool:
        """Check if a specific type and code combination is registered."""
        return await self._storage.contains(normalize_type(id_type), str(id_code))

    async def is_pair_registered(self, id_pair: IdPair) -> bool:
        return await self._storage.contains(id_pair.id_type, id_pair.id_code)

    async def get_registered_codes(self, id_type: Any) -> Set[str]:
        """Return all registered codes for a type (empty if none)."""
        return await self._storage.get_all(normalize_type(id_type))

    async def get_all_registered_types(self) -> Set[str]:
        """Return every type known to the registry.

        This includes types with registered codes, types with a validator
        and types with a generator, even if they have no codes.
        """
        stored = await self._storage.get_all_types()
        return stored | set(self._validators) | set(self._generators)

    async def clear(self, include_generators: bool = False) -> None:
        """Clear all registrations, counters and validators.

        Generators are kept unless include_generators is set.
        """
        async with self._lock:
            await self._storage.clear()
            self._validators.clear()
            if include_generators:
                self._generators.clear()
        logger.info(
            "Registry cleared",
            extra={"generators_kept": 0 if include_generators else len(self._generators)},
        )

    # Validators

    def set_validator(self, id_type: Any, validator: ValidatorFunc) -> None:
        """Set the validator for a type, replacing any previous one.

        The validator is called with the code during registration and must
        return True for codes that are well-formed.
        """
        self._validators[normalize_type(id_type)] = validator

    def set_validator_from_instance(self, id_type: Any, validator: IdValidator) -> None:
        """Set a validator object (anything with ``validate(value)``) for a type."""
        self._validators[normalize_type(id_type)] = validator.validate

    def remove_validator(self, id_type: Any) -> bool:
        """Remove the validator for a type.

        Returns:
            True if a validator was removed, False if none was set
        """
        return self._validators.pop(normalize_type(id_type), None) is not None

    def has_validator(self, id_type: Any) -> bool:
        return normalize_type(id_type) in self._validators

    # Generators

    def register_generator(
        self, id_type: Any, kind: Union[GeneratorKind, str]
    ) -> None:
        """Register the generator for a type, replacing any previous one.

        Args:
            id_type: Identifier type
            kind: GeneratorKind or its value ("auto-increment", "uuid")

        Raises:
            ValueError: If kind is not a known generator
        """
        self._generators[normalize_type(id_type)] = GeneratorKind(kind)

    def get_generator(self, id_type: Any) -> Optional[GeneratorKind]:
        return self._generators.get(normalize_type(id_type))

    async def generate_id(self, id_type: Any) -> str:
        """Generate, register and return a unique code for a type.

        Auto-increment codes come from the type's storage counter, which is
        saved with the new code. When the next counter value is already
        taken (codes registered by hand, or a file written without
        counters), the counter first jumps to the highest numeric code of
        the type; non-numeric codes are ignored.

        Args:
            id_type: Identifier type with a registered generator

        Returns:
            The new code, already registered

        Raises:
            GeneratorNotConfiguredError: If no generator is registered
            IdGenerationError: If no free auto-increment code was found
                within max_generate_attempts
        """
        key = normalize_type(id_type)
        kind = self._generators.get(key)
        if kind is None:
            raise GeneratorNotConfiguredError(key)

        async with self._lock:
            if kind is GeneratorKind.UUID:
                code = str(uuid.uuid4())
                await self._storage.add(key, code)
            else:
                code = await self._next_sequence_code(key)

        logger.debug(
            "Identifier generated",
            extra={"id_type": key, "id_code": code, "generator": kind.value},
        )
        return code

    async def _highest_numeric_code(self, id_type: str) -> int:
        codes = await self._storage.get_all(id_type)
        numeric = (int(code) for code in codes if _NUMERIC.fullmatch(code))
        return max(numeric, default=0)

    async def _next_sequence_code(self, id_type: str) -> str:
        counter = await self._storage.get_counter(id_type)
        if await self._storage.contains(id_type, str(counter + 1)):
            # Counter is behind the stored codes (files without counters,
            # bulk imports); resume after the highest numeric code.
            counter = max(counter, await self._highest_numeric_code(id_type))
            logger.info(
                "Sequence counter seeded from registered codes",
                extra={"id_type": id_type, "counter": counter},
            )
        for _ in range(self.max_generate_attempts):
            counter += 1
            code = str(counter)
            if not await self._storage.contains(id_type, code):
                await self._storage.add(id_type, code)
                await self._storage.set_counter(id_type, counter)
                return code

        # Keep the progress so the next call starts past the occupied range.
        await self._storage.set_counter(id_type, counter)
        raise IdGenerationError(id_type, self.max_generate_attempts)
