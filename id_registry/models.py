"""
Identifier value types.

An identifier pair is one typed value (``isbn`` / ``978-0-306-40615-7``).
An identifier set bundles the pairs describing one logical entity and is
the unit that the registry registers and unregisters.

Invariants:
    - Pairs are immutable and hashable
    - A set preserves caller order and never holds the same
      (id_type, id_code) twice
    - Types may repeat inside a set only with distinct codes

Example:
    >>> book = IdPairSet([("isbn", "0306406152"), ("ean", "9780306406157")])
    >>> [p.display_name for p in book]
    ['isbn: 0306406152', 'ean: 9780306406157']
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Tuple, Union


def normalize_type(id_type: Any) -> str:
    """Render an identifier type as the string key used by storage."""
    if isinstance(id_type, Enum):
        return str(id_type.value)
    return str(id_type)


@dataclass(frozen=True)
class IdPair:
    """One typed identifier.

    Attributes:
        id_type: Discriminator such as ``isbn`` or ``orcid`` (enum members
            are stored by value)
        id_code: The identifier value itself
    """

    id_type: str
    id_code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "id_type", normalize_type(self.id_type))
        object.__setattr__(self, "id_code", str(self.id_code))

    @property
    def is_valid(self) -> bool:
        """Whether both type and code are non-empty."""
        return bool(self.id_type) and bool(self.id_code)

    @property
    def display_name(self) -> str:
        return f"{self.id_type}: {self.id_code}"

    def __str__(self) -> str:
        return f"{self.id_type}:{self.id_code}"


PairLike = Union[IdPair, Tuple[Any, Any]]


@dataclass(frozen=True, init=False)
class IdPairSet:
    """Ordered, de-duplicated collection of identifier pairs."""

    id_pairs: Tuple[IdPair, ...]

    def __init__(self, pairs: Iterable[PairLike] = ()) -> None:
        seen = set()
        ordered = []
        for item in pairs:
            pair = item if isinstance(item, IdPair) else IdPair(*item)
            if pair in seen:
                continue
            seen.add(pair)
            ordered.append(pair)
        object.__setattr__(self, "id_pairs", tuple(ordered))

    @classmethod
    def of(cls, *pairs: PairLike) -> IdPairSet:
        return cls(pairs)

    def types(self) -> Tuple[str, ...]:
        """Distinct identifier types in first-seen order."""
        return tuple(dict.fromkeys(p.id_type for p in self.id_pairs))

    def __iter__(self) -> Iterator[IdPair]:
        return iter(self.id_pairs)

    def __len__(self) -> int:
        return len(self.id_pairs)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, tuple) and len(item) == 2:
            item = IdPair(*item)
        return item in self.id_pairs
