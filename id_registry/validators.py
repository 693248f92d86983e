"""
Identifier format validators.

A validator is a predicate over a code string. The registry stores one
per type and consults it before the duplicate check. Predefined checks
cover ISBN-10, ISBN-13 and ORCID; any callable ``(str) -> bool`` or any
object with ``validate(value) -> bool`` can be registered as well.

Invariants:
    - Validators are pure: same input, same answer
    - Validators return False for malformed input rather than raising

Example:
    >>> is_valid_isbn10("0-306-40615-2")
    True
    >>> registry.set_validator("isbn", is_valid_isbn10)
    >>> registry.set_validator_from_instance("orcid", OrcidIdValidator())
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Protocol, runtime_checkable

ValidatorFunc = Callable[[str], bool]

_ORCID_PATTERN = re.compile(r"[0-9]{4}-[0-9]{4}-[0-9]{4}-[0-9]{3}[0-9X]")
_DIGITS = re.compile(r"[0-9]+")


@runtime_checkable
class IdValidator(Protocol):
    """Object form of a validator, for set_validator_from_instance()."""

    def validate(self, value: str) -> bool:
        """Return True if value is well-formed for the type."""
        ...


def is_valid_orcid(value: str) -> bool:
    """Validate an ORCID iD (``0000-0002-1825-0097``).

    Four hyphen-separated groups of four; the last character is an ISO 7064
    MOD 11-2 check character (digit or ``X``).
    """
    if not _ORCID_PATTERN.fullmatch(value):
        return False

    digits = value.replace("-", "")
    total = 0
    for char in digits[:-1]:
        total = (total + int(char)) * 2
    result = (12 - total % 11) % 11
    expected = "X" if result == 10 else str(result)
    return digits[-1] == expected


def is_valid_isbn10(value: str) -> bool:
    """Validate an ISBN-10, hyphens allowed, ``X`` allowed as check digit."""
    clean = value.replace("-", "").upper()
    if len(clean) != 10:
        return False
    if not _DIGITS.fullmatch(clean[:9]):
        return False

    check = clean[9]
    if check == "X":
        check_value = 10
    elif _DIGITS.fullmatch(check):
        check_value = int(check)
    else:
        return False

    total = sum(int(char) * (10 - i) for i, char in enumerate(clean[:9]))
    return (total + check_value) % 11 == 0


def is_valid_isbn13(value: str) -> bool:
    """Validate an ISBN-13, hyphens allowed."""
    clean = value.replace("-", "")
    if len(clean) != 13 or not _DIGITS.fullmatch(clean):
        return False

    total = sum(int(char) * (1 if i % 2 == 0 else 3) for i, char in enumerate(clean[:12]))
    return int(clean[12]) == (10 - total % 10) % 10


class OrcidIdValidator:
    def validate(self, value: str) -> bool:
        return is_valid_orcid(value)


class IsbnIdValidator:
    def validate(self, value: str) -> bool:
        return is_valid_isbn10(value)


class Isbn13IdValidator:
    def validate(self, value: str) -> bool:
        return is_valid_isbn13(value)


BUILTIN_VALIDATORS: Dict[str, ValidatorFunc] = {
    "isbn": is_valid_isbn10,
    "isbn10": is_valid_isbn10,
    "isbn13": is_valid_isbn13,
    "orcid": is_valid_orcid,
}


def get_builtin_validator(name: str) -> ValidatorFunc:
    """Look up a predefined validator by name.

    Raises:
        ValueError: If no validator has that name
    """
    try:
        return BUILTIN_VALIDATORS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(BUILTIN_VALIDATORS))
        raise ValueError(f"Unknown validator '{name}'. Known validators: {known}") from None
