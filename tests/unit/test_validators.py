"""
Unit tests for identifier validators.

Tests cover:
- ORCID check character (ISO 7064 MOD 11-2)
- ISBN-10 and ISBN-13 checksums
- Validator objects and the built-in lookup table
"""

import pytest

from id_registry.validators import (
    IdValidator,
    Isbn13IdValidator,
    IsbnIdValidator,
    OrcidIdValidator,
    get_builtin_validator,
    is_valid_isbn10,
    is_valid_isbn13,
    is_valid_orcid,
)


class TestOrcid:
    """Tests for ORCID validation."""

    @pytest.mark.parametrize(
        "value",
        ["0000-0002-1825-0097", "0000-0002-1694-233X", "0000-0000-0000-0001"],
    )
    def test_valid(self, value):
        assert is_valid_orcid(value)

    @pytest.mark.parametrize(
        "value",
        [
            "0000-0002-1825-0098",  # wrong check digit
            "0000-0000-0000-0000",
            "0000000218250097",  # missing hyphens
            "0000-0002-1825-009x",  # lowercase check character
            "invalid",
            "",
        ],
    )
    def test_invalid(self, value):
        assert not is_valid_orcid(value)


class TestIsbn10:
    """Tests for ISBN-10 validation."""

    def test_valid(self):
        assert is_valid_isbn10("0306406152")
        assert is_valid_isbn10("0-306-40615-2")

    def test_x_check_digit(self):
        """X stands for 10 in the check position."""
        assert is_valid_isbn10("080442957X")
        assert is_valid_isbn10("080442957x")

    def test_invalid(self):
        assert not is_valid_isbn10("0306406153")
        assert not is_valid_isbn10("invalid")
        assert not is_valid_isbn10("X306406152")
        assert not is_valid_isbn10("03064061521")


class TestIsbn13:
    """Tests for ISBN-13 validation."""

    def test_valid(self):
        assert is_valid_isbn13("9780306406157")
        assert is_valid_isbn13("978-0-306-40615-7")

    def test_invalid(self):
        assert not is_valid_isbn13("9780306406158")
        assert not is_valid_isbn13("invalid")
        assert not is_valid_isbn13("978030640615")
        assert not is_valid_isbn13("978030640615\n")


class TestValidatorObjects:
    """Tests for validator classes and lookup."""

    def test_classes_satisfy_protocol(self):
        for validator in (OrcidIdValidator(), IsbnIdValidator(), Isbn13IdValidator()):
            assert isinstance(validator, IdValidator)

    def test_classes_delegate_to_functions(self):
        assert OrcidIdValidator().validate("0000-0002-1825-0097")
        assert IsbnIdValidator().validate("0306406152")
        assert Isbn13IdValidator().validate("9780306406157")
        assert not Isbn13IdValidator().validate("0306406152")

    def test_builtin_lookup(self):
        assert get_builtin_validator("isbn10") is is_valid_isbn10
        assert get_builtin_validator("ISBN13") is is_valid_isbn13
        assert get_builtin_validator("orcid") is is_valid_orcid

    def test_unknown_builtin_raises(self):
        with pytest.raises(ValueError, match="Unknown validator 'issn'"):
            get_builtin_validator("issn")
