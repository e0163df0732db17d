"""Tests for domain value objects (EmailAddress, Username, PlainPassword)."""

import pytest

from app.domain.value_objects import EmailAddress, PlainPassword, Username, looks_like_email


class TestEmailAddress:
    def test_trims_and_normalizes(self) -> None:
        email = EmailAddress("  Ann.Lee@Example.COM ")
        assert email.value == "Ann.Lee@Example.COM"
        assert email.normalized == "ann.lee@example.com"

    @pytest.mark.parametrize(
        "raw", ["", "   ", "no-at-sign", "a@b", "two@@example.com", "sp ace@x.io"]
    )
    def test_invalid_raises(self, raw: str) -> None:
        with pytest.raises(ValueError):
            EmailAddress(raw)

    def test_too_long_raises(self) -> None:
        with pytest.raises(ValueError, match="254"):
            EmailAddress("a" * 250 + "@example.com")


class TestUsername:
    def test_normalized_is_casefolded(self) -> None:
        assert Username("Ann_Lee").normalized == "ann_lee"

    @pytest.mark.parametrize("raw", ["ab", "x" * 51, "has space", "emoji🙂"])
    def test_invalid_raises(self, raw: str) -> None:
        with pytest.raises(ValueError):
            Username(raw)


class TestPlainPassword:
    def test_length_bounds(self) -> None:
        PlainPassword("12345678")
        PlainPassword("x" * 128)
        with pytest.raises(ValueError, match="at least 8"):
            PlainPassword("1234567")
        with pytest.raises(ValueError, match="128"):
            PlainPassword("x" * 129)

    def test_blank_rejected(self) -> None:
        with pytest.raises(ValueError):
            PlainPassword(" " * 10)

    def test_repr_is_masked(self) -> None:
        assert "hunter22" not in repr(PlainPassword("hunter22hunter22"))


def test_looks_like_email() -> None:
    assert looks_like_email("ann@example.com")
    assert not looks_like_email("ann")
