"""Tests for bcrypt password hashing (low cost factor for speed)."""

from app.infrastructure.security import BcryptPasswordHasher, get_password_hash, verify_password


def test_hash_and_verify() -> None:
    hasher = BcryptPasswordHasher(rounds=4)
    hashed = hasher.hash("ValidPassword123!")
    assert hashed != "ValidPassword123!"
    assert hasher.verify("ValidPassword123!", hashed)
    assert not hasher.verify("ValidPassword123?", hashed)


def test_hashes_are_salted() -> None:
    assert get_password_hash("same-password", rounds=4) != get_password_hash(
        "same-password", rounds=4
    )


def test_long_passwords_are_not_truncated() -> None:
    base = "x" * 80
    hashed = get_password_hash(base + "a", rounds=4)
    assert verify_password(base + "a", hashed)
    assert not verify_password(base + "b", hashed)


def test_malformed_hash_returns_false() -> None:
    assert verify_password("anything", "not-a-bcrypt-hash") is False


def test_dummy_hash_is_valid_and_cached() -> None:
    hasher = BcryptPasswordHasher(rounds=4)
    dummy = hasher.dummy_hash()
    assert dummy.startswith("$2")
    assert hasher.dummy_hash() == dummy
    assert not hasher.verify("guess", dummy)
