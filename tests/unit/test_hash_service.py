"""Tests for TokenHashService (digests of stored bearer secrets)."""

from app.application.services.hash_service import SHA256Algorithm, TokenHashService


def test_sha256_deterministic() -> None:
    a = SHA256Algorithm()
    assert a.hash("hello") == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def test_hash_token_differs_from_raw() -> None:
    svc = TokenHashService()
    digest = svc.hash_token("raw-token")
    assert digest != "raw-token"
    assert len(digest) == 64


def test_matches() -> None:
    svc = TokenHashService()
    digest = svc.hash_token("raw-token")
    assert svc.matches("raw-token", digest)
    assert not svc.matches("other-token", digest)
