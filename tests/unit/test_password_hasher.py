from __future__ import annotations

import json

import pytest

from adaptive_hash.config.settings import Settings
from adaptive_hash.infrastructure.crypto.hashlib_digest import HashlibDigest
from adaptive_hash.infrastructure.security import password_hasher as password_hasher_module
from adaptive_hash.infrastructure.security.password_hasher import AdaptivePasswordHasher


def _hasher(*, algorithm: str = "sha256", min_iterations_log2: int = 4) -> AdaptivePasswordHasher:
    return AdaptivePasswordHasher(
        algorithm=algorithm,
        min_time=0.0,
        min_iterations_log2=min_iterations_log2,
    )


def test_hash_password_never_stores_plaintext_and_verifies() -> None:
    hasher = _hasher()
    password = "super-secret-password"

    password_hash = hasher.hash_password(password)

    assert password_hash != password
    assert password not in password_hash
    assert hasher.verify_password(password=password, password_hash=password_hash) is True


def test_wrong_password_fails_verification() -> None:
    hasher = _hasher()
    password_hash = hasher.hash_password("correct")

    assert hasher.verify_password(password="wrong", password_hash=password_hash) is False


def test_non_ascii_password_verifies() -> None:
    hasher = _hasher()
    password_hash = hasher.hash_password("pässwörd-🔑")

    assert hasher.verify_password(password="pässwörd-🔑", password_hash=password_hash) is True


@pytest.mark.parametrize(
    "password_hash",
    ["", "not json", '{"hash": "AA=="}', '{"algorithm": "rot13"}'],
)
def test_malformed_hash_fails_verification_without_raising(password_hash: str) -> None:
    assert _hasher().verify_password(password="pw", password_hash=password_hash) is False


def test_unsupported_stored_algorithm_fails_verification() -> None:
    record = json.loads(_hasher().hash_password("pw"))
    record["algorithm"] = "rot13"

    assert _hasher().verify_password(password="pw", password_hash=json.dumps(record)) is False


def test_needs_rehash_tracks_current_policy() -> None:
    password_hash = _hasher(min_iterations_log2=3).hash_password("pw")

    assert _hasher(min_iterations_log2=3).needs_rehash(password_hash) is False
    assert _hasher(min_iterations_log2=8).needs_rehash(password_hash) is True
    assert _hasher(algorithm="sha512", min_iterations_log2=3).needs_rehash(password_hash) is True
    assert _hasher().needs_rehash("garbage") is True


def test_verify_and_update_upgrades_matching_hash_to_policy() -> None:
    old_hash = _hasher(min_iterations_log2=2).hash_password("pw")
    policy = _hasher(algorithm="sha512", min_iterations_log2=5)

    check = policy.verify_and_update(password="pw", password_hash=old_hash)

    assert check.matched is True
    assert check.rehashed is True
    record = json.loads(check.password_hash)
    assert record["algorithm"] == "sha512"
    assert record["iterations_log2"] == 5
    assert policy.verify_password(password="pw", password_hash=check.password_hash) is True
    assert policy.needs_rehash(check.password_hash) is False


def test_verify_and_update_keeps_hash_when_policy_is_met() -> None:
    hasher = _hasher(min_iterations_log2=3)
    password_hash = hasher.hash_password("pw")

    check = hasher.verify_and_update(password="pw", password_hash=password_hash)

    assert check.matched is True
    assert check.rehashed is False
    assert check.password_hash == password_hash


def test_verify_and_update_rejects_wrong_password() -> None:
    hasher = _hasher()
    password_hash = hasher.hash_password("pw")

    check = hasher.verify_and_update(password="wrong", password_hash=password_hash)

    assert check.matched is False
    assert check.rehashed is False
    assert check.password_hash == password_hash


def test_from_settings_uses_configured_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADAPTIVE_HASH_ALGORITHM", "sha3_256")
    monkeypatch.setenv("ADAPTIVE_HASH_MIN_TIME", "0")
    monkeypatch.setenv("ADAPTIVE_HASH_MIN_ITERATIONS_LOG2", "2")
    hasher = AdaptivePasswordHasher.from_settings(Settings(_env_file=None))

    record = json.loads(hasher.hash_password("pw"))

    assert record["algorithm"] == "sha3_256"
    assert record["iterations_log2"] >= 2


def test_verify_and_update_persists_algorithm_switch_with_trivial_targets() -> None:
    old_hash = _hasher(min_iterations_log2=2).hash_password("pw")
    policy = _hasher(algorithm="sha512", min_iterations_log2=0)

    check = policy.verify_and_update(password="pw", password_hash=old_hash)

    assert check.matched is True
    assert check.rehashed is True
    assert json.loads(check.password_hash)["algorithm"] == "sha512"
    assert policy.needs_rehash(check.password_hash) is False
    assert policy.verify_password(password="pw", password_hash=check.password_hash) is True


def test_oversized_stored_iteration_count_fails_verification() -> None:
    record = json.loads(_hasher().hash_password("pw"))
    record["iterations_log2"] = 100000

    assert _hasher().verify_password(password="pw", password_hash=json.dumps(record)) is False


def test_digest_adapter_is_built_once_per_password_hasher(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    constructed: list[HashlibDigest] = []

    class RecordingHashlibDigest(HashlibDigest):
        def __init__(self) -> None:
            super().__init__()
            constructed.append(self)

    monkeypatch.setattr(password_hasher_module, "HashlibDigest", RecordingHashlibDigest)
    hasher = _hasher(min_iterations_log2=1)

    password_hash = hasher.hash_password("pw")
    hasher.verify_password(password="pw", password_hash=password_hash)
    hasher.needs_rehash(password_hash)
    hasher.verify_and_update(password="pw", password_hash=password_hash)

    assert len(constructed) == 1
