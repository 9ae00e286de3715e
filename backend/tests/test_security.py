from datetime import datetime, timedelta, timezone
import pytest
from printshop.core.exceptions import Forbidden, Unauthenticated
from printshop.core.security import (
    PasswordHasher,
    SessionClaims,
    SessionIssuer,
)

ISSUED_AT = datetime(2026, 3, 1, 9, 30, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(ISSUED_AT)


@pytest.fixture
def issuer(clock):
    return SessionIssuer("unit-test-key", clock=clock)


def test_password_hash_is_salted_and_verifiable():
    hasher = PasswordHasher(rounds=4)
    first = hasher.hash("hunter2")
    second = hasher.hash("hunter2")

    assert first != "hunter2"
    assert first != second
    assert hasher.verify("hunter2", first)
    assert not hasher.verify("hunter3", first)


def test_password_hasher_uses_configured_cost():
    assert PasswordHasher(rounds=4).hash("hunter2").startswith("$2b$04$")
    assert PasswordHasher(rounds=5).hash("hunter2").startswith("$2b$05$")


def test_issue_then_verify_returns_identity(issuer):
    token = issuer.issue(42, "ada@example.com")
    assert issuer.verify(token) == SessionClaims(user_id=42, email="ada@example.com")


def test_token_valid_until_just_before_ttl(issuer, clock):
    token = issuer.issue(1, "ada@example.com")

    clock.now = ISSUED_AT + timedelta(hours=24) - timedelta(seconds=1)
    assert issuer.verify(token).user_id == 1


def test_token_rejected_just_after_ttl(issuer, clock):
    token = issuer.issue(1, "ada@example.com")

    clock.now = ISSUED_AT + timedelta(hours=24) + timedelta(seconds=1)
    with pytest.raises(Forbidden) as excinfo:
        issuer.verify(token)
    assert excinfo.value.status_code == 403


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token_is_unauthenticated(issuer, token):
    with pytest.raises(Unauthenticated) as excinfo:
        issuer.verify(token)
    assert excinfo.value.status_code == 401


@pytest.mark.parametrize("token", ["not-a-token", "a.b", "abc.def.ghi"])
def test_malformed_token_is_unauthenticated(issuer, token):
    with pytest.raises(Unauthenticated):
        issuer.verify(token)


def test_token_signed_with_other_key_is_forbidden(issuer, clock):
    forged = SessionIssuer("some-other-key", clock=clock).issue(1, "ada@example.com")
    with pytest.raises(Forbidden):
        issuer.verify(forged)


def test_swapped_payload_is_forbidden(issuer):
    ada = issuer.issue(1, "ada@example.com")
    eve = issuer.issue(2, "eve@example.com")
    header, _, signature = ada.split(".")
    _, eve_payload, _ = eve.split(".")

    with pytest.raises(Forbidden):
        issuer.verify(f"{header}.{eve_payload}.{signature}")


def test_empty_secret_key_rejected():
    with pytest.raises(ValueError):
        SessionIssuer("")
