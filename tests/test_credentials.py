# tests/test_credentials.py
import pytest

from alert_dashboard.gateway.credentials import (
    USERS_KEY,
    CredentialStore,
    get_password_hash,
)
from alert_dashboard.shared.exceptions import ValidationError
from alert_dashboard.shared.storage import SessionStore


@pytest.fixture
def credentials(durable_store):
    return CredentialStore(durable_store)


def test_verify_true_right_after_register(credentials):
    credentials.register("alice@example.com", "secret1")
    assert credentials.verify("alice@example.com", "secret1") is True


def test_verify_wrong_password_is_false(credentials):
    credentials.register("alice@example.com", "secret1")
    assert credentials.verify("alice@example.com", "secret2") is False


def test_verify_unknown_email_is_false_not_error(credentials):
    assert credentials.verify("nobody@example.com", "whatever") is False


def test_email_is_case_insensitive(credentials):
    credentials.register("  Alice@Example.COM ", "secret1")
    assert credentials.verify("alice@example.com", "secret1") is True
    with pytest.raises(ValidationError, match="already exists"):
        credentials.register("ALICE@example.com", "another1")


def test_register_duplicate_email_rejected(credentials):
    credentials.register("alice@example.com", "secret1")
    with pytest.raises(ValidationError, match="already exists"):
        credentials.register("alice@example.com", "secret1")


@pytest.mark.parametrize("email,password", [("", "secret1"), ("a@example.com", ""), ("   ", "secret1")])
def test_register_empty_fields_rejected(credentials, email, password):
    with pytest.raises(ValidationError, match="cannot be empty"):
        credentials.register(email, password)


def test_register_short_password_rejected(credentials):
    with pytest.raises(ValidationError, match="at least 6"):
        credentials.register("alice@example.com", "12345")
    assert credentials.get("alice@example.com") is None


def test_register_mismatched_confirmation_rejected(credentials):
    with pytest.raises(ValidationError, match="do not match"):
        credentials.register("alice@example.com", "secret1", "secret2")
    assert credentials.get("alice@example.com") is None


def test_stored_record_layout():
    store = SessionStore()
    CredentialStore(store).register("alice@example.com", "secret1")

    record = store.get(USERS_KEY)["alice@example.com"]
    assert set(record) == {"hash", "signedUpAt"}
    assert record["hash"] == get_password_hash("secret1")


def test_hash_is_deterministic_hex_digest():
    digest = get_password_hash("secret1")
    assert digest == get_password_hash("secret1")
    assert len(digest) == 64
    assert digest == digest.lower()
    int(digest, 16)


def test_distinct_passwords_have_distinct_hashes():
    assert get_password_hash("secret1") != get_password_hash("secret2")
