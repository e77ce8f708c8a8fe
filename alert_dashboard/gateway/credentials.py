"""Credential store: email to password-hash records in durable storage."""
import logging
from datetime import datetime
from typing import Dict, Optional

from passlib.context import CryptContext

from ..shared.exceptions import ValidationError
from ..shared.schemas import StoredUser
from ..shared.storage import KeyValueStore

logger = logging.getLogger(__name__)

USERS_KEY = "users"
MIN_PASSWORD_LENGTH = 6

# Unsalted SHA-256 hex digest. Not a security boundary.
pwd_context = CryptContext(schemes=["hex_sha256"])


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_credentials(email: str, password: str) -> None:
    """Raise ValidationError for empty fields or a short password."""
    if not email or not password:
        raise ValidationError("Email and password cannot be empty.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")


class CredentialStore:
    """Registers and verifies users against the persisted `users` mapping."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _load(self) -> Dict[str, dict]:
        return self._store.get(USERS_KEY) or {}

    def get(self, email: str) -> Optional[StoredUser]:
        record = self._load().get(normalize_email(email))
        if record is None:
            return None
        return StoredUser.model_validate(record)

    def register(self, email: str, password: str, confirm_password: Optional[str] = None) -> StoredUser:
        """Create a user record, or raise ValidationError."""
        email = normalize_email(email)
        validate_credentials(email, password)
        if confirm_password is not None and password != confirm_password:
            raise ValidationError("Passwords do not match.")

        users = self._load()
        if email in users:
            raise ValidationError("An account with this email already exists.")

        user = StoredUser(hash=get_password_hash(password), signed_up_at=datetime.utcnow())
        users[email] = user.model_dump(by_alias=True, mode="json")
        self._store.set(USERS_KEY, users)

        logger.info(f"User registered: {email}")
        return user

    def verify(self, email: str, password: str) -> bool:
        """Check password against the stored hash; unknown emails never match."""
        user = self.get(email)
        if user is None or not password:
            return False
        return verify_password(password, user.hash)
