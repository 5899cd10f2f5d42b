"""In-memory user directory shared by the registration and login endpoints."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

from .models import User
from .validation import is_valid_email, is_valid_password

logger = logging.getLogger("authapi.directory")


class DirectoryError(RuntimeError):
    """Base class for rejected directory operations."""

    message = "Request could not be processed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class MissingFieldsError(DirectoryError):
    """Raised when the email or password is absent or empty."""

    message = "Email and password are required"


class InvalidEmailFormatError(DirectoryError):
    """Raised when the email is not shaped like ``local@domain.tld``."""

    message = "Invalid email format"


class PasswordTooShortError(DirectoryError):
    """Raised when a new password is shorter than six characters."""

    message = "Password must be at least 6 characters long"


class DuplicateUserError(DirectoryError):
    """Raised when registering an email that already has an account."""

    message = "User with this email already exists"


class InvalidCredentialsError(DirectoryError):
    """Raised for unknown emails and wrong passwords alike."""

    message = "Invalid email or password"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_fields(email: Optional[str], password: Optional[str]) -> None:
    if not email or not password:
        raise MissingFieldsError()


class UserDirectory:
    """Append-only collection of users guarded by a single lock."""

    def __init__(self) -> None:
        self._users: List[User] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._users)

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self._find_locked(email)

    def register(self, email: Optional[str], password: Optional[str]) -> User:
        """Validate and store a new account, returning the created record."""

        _require_fields(email, password)
        if not is_valid_email(email):
            raise InvalidEmailFormatError()
        if not is_valid_password(password):
            raise PasswordTooShortError()

        with self._lock:
            if self._find_locked(email) is not None:
                raise DuplicateUserError()
            user = User(
                id=len(self._users) + 1,
                email=email,
                password=password,
                created_at=_utcnow(),
            )
            self._users.append(user)

        logger.debug("Stored user #%s", user.id)
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        """Return the user matching both credentials or raise."""

        _require_fields(email, password)
        if not is_valid_email(email):
            raise InvalidEmailFormatError()

        user = self.find_by_email(email)
        if user is None:
            raise InvalidCredentialsError()
        if user.password != password:
            raise InvalidCredentialsError()
        return user

    def list_users(self) -> List[User]:
        with self._lock:
            return list(self._users)

    def _find_locked(self, email: str) -> Optional[User]:
        for user in self._users:
            if user.email == email:
                return user
        return None


__all__ = [
    "DirectoryError",
    "DuplicateUserError",
    "InvalidCredentialsError",
    "InvalidEmailFormatError",
    "MissingFieldsError",
    "PasswordTooShortError",
    "UserDirectory",
]
