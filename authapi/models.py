"""Domain models for the user directory."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Union


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as a UTC ISO-8601 string with millisecond precision."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    rendered = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


@dataclass(frozen=True)
class User:
    """Represents a registered account held by the directory."""

    id: int
    email: str
    password: str
    created_at: datetime

    @property
    def created_at_iso(self) -> str:
        return format_timestamp(self.created_at)

    def public_view(self) -> Dict[str, Union[int, str]]:
        """Return the fields that may leave the service (never the password)."""

        return {
            "id": self.id,
            "email": self.email,
            "createdAt": self.created_at_iso,
        }

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, email={self.email!r}, created_at={self.created_at!r})"


__all__ = ["User", "format_timestamp"]
