"""Format checks applied to credentials before they reach the directory."""

from __future__ import annotations

import re

MIN_PASSWORD_LENGTH = 6

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: object) -> bool:
    """Return ``True`` for strings shaped like ``local@domain.tld``.

    This is a coarse shape check rather than an RFC 5322 validator: ``a@b.c``
    passes while ``a@b`` and ``no-at-sign`` do not.
    """

    if not isinstance(value, str):
        return False
    return _EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_password(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    return len(value) >= MIN_PASSWORD_LENGTH


__all__ = ["MIN_PASSWORD_LENGTH", "is_valid_email", "is_valid_password"]
