"""HTTP client for talking to a running user directory service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

DEFAULT_SERVICE_URL = "http://localhost:3000"


class DirectoryClientError(RuntimeError):
    """Raised when the service rejects a request or cannot be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class UserView:
    id: int
    email: str
    created_at: str

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "UserView":
        try:
            return UserView(
                id=int(data["id"]),  # type: ignore[arg-type]
                email=str(data["email"]),
                created_at=str(data["createdAt"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DirectoryClientError("Service returned an invalid user record") from exc


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("Service URL must not be empty")
    return cleaned.rstrip("/")


def _extract_error_message(payload: object, default: str) -> str:
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return default


class DirectoryClient:
    """Thin wrapper around the JSON API exposed by :mod:`authapi.service`."""

    def __init__(self, base_url: str = DEFAULT_SERVICE_URL, *, timeout: float = 10.0) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def register(self, email: str, password: str) -> UserView:
        payload = self._post("/register", {"email": email, "password": password})
        return self._extract_user(payload)

    def login(self, email: str, password: str) -> UserView:
        payload = self._post("/login", {"email": email, "password": password})
        return self._extract_user(payload)

    def list_users(self) -> List[UserView]:
        payload = self._get("/users")
        users = payload.get("users")
        if not isinstance(users, list):
            raise DirectoryClientError("Service returned an unexpected user listing")
        return [UserView.from_dict(item) for item in users]

    def info(self) -> Dict[str, object]:
        return self._get("/")

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _post(self, path: str, body: Dict[str, str]) -> Dict[str, object]:
        try:
            response = httpx.post(self._url(path), json=body, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise DirectoryClientError(f"Failed to contact directory service: {exc}") from exc
        return self._decode(response)

    def _get(self, path: str) -> Dict[str, object]:
        try:
            response = httpx.get(self._url(path), timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise DirectoryClientError(f"Failed to contact directory service: {exc}") from exc
        return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, object]:
        try:
            parsed: object = response.json()
        except ValueError:
            parsed = None

        if response.status_code >= 400:
            message = _extract_error_message(
                parsed,
                f"Directory service request failed with status {response.status_code}",
            )
            raise DirectoryClientError(message, status_code=response.status_code)

        if not isinstance(parsed, dict):
            raise DirectoryClientError(
                "Directory service returned an unexpected response format",
                status_code=response.status_code,
            )
        return parsed

    @staticmethod
    def _extract_user(payload: Dict[str, object]) -> UserView:
        user: Optional[object] = payload.get("user")
        if not isinstance(user, dict):
            raise DirectoryClientError("Service response did not include a user")
        return UserView.from_dict(user)


__all__ = ["DEFAULT_SERVICE_URL", "DirectoryClient", "DirectoryClientError", "UserView"]
