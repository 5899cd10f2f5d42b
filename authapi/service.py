"""HTTP API for registering and authenticating directory users."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import ServiceConfig
from .directory import (
    DirectoryError,
    DuplicateUserError,
    InvalidCredentialsError,
    UserDirectory,
)
from .models import User

logger = logging.getLogger("authapi.service")

INVALID_BODY_MESSAGE = "Invalid request body"

SERVICE_INFO: Dict[str, object] = {
    "message": "Authentication API is running",
    "endpoints": {
        "register": "POST /register",
        "login": "POST /login",
        "users": "GET /users",
    },
}


class CredentialsRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    created_at: str = Field(alias="createdAt")


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    user: UserPayload


class UserListResponse(BaseModel):
    success: bool = True
    count: int
    users: List[UserPayload]


class EndpointIndex(BaseModel):
    register: str
    login: str
    users: str


class ServiceInfoResponse(BaseModel):
    message: str
    endpoints: EndpointIndex


def user_to_payload(user: User) -> UserPayload:
    return UserPayload(**user.public_view())


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_routes(app: FastAPI, directory: UserDirectory) -> None:
    """Expose the directory operations on the provided FastAPI application."""

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Rejected malformed body for %s %s: %s", request.method, request.url.path, exc.errors())
        return _failure(status.HTTP_400_BAD_REQUEST, INVALID_BODY_MESSAGE)

    @app.get("/", response_model=ServiceInfoResponse)
    async def service_info() -> Dict[str, object]:
        return SERVICE_INFO

    @app.post(
        "/register",
        status_code=status.HTTP_201_CREATED,
        response_model=AuthResponse,
        responses={400: {"description": "Invalid input"}, 409: {"description": "Duplicate user"}},
    )
    async def register(payload: Optional[CredentialsRequest] = None):
        credentials = payload or CredentialsRequest()
        try:
            user = directory.register(credentials.email, credentials.password)
        except DuplicateUserError as exc:
            logger.debug("Registration rejected for %s: %s", credentials.email, exc)
            return _failure(status.HTTP_409_CONFLICT, str(exc))
        except DirectoryError as exc:
            logger.debug("Registration rejected: %s", exc)
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))

        logger.info("Registered user #%s <%s>", user.id, user.email)
        return AuthResponse(message="User registered successfully", user=user_to_payload(user))

    @app.post(
        "/login",
        response_model=AuthResponse,
        responses={400: {"description": "Invalid input"}, 401: {"description": "Invalid credentials"}},
    )
    async def login(payload: Optional[CredentialsRequest] = None):
        credentials = payload or CredentialsRequest()
        try:
            user = directory.authenticate(credentials.email, credentials.password)
        except InvalidCredentialsError as exc:
            logger.debug("Login rejected for %s", credentials.email)
            return _failure(status.HTTP_401_UNAUTHORIZED, str(exc))
        except DirectoryError as exc:
            logger.debug("Login rejected: %s", exc)
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))

        logger.info("User #%s <%s> logged in", user.id, user.email)
        return AuthResponse(message="Login successful", user=user_to_payload(user))

    @app.get("/users", response_model=UserListResponse)
    async def list_users() -> UserListResponse:
        users = directory.list_users()
        return UserListResponse(count=len(users), users=[user_to_payload(user) for user in users])


def create_app(
    *,
    directory: UserDirectory | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application for the user directory."""

    settings = config or ServiceConfig()
    user_directory = directory if directory is not None else UserDirectory()

    app = FastAPI(
        title=settings.title,
        version="1.0.0",
        description="Register accounts and verify email/password credentials.",
    )
    app.state.directory = user_directory
    app.state.config = settings

    register_routes(app, user_directory)
    return app


__all__ = ["SERVICE_INFO", "create_app", "register_routes"]
