from __future__ import annotations

import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from authapi.directory import (
    DirectoryError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidEmailFormatError,
    MissingFieldsError,
    PasswordTooShortError,
    UserDirectory,
)
from authapi.models import User, format_timestamp


@pytest.fixture()
def directory() -> UserDirectory:
    return UserDirectory()


def test_register_assigns_sequential_ids(directory: UserDirectory) -> None:
    first = directory.register("one@example.com", "secret1")
    second = directory.register("two@example.com", "secret2")

    assert (first.id, second.id) == (1, 2)
    assert len(directory) == 2
    assert [user.email for user in directory.list_users()] == ["one@example.com", "two@example.com"]


def test_register_stores_password_verbatim(directory: UserDirectory) -> None:
    user = directory.register("x@y.com", "  spaced secret  ")
    assert user.password == "  spaced secret  "
    assert directory.find_by_email("x@y.com") == user


def test_register_rejects_duplicate_email(directory: UserDirectory) -> None:
    directory.register("dup@example.com", "secret1")
    with pytest.raises(DuplicateUserError):
        directory.register("dup@example.com", "another-secret")
    assert len(directory) == 1


def test_email_lookup_is_case_sensitive(directory: UserDirectory) -> None:
    directory.register("Case@Example.com", "secret1")
    assert directory.find_by_email("case@example.com") is None

    other = directory.register("case@example.com", "secret2")
    assert other.id == 2


@pytest.mark.parametrize(
    ("email", "password", "error"),
    [
        (None, "secret1", MissingFieldsError),
        ("a@b.c", None, MissingFieldsError),
        ("", "", MissingFieldsError),
        ("not-an-email", "", MissingFieldsError),
        ("not-an-email", "short", InvalidEmailFormatError),
        ("a@b", "secret1", InvalidEmailFormatError),
        ("a@b.c", "12345", PasswordTooShortError),
    ],
)
def test_register_checks_run_in_order(directory: UserDirectory, email, password, error) -> None:
    with pytest.raises(error):
        directory.register(email, password)
    assert len(directory) == 0


def test_duplicate_check_runs_after_format_checks(directory: UserDirectory) -> None:
    directory.register("taken@example.com", "secret1")
    with pytest.raises(PasswordTooShortError):
        directory.register("taken@example.com", "123")


def test_authenticate_returns_matching_user(directory: UserDirectory) -> None:
    created = directory.register("x@y.com", "secret1")
    assert directory.authenticate("x@y.com", "secret1") == created


def test_authenticate_conflates_unknown_user_and_wrong_password(directory: UserDirectory) -> None:
    directory.register("x@y.com", "secret1")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        directory.authenticate("x@y.com", "secret2")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        directory.authenticate("nobody@y.com", "secret1")

    assert str(wrong_password.value) == str(unknown_user.value) == "Invalid email or password"


def test_authenticate_validates_input_before_lookup(directory: UserDirectory) -> None:
    with pytest.raises(MissingFieldsError):
        directory.authenticate("x@y.com", "")
    with pytest.raises(InvalidEmailFormatError):
        directory.authenticate("x@y", "secret1")


def test_authenticate_does_not_enforce_password_length(directory: UserDirectory) -> None:
    with pytest.raises(InvalidCredentialsError):
        directory.authenticate("x@y.com", "abc")


def test_errors_share_a_base_class_and_fixed_messages() -> None:
    messages = {
        MissingFieldsError: "Email and password are required",
        InvalidEmailFormatError: "Invalid email format",
        PasswordTooShortError: "Password must be at least 6 characters long",
        DuplicateUserError: "User with this email already exists",
        InvalidCredentialsError: "Invalid email or password",
    }
    for error_type, message in messages.items():
        error = error_type()
        assert isinstance(error, DirectoryError)
        assert str(error) == message
        assert error.message == message


def test_list_users_returns_a_snapshot(directory: UserDirectory) -> None:
    directory.register("one@example.com", "secret1")
    snapshot = directory.list_users()
    directory.register("two@example.com", "secret2")

    assert len(snapshot) == 1
    assert len(directory.list_users()) == 2


def test_concurrent_registration_keeps_ids_and_emails_unique(directory: UserDirectory) -> None:
    emails = [f"user{index % 40}@example.com" for index in range(120)]

    def attempt(email: str):
        try:
            return directory.register(email, "secret1")
        except DuplicateUserError:
            return None

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(attempt, emails))

    created = [user for user in results if user is not None]
    assert len(created) == 40
    users = directory.list_users()
    assert [user.id for user in users] == list(range(1, 41))
    assert len({user.email for user in users}) == 40


def test_public_view_omits_password() -> None:
    user = User(
        id=7,
        email="x@y.com",
        password="secret1",
        created_at=datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc),
    )
    assert user.public_view() == {
        "id": 7,
        "email": "x@y.com",
        "createdAt": "2024-05-01T12:30:45.123Z",
    }
    assert "secret1" not in repr(user)


def test_format_timestamp_matches_javascript_iso_strings(directory: UserDirectory) -> None:
    naive = datetime(2024, 1, 2, 3, 4, 5)
    assert format_timestamp(naive) == "2024-01-02T03:04:05.000Z"

    user = directory.register("x@y.com", "secret1")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", user.created_at_iso)
