import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from authapi.client import DEFAULT_SERVICE_URL, DirectoryClient, DirectoryClientError
from authapi.validation import MIN_PASSWORD_LENGTH


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register a user with a running directory service")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument(
        "--service-url",
        dest="service_url",
        default=None,
        help=f"Base URL of the service (defaults to AUTHAPI_SERVICE_URL or {DEFAULT_SERVICE_URL})",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < MIN_PASSWORD_LENGTH:
            print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    service_url = args.service_url or os.getenv("AUTHAPI_SERVICE_URL") or DEFAULT_SERVICE_URL
    client = DirectoryClient(service_url)

    try:
        user = client.register(args.email.strip(), password)
    except DirectoryClientError as exc:  # duplicates, bad format, unreachable service
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Registered user #{user.id}: {user.email} (created {user.created_at})")
    print("Accounts live in service memory only and are lost when the service restarts.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
