"""Command-line interface for the user directory service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from getpass import getpass
from typing import Sequence

try:
    import httpx  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Install the project with "
        "`pip install -e .` to pull in its dependencies."
    ) from exc

from authapi.client import DEFAULT_SERVICE_URL, DirectoryClient, DirectoryClientError
from authapi.config import ServiceConfig, load_service_config, resolve_config_path
from authapi.validation import MIN_PASSWORD_LENGTH

logger = logging.getLogger("authapi.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User directory service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP service")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listening port (default: 3000)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (defaults to AUTHAPI_CONFIG or config/service.yaml)",
    )
    serve_parser.add_argument(
        "--log-level",
        default=None,
        help="Log level passed to uvicorn (default: info)",
    )

    admin_parser = subparsers.add_parser(
        "admin", help="Launch the interactive administration console"
    )
    admin_parser.add_argument(
        "--service-url",
        default=None,
        help=f"Base URL of a running directory service (default: {DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "admin"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_serve_config(args: argparse.Namespace) -> ServiceConfig:
    config_path = resolve_config_path(args.config or os.getenv("AUTHAPI_CONFIG"))
    config = load_service_config(config_path)

    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level
    if not overrides:
        return config

    merged = {
        "host": config.host,
        "port": config.port,
        "log_level": config.log_level,
        "title": config.title,
    }
    merged.update(overrides)
    return ServiceConfig.from_dict(merged)


def _serve(config: ServiceConfig) -> None:
    from authapi.service import create_app
    import uvicorn

    app = create_app(config=config)

    logger.info("Starting user directory service on %s", config.base_url)
    logger.info("Available endpoints:")
    logger.info("  - POST %s/register", config.base_url)
    logger.info("  - POST %s/login", config.base_url)
    logger.info("  - GET  %s/users", config.base_url)

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


def _run_admin_cli(client: DirectoryClient) -> None:
    """Provide an interactive console for a running service."""

    print("User Directory Administration Console")
    print(f"Connected to {client.base_url}")
    print("Press Ctrl+C at any time to exit.\n")

    try:
        while True:
            print("Select an option:")
            print("  1) List all users")
            print("  2) Register a new user")
            print("  3) Verify credentials")
            print("  4) Show service info")
            print("  5) Exit")

            choice = input("Enter choice [1-5]: ").strip()

            if choice == "1":
                _list_users(client)
            elif choice == "2":
                _register_user(client)
            elif choice == "3":
                _verify_credentials(client)
            elif choice == "4":
                _show_info(client)
            elif choice == "5":
                print("Goodbye!")
                return
            else:
                print("Invalid selection. Please choose a number from the menu.\n")

            print()
    except KeyboardInterrupt:
        print("\nExiting administration console.")


def _list_users(client: DirectoryClient) -> None:
    try:
        users = client.list_users()
    except DirectoryClientError as exc:
        print(f"Failed to list users: {exc}")
        return

    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Email':<40}  Created")
    print("-" * 72)
    for user in users:
        print(f"{user.id:>4}  {user.email:<40}  {user.created_at}")


def _register_user(client: DirectoryClient) -> None:
    print("\nRegister a new user (leave the email blank to cancel).")
    email = input("Email address: ").strip()
    if not email:
        print("Registration cancelled.")
        return

    password = _prompt_for_password()
    if password is None:
        print("Aborted registering user.")
        return

    try:
        user = client.register(email, password)
    except DirectoryClientError as exc:
        print(f"Failed to register user: {exc}")
        return

    print(f"Registered user #{user.id}: {user.email} (created {user.created_at})")


def _verify_credentials(client: DirectoryClient) -> None:
    email = input("Email address: ").strip()
    password = getpass("Password: ")

    try:
        user = client.login(email, password)
    except DirectoryClientError as exc:
        print(f"Credentials rejected: {exc}")
        return

    print(f"Credentials are valid for user #{user.id}: {user.email}")


def _show_info(client: DirectoryClient) -> None:
    try:
        info = client.info()
    except DirectoryClientError as exc:
        print(f"Failed to contact service: {exc}")
        return

    print(info.get("message", "Service responded without a status message."))
    endpoints = info.get("endpoints")
    if isinstance(endpoints, dict):
        for name, route in endpoints.items():
            print(f"  {name:<10} {route}")


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass(f"Password (min {MIN_PASSWORD_LENGTH} characters): ")
        if len(password) < MIN_PASSWORD_LENGTH:
            print("Password is too short. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        try:
            config = _resolve_serve_config(args)
        except ValueError as exc:
            raise SystemExit(f"Invalid configuration: {exc}") from exc
        _serve(config)
    elif args.command == "admin":
        service_url = args.service_url or os.getenv("AUTHAPI_SERVICE_URL") or DEFAULT_SERVICE_URL
        _run_admin_cli(DirectoryClient(service_url))


if __name__ == "__main__":
    main()
