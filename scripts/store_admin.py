"""Operator utility for the pairing store file.

Commands:

1. ``init`` writes an empty store so the service can start on a fresh host.
2. ``check`` validates the settings and that the store file loads, reporting
   how many pairings are registered and how many are still pending.
3. ``prune`` drops pending registrations whose window has elapsed.

Example usages::

    python -m scripts.store_admin init --env-file /opt/pairing/.env
    python -m scripts.store_admin check --env-file /opt/pairing/.env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from spotify_pairing.clients import JSONFileStore, SpotifyOAuthClient
from spotify_pairing.core.config import AppSettings, _load_env_file
from spotify_pairing.core.errors import PairingError
from spotify_pairing.dependencies import build_token_cipher
from spotify_pairing.models import StoreDocument
from spotify_pairing.services import RegistrationManager

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_STORE_ERROR = 4
EXIT_RUNTIME_ERROR = 5


def _load_settings(env_file: Path) -> AppSettings:
    """Build settings after applying the supplied env file."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _json_store(settings: AppSettings, store_path: Path | None) -> JSONFileStore:
    return JSONFileStore(
        store_path or settings.storage.path,
        cipher=build_token_cipher(settings.security),
    )


def _init_store(store: JSONFileStore, force: bool) -> int:
    """Write an empty pairing document."""
    if store.exists() and not force:
        print(
            f"Store file {store.path} already exists. Pass --force to overwrite it.",
            file=sys.stderr,
        )
        return EXIT_STORE_ERROR
    store.save(StoreDocument())
    print(f"Created empty store at {store.path}")
    return EXIT_OK


def _check_store(store: JSONFileStore) -> int:
    """Load the store and summarise its contents."""
    document = store.load()
    registered = sum(1 for user in document.users.values() if user.is_registered())
    pending = len(document.users) - registered
    print(f"Store {store.path} OK: {registered} registered, {pending} pending.")
    return EXIT_OK


def _prune_store(store: JSONFileStore, settings: AppSettings) -> int:
    """Remove timed-out pending registrations and persist the result."""
    document = store.load()
    manager = RegistrationManager(settings.pairing, SpotifyOAuthClient(settings.spotify))
    removed = manager.prune_timed_out(document)
    if removed:
        store.save(document)
    print(f"Pruned {len(removed)} abandoned registrations from {store.path}")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create, validate and tidy the pairing store file."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
        subparser.add_argument(
            "--env-file",
            default=".env",
            type=Path,
            help="Path to the environment file (default: .env in the working directory).",
        )
        subparser.add_argument(
            "--store",
            default=None,
            type=Path,
            help="Override the store path from PAIRING_STORE_PATH.",
        )

    init_parser = subparsers.add_parser("init", help="Write an empty store file.")
    add_common_arguments(init_parser)
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing store file.",
    )

    check_parser = subparsers.add_parser(
        "check", help="Validate settings and the store file."
    )
    add_common_arguments(check_parser)

    prune_parser = subparsers.add_parser(
        "prune", help="Drop pending registrations past their window."
    )
    add_common_arguments(prune_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _load_settings(args.env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    store = _json_store(settings, args.store)
    command: str = args.command
    handlers: dict[str, Callable[[], int]] = {
        "init": lambda: _init_store(store, args.force),
        "check": lambda: _check_store(store),
        "prune": lambda: _prune_store(store, settings),
    }

    try:
        return handlers[command]()
    except PairingError as exc:
        print(exc.message, file=sys.stderr)
        return EXIT_STORE_ERROR
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
