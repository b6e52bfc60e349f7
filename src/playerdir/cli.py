"""Command-line interface for managing player records."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from typing import Iterable, Sequence

from playerdir.config import BACKENDS, Settings, build_directory
from playerdir.errors import DuplicateEmail, PlayerNotFound, StorageError
from playerdir.models import Player


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage player records")
    parser.add_argument("--backend", choices=BACKENDS, default=None, help="Override PLAYERDIR_BACKEND")
    parser.add_argument("--db", default=None, help="SQLite path (overrides PLAYERDIR_DB_PATH)")
    parser.add_argument("--table", default=None, help="DynamoDB table name (overrides DYNAMODB_TABLE)")
    parser.add_argument("--region", default=None, help="DynamoDB region (overrides DYNAMODB_AWS_REGION)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Register a new player")
    create.add_argument("--email", required=True)
    create.add_argument("--name", default="")
    create.add_argument("--nick-name", dest="nick_name", default="")
    create.add_argument("--age", type=int, default=0)

    commands.add_parser("list", help="List every player")

    find = commands.add_parser("find", help="Find players by email")
    find.add_argument("email")

    add_match = commands.add_parser("add-match", help="Append a match to a player's history")
    add_match.add_argument("email", help="Email of the player")
    add_match.add_argument("match_id")

    return parser.parse_args(argv)


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides = {
        "backend": args.backend,
        "db_path": args.db,
        "table_name": args.table,
        "region": args.region,
    }
    return replace(settings, **{key: value for key, value in overrides.items() if value is not None})


def _dump(players: Iterable[Player]) -> str:
    return json.dumps([player.model_dump() for player in players], indent=2)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        directory = build_directory(_settings(args))
        if args.command == "create":
            player = directory.create(
                Player(email=args.email, name=args.name, nick_name=args.nick_name, age=args.age)
            )
            print(_dump([player]))
        elif args.command == "list":
            print(_dump(directory.get_all()))
        elif args.command == "find":
            print(_dump(directory.get_by_email(args.email)))
        elif args.command == "add-match":
            players = directory.get_by_email(args.email)
            if not players:
                raise SystemExit(f"No player registered with email {args.email!r}")
            if len(players) > 1:
                raise SystemExit(f"Several players share email {args.email!r}; refusing to pick one")
            print(_dump([directory.add_match(players[0], args.match_id)]))
    except DuplicateEmail as exc:
        raise SystemExit(f"Cannot create player: {exc}") from exc
    except PlayerNotFound as exc:
        raise SystemExit(str(exc)) from exc
    except StorageError as exc:
        raise SystemExit(f"Player table error: {exc}") from exc


if __name__ == "__main__":
    main()
