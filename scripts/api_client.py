"""Lightweight REST client for the player directory API."""

from __future__ import annotations

import argparse
import json

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the player directory REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--create", metavar="EMAIL", help="Register a player with this email")
    parser.add_argument("--name", default="", help="Name for --create")
    parser.add_argument("--nick-name", default="", help="Nickname for --create")
    parser.add_argument("--age", type=int, default=0, help="Age for --create")
    parser.add_argument("--find", metavar="EMAIL", help="Look players up by email")
    parser.add_argument("--add-match", nargs=2, metavar=("EMAIL", "MATCH_ID"), help="Append a match to a player")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.create:
            resp = client.post(
                "/players",
                json={"email": args.create, "name": args.name, "nick_name": args.nick_name, "age": args.age},
            )
            if resp.status_code == 409:
                raise SystemExit(f"email {args.create} is already registered")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.add_match:
            email, match_id = args.add_match
            resp = client.get("/players", params={"email": email})
            resp.raise_for_status()
            players = resp.json()
            if not players:
                raise SystemExit(f"no player registered with email {email}")
            resp = client.post(
                f"/players/{players[0]['id']}/matches",
                json={"email": email, "match_id": match_id},
            )
            if resp.status_code == 404:
                raise SystemExit(f"player {players[0]['id']} not found")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        params = {"email": args.find} if args.find else None
        resp = client.get("/players", params=params)
        resp.raise_for_status()
        print(json.dumps(resp.json(), indent=2))


if __name__ == "__main__":
    main()
