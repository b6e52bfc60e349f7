"""Player directory: email uniqueness, id assignment and match history."""

from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from playerdir.errors import ConditionFailed, DuplicateEmail, PlayerNotFound
from playerdir.models import Player
from playerdir.persistence import EMAIL_INDEX, PRIMARY_KEY, PlayerTable


logger = logging.getLogger("uvicorn.error")


def create_id() -> str:
    """Return a fresh random identifier; never checked against the table."""

    return str(uuid4())


class PlayerDirectory:
    """Reads and writes player records through an injected table.

    ``create`` checks the email index and then writes. On tables that cannot
    guard the email inside the write (memory, DynamoDB) concurrent creates
    with the same email may both succeed; callers needing the guarantee must
    serialize creates or use the SQLite table.
    """

    def __init__(self, table: PlayerTable, *, email_index: str = EMAIL_INDEX):
        self.table = table
        self.email_index = email_index

    def create(self, candidate: Player) -> Player:
        existing = self.get_by_email(candidate.email)
        if existing:
            logger.info("Rejected player create: email %s already registered", candidate.email)
            raise DuplicateEmail(candidate)

        player = candidate.model_copy(update={PRIMARY_KEY: create_id()})
        try:
            self.table.put(player.to_item(), unique_email=True)
        except ConditionFailed as exc:
            logger.info("Rejected player create: email %s stored concurrently", candidate.email)
            raise DuplicateEmail(candidate) from exc
        logger.debug("Created player %s", player.id)
        return player

    def add_match(self, player: Player, match_id: str) -> Player:
        if not player.id:
            raise PlayerNotFound(player.id)
        matches = [*player.matches, match_id]
        try:
            item = self.table.update_set(player.id, "matches", matches)
        except ConditionFailed as exc:
            logger.info("Cannot add match %s: player %s does not exist", match_id, player.id)
            raise PlayerNotFound(player.id) from exc
        logger.debug("Added match %s to player %s", match_id, player.id)
        return Player.from_item(item)

    def get_all(self) -> List[Player]:
        return [Player.from_item(item) for item in self.table.scan_all()]

    def get_by_email(self, email: str) -> List[Player]:
        items = self.table.query_index(self.email_index, "email", email)
        return [Player.from_item(item) for item in items]
