"""Error types raised by the player directory and its tables."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playerdir.models import Player


class PlayerDirectoryError(Exception):
    """Base class for every error the directory reports."""


class DuplicateEmail(PlayerDirectoryError):
    def __init__(self, player: "Player"):
        super().__init__(f"Player with email {player.email!r} already exists")
        self.player = player
        self.email = player.email


class PlayerNotFound(PlayerDirectoryError):
    def __init__(self, player_id: str):
        super().__init__(f"Player {player_id!r} not found")
        self.player_id = player_id


class StorageError(PlayerDirectoryError):
    """Failure reported by the backing table."""


class ConditionFailed(StorageError):
    """A conditional write was rejected by the backing table."""
