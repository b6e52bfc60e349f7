"""Pydantic models for API I/O."""

from .player import AddMatchRequest, PlayerCreateRequest, PlayerResponse

__all__ = [
    "AddMatchRequest",
    "PlayerCreateRequest",
    "PlayerResponse",
]
