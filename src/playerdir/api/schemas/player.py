from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from playerdir.models import Player


class PlayerCreateRequest(BaseModel):
    email: str = Field(..., min_length=1)
    name: str = ""
    nick_name: str = ""
    age: int = 0

    def to_player(self) -> Player:
        return Player(email=self.email, name=self.name, nick_name=self.nick_name, age=self.age)


class AddMatchRequest(BaseModel):
    email: str = Field(..., min_length=1)
    match_id: str = Field(..., min_length=1)


class PlayerResponse(BaseModel):
    id: str
    email: str
    name: str
    nick_name: str
    age: int
    matches: List[str]

    @classmethod
    def from_player(cls, player: Player) -> "PlayerResponse":
        return cls.model_validate(player.model_dump())
