"""Canonical player model shared by the directory service and its stores."""

from __future__ import annotations

from typing import Any, List, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from playerdir.errors import StorageError


class Player(BaseModel):
    """A player identity plus its append-only match history."""

    id: str = ""
    email: str = Field(..., min_length=1)
    name: str = ""
    nick_name: str = ""
    age: int = 0
    matches: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("matches", mode="before")
    @classmethod
    def _matches_default(cls, value: Any) -> Any:
        # Stores drop empty lists; a missing attribute means no history yet.
        return [] if value is None else value

    def to_item(self) -> dict[str, Any]:
        """Return the item shape written to the backing table."""

        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "nick_name": self.nick_name,
            "age": self.age,
            "matches": list(self.matches),
        }

    @classmethod
    def from_item(cls, item: Mapping[str, Any]) -> "Player":
        """Validate a stored item; malformed items are reported as StorageError."""

        try:
            data = dict(item)
            if data.get("age") is not None:
                data["age"] = int(data["age"])
            return cls.model_validate(data)
        except (ValidationError, ValueError, TypeError) as exc:
            raise StorageError(f"Malformed player item {item.get('id')!r}: {exc}") from exc
