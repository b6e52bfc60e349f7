"""Player directory service."""

from .service import PlayerDirectory, create_id

__all__ = ["PlayerDirectory", "create_id"]
