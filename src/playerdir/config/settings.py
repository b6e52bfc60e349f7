"""Environment-driven settings for the player directory."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from playerdir.directory import PlayerDirectory
from playerdir.persistence import EMAIL_INDEX, MemoryPlayerTable, PlayerTable, SQLitePlayerTable


logger = logging.getLogger("uvicorn.error")

_BACKEND_ENV = "PLAYERDIR_BACKEND"
_DB_PATH_ENV = "PLAYERDIR_DB_PATH"
_EMAIL_INDEX_ENV = "PLAYERDIR_EMAIL_INDEX"
_TABLE_ENV = "DYNAMODB_TABLE"
_REGION_ENV = "DYNAMODB_AWS_REGION"

BACKENDS = ("sqlite", "dynamodb", "memory")

_BACKEND_DEFAULT = "sqlite"
_DB_PATH_DEFAULT = "players.sqlite"
_TABLE_DEFAULT = "Players"


@dataclass(frozen=True)
class Settings:
    backend: str = _BACKEND_DEFAULT
    db_path: str = _DB_PATH_DEFAULT
    table_name: str = _TABLE_DEFAULT
    region: str | None = None
    email_index: str = EMAIL_INDEX

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        backend = env.get(_BACKEND_ENV, _BACKEND_DEFAULT).strip().lower()
        if backend not in BACKENDS:
            logger.warning("Invalid backend for %s: %s; using default %s", _BACKEND_ENV, backend, _BACKEND_DEFAULT)
            backend = _BACKEND_DEFAULT
        return cls(
            backend=backend,
            db_path=env.get(_DB_PATH_ENV) or _DB_PATH_DEFAULT,
            table_name=env.get(_TABLE_ENV) or _TABLE_DEFAULT,
            region=env.get(_REGION_ENV) or None,
            email_index=env.get(_EMAIL_INDEX_ENV) or EMAIL_INDEX,
        )


def build_table(settings: Settings) -> PlayerTable:
    """Open the backing table named by ``settings``."""

    if settings.backend == "memory":
        return MemoryPlayerTable()
    if settings.backend == "dynamodb":
        from playerdir.persistence.dynamo import DynamoPlayerTable

        return DynamoPlayerTable.from_name(settings.table_name, settings.region)
    db_path = settings.db_path
    return SQLitePlayerTable(db_path if db_path.startswith("file:") else Path(db_path))


def build_directory(settings: Settings | None = None) -> PlayerDirectory:
    settings = settings or Settings.from_env()
    logger.info("Opening %s player table", settings.backend)
    # Local tables only know their own index name.
    email_index = settings.email_index if settings.backend == "dynamodb" else EMAIL_INDEX
    return PlayerDirectory(build_table(settings), email_index=email_index)
