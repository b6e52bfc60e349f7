"""REST API for the player directory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from playerdir.api.schemas import AddMatchRequest, PlayerCreateRequest, PlayerResponse
from playerdir.config import build_directory
from playerdir.directory import PlayerDirectory
from playerdir.errors import DuplicateEmail, PlayerNotFound, StorageError


logger = logging.getLogger("uvicorn.error")


def create_app(directory: PlayerDirectory | None = None) -> FastAPI:
    app = FastAPI(title="player directory")
    directory = directory or build_directory()
    app.state.directory = directory

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.warning("Player table error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Player table unavailable"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/players", response_model=PlayerResponse, status_code=201)
    async def create_player(payload: PlayerCreateRequest):
        try:
            player = directory.create(payload.to_player())
        except DuplicateEmail as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return PlayerResponse.from_player(player)

    @app.get("/players", response_model=list[PlayerResponse])
    async def list_players(email: str | None = Query(None)):
        players = directory.get_by_email(email) if email is not None else directory.get_all()
        return [PlayerResponse.from_player(player) for player in players]

    @app.post("/players/{player_id}/matches", response_model=PlayerResponse)
    async def add_match(player_id: str, payload: AddMatchRequest):
        player = next(
            (candidate for candidate in directory.get_by_email(payload.email) if candidate.id == player_id),
            None,
        )
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        try:
            updated = directory.add_match(player, payload.match_id)
        except PlayerNotFound as exc:
            raise HTTPException(status_code=404, detail="Player not found") from exc
        return PlayerResponse.from_player(updated)

    return app
