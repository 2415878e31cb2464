"""FastAPI request surface for RemoteXO matches and live rooms."""

from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field

from .ai import DecidedMatchError, MinimaxAdvisor
from .directory import LOBBY_LIMIT, MatchDirectory, MatchNotFoundError
from .game import Match, MatchFinishedError, OutOfRangeMoveError
from .rooms import RoomBroadcaster
from .store import InMemoryRecordStore

logger = logging.getLogger(__name__)

# Close code sent to sockets that ask for an unknown game.
WS_GAME_NOT_FOUND = 4404


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    starting_player: Literal["x", "o"] = Field(default="x", alias="startingPlayer")


class CellCoord(BaseModel):
    row: int = Field(ge=0, le=2)
    col: int = Field(ge=0, le=2)


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    coords: CellCoord


def create_app(
    directory: Optional[MatchDirectory] = None,
    broadcaster: Optional[RoomBroadcaster] = None,
    advisor: Optional[MinimaxAdvisor] = None,
) -> FastAPI:
    """Build the app around an explicitly owned directory, broadcaster and advisor."""

    directory = directory or MatchDirectory(InMemoryRecordStore())
    broadcaster = broadcaster or RoomBroadcaster(directory)
    advisor = advisor or MinimaxAdvisor()
    directory.add_listener(broadcaster.notify)

    app = FastAPI(title="RemoteXO", description="Tic-tac-toe between remote players")
    app.state.directory = directory
    app.state.broadcaster = broadcaster
    app.state.advisor = advisor

    async def _load(game_id: str) -> Match:
        try:
            return await directory.get_match(game_id)
        except MatchNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post("/api/game")
    async def create_game(request: NewGameRequest) -> Dict[str, object]:
        match = await directory.create_match(request.starting_player)
        return match.to_record()

    @app.get("/api/games")
    async def list_games() -> List[Dict[str, object]]:
        matches = await directory.list_open_matches(LOBBY_LIMIT)
        return [match.to_record() for match in matches]

    @app.get("/api/game/{game_id}")
    async def get_game(game_id: str) -> Dict[str, object]:
        match = await _load(game_id)
        return match.to_record()

    @app.post("/api/game/{game_id}/move")
    async def make_move(game_id: str, request: MoveRequest) -> Dict[str, object]:
        coord = (request.coords.row, request.coords.col)
        try:
            match = await directory.submit_move(game_id, coord)
        except MatchNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except OutOfRangeMoveError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except MatchFinishedError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return match.to_record()

    @app.get("/api/game/{game_id}/suggestion")
    async def suggest_move(game_id: str) -> Dict[str, int]:
        match = await _load(game_id)
        try:
            row, col = advisor.choose(match)
        except DecidedMatchError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"row": row, "col": col}

    @app.websocket("/ws/game/{game_id}")
    async def game_updates(websocket: WebSocket, game_id: str) -> None:
        await websocket.accept()
        try:
            await broadcaster.join(websocket, game_id)
        except MatchNotFoundError as exc:
            logger.info("Rejected viewer for unknown game %s", game_id)
            await websocket.send_json({"type": "error", "message": str(exc)})
            await websocket.close(code=WS_GAME_NOT_FOUND)
            return

        try:
            # Viewers only listen; inbound frames keep the socket alive.
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            await broadcaster.leave(websocket, game_id)

    return app
