"""Per-match rooms that push game updates to connected viewers."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from fastapi import WebSocketDisconnect

from .directory import MatchDirectory
from .game import Match

logger = logging.getLogger(__name__)

ROOM_PREFIX = "match-"
# Payloads a viewer may fall behind by before it is dropped as unresponsive.
SUBSCRIBER_BACKLOG = 64


class Connection(Protocol):
    """Anything that can receive JSON payloads, e.g. a FastAPI ``WebSocket``."""

    async def send_json(self, data: Any) -> None: ...


def room_key(match_id: str) -> str:
    return f"{ROOM_PREFIX}{match_id}"


@dataclass
class _Subscriber:
    """One connection in one room, with its own outbox and sender task."""

    connection: Connection
    outbox: "asyncio.Queue[Dict[str, object]]" = field(
        default_factory=lambda: asyncio.Queue(maxsize=SUBSCRIBER_BACKLOG)
    )
    task: Optional["asyncio.Task[None]"] = field(default=None, repr=False)


class RoomBroadcaster:
    """Fans match updates out to every connection subscribed to that match.

    ``notify`` only queues payloads; each subscriber's sender task does the
    actual writes, so a slow viewer never holds up a move or other viewers.
    Rooms only ever read matches handed to them; the record store is reached
    through the directory for join lookups and nothing else.
    """

    def __init__(self, directory: MatchDirectory) -> None:
        self.directory = directory
        self._rooms: Dict[str, List[_Subscriber]] = {}

    def subscribers(self, match_id: str) -> List[Connection]:
        return [sub.connection for sub in self._rooms.get(room_key(match_id), ())]

    async def join(self, connection: Connection, match_id: str) -> Match:
        """Subscribe ``connection``; raises ``MatchNotFoundError`` for unknown ids."""

        match = await self.directory.get_match(match_id)
        key = room_key(match_id)
        members = self._rooms.setdefault(key, [])
        if any(sub.connection is connection for sub in members):
            return match

        sub = _Subscriber(connection)
        sub.task = asyncio.create_task(self._pump(key, sub))
        members.append(sub)
        logger.debug("Connection %s joined %s", id(connection), key)
        self._publish(key, {"type": "user-joined", "connectionId": str(id(connection))})
        return match

    async def leave(self, connection: Connection, match_id: str) -> None:
        key = room_key(match_id)
        for sub in list(self._rooms.get(key, ())):
            if sub.connection is connection:
                self._discard(key, sub)
        logger.debug("Connection %s left %s", id(connection), key)

    async def notify(self, match_id: str, match: Match) -> None:
        """Queue the full match record for the room. Never waits on viewers."""
        self._publish(
            room_key(match_id), {"type": "game-updated", "game": match.to_record()}
        )

    async def drain(self) -> None:
        """Wait until every queued payload has been sent or discarded."""
        for members in list(self._rooms.values()):
            for sub in list(members):
                await sub.outbox.join()

    # ---- helpers ----

    def _publish(self, key: str, payload: Dict[str, object]) -> None:
        for sub in list(self._rooms.get(key, ())):
            try:
                sub.outbox.put_nowait(payload)
            except asyncio.QueueFull:
                logger.warning(
                    "Dropping connection %s from %s: %d updates behind",
                    id(sub.connection),
                    key,
                    SUBSCRIBER_BACKLOG,
                )
                self._discard(key, sub)

    async def _pump(self, key: str, sub: _Subscriber) -> None:
        while True:
            payload = await sub.outbox.get()
            try:
                await sub.connection.send_json(payload)
            except (RuntimeError, ConnectionError, WebSocketDisconnect):
                logger.warning(
                    "Dropping unreachable connection %s from %s", id(sub.connection), key
                )
                self._discard(key, sub, cancel=False)
                return
            finally:
                sub.outbox.task_done()

    def _discard(self, key: str, sub: _Subscriber, cancel: bool = True) -> None:
        members = self._rooms.get(key)
        if members is not None:
            members[:] = [member for member in members if member is not sub]
            if not members:
                self._rooms.pop(key, None)
        # Unsent payloads are abandoned so ``drain`` never waits on them.
        while not sub.outbox.empty():
            sub.outbox.get_nowait()
            sub.outbox.task_done()
        if cancel and sub.task is not None:
            sub.task.cancel()
