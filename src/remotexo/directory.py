"""Authoritative directory of matches backed by a record store."""

from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable, Dict, List, Optional

from .game import Coord, Mark, Match, apply_move, create_match
from .store import RecordStore

logger = logging.getLogger(__name__)

LOBBY_LIMIT = 10

CommitListener = Callable[[str, Match], Awaitable[None]]


class MatchNotFoundError(LookupError):
    """Raised when no record exists for a match id."""

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Game {match_id!r} not found")
        self.match_id = match_id


@dataclass
class _MatchLock:
    """Lock for one match plus the number of tasks holding or awaiting it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class MatchDirectory:
    """Creates, loads and advances matches.

    Moves on the same match are serialized with a per-id lock; moves on
    different matches never wait on each other. Commit listeners run inside
    that lock, so they see the writes for one match in commit order, and must
    hand work off rather than wait on network peers.
    """

    def __init__(
        self,
        store: RecordStore,
        rng: Optional[random.Random] = None,
        listeners: Optional[List[CommitListener]] = None,
    ) -> None:
        self.store = store
        self._rng = rng or random.Random()
        self._listeners: List[CommitListener] = list(listeners or [])
        self._locks: Dict[str, _MatchLock] = {}

    def add_listener(self, listener: CommitListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    async def create_match(self, starting_mark: Mark = "x") -> Match:
        match = create_match(starting_mark, rng=self._rng)
        await self.store.put(match.id, match.to_record())
        logger.info("Created game %s (%s), %s to move", match.id, match.name, match.turn)
        return match

    async def get_match(self, match_id: str) -> Match:
        record = await self.store.get(match_id)
        if record is None:
            raise MatchNotFoundError(match_id)
        return Match.from_record(record)

    async def list_open_matches(self, limit: int = LOBBY_LIMIT) -> List[Match]:
        limit = max(0, min(limit, LOBBY_LIMIT))
        records = await self.store.list_where(
            lambda record: record.get("endState") is None, limit
        )
        return [Match.from_record(record) for record in records]

    async def submit_move(self, match_id: str, coord: Coord) -> Match:
        """Apply ``coord`` for the side to move and persist the result.

        A move onto an occupied cell returns the stored match without writing
        or notifying anyone.
        """
        # Unknown ids fail here, before any lock exists for them.
        await self.get_match(match_id)
        async with self._match_lock(match_id):
            current = await self.get_match(match_id)
            updated = apply_move(current, coord)
            if updated == current:
                logger.debug("Ignored move %s on occupied cell in game %s", coord, match_id)
                return current

            await self.store.put(match_id, updated.to_record())
            logger.info(
                "Game %s: %s played %s, outcome=%s",
                match_id,
                current.turn,
                coord,
                updated.outcome,
            )
            for listener in self._listeners:
                await listener(match_id, updated)
            return updated

    @asynccontextmanager
    async def _match_lock(self, match_id: str) -> AsyncIterator[None]:
        """Hold the lock for ``match_id``; the entry goes once nobody uses it."""
        entry = self._locks.get(match_id)
        if entry is None:
            entry = self._locks[match_id] = _MatchLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[match_id]
