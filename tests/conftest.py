"""Shared fixtures and fakes for the RemoteXO tests."""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from remotexo.directory import MatchDirectory
from remotexo.store import InMemoryRecordStore


class FakeConnection:
    """Collects every payload pushed to it."""

    def __init__(self) -> None:
        self.sent: List[dict] = []

    async def send_json(self, data) -> None:
        self.sent.append(data)

    def of_type(self, kind: str) -> List[dict]:
        return [payload for payload in self.sent if payload["type"] == kind]


class ClosedConnection:
    """Behaves like a socket whose peer already went away."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send_json(self, data) -> None:
        self.attempts += 1
        raise RuntimeError("Cannot call 'send' once a close message has been sent.")


class YieldingStore(InMemoryRecordStore):
    """In-memory store that suspends on every call, like real I/O would."""

    async def get(self, record_id):
        await asyncio.sleep(0)
        return await super().get(record_id)

    async def put(self, record_id, record):
        await asyncio.sleep(0)
        await super().put(record_id, record)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def directory(store) -> MatchDirectory:
    return MatchDirectory(store)


class StalledConnection:
    """A viewer whose writes never complete, e.g. stuck on a full TCP buffer."""

    def __init__(self) -> None:
        self.release = asyncio.Event()

    async def send_json(self, data) -> None:
        await self.release.wait()
