"""Record stores holding serialized matches."""

from __future__ import annotations

import copy
from typing import Callable, Dict, List, Optional, Protocol

Record = Dict[str, object]


class RecordStore(Protocol):
    """Key-value store for match records.

    ``get`` returns ``None`` when no record exists and ``put`` inserts or
    replaces. Errors raised by an implementation propagate to callers as-is.
    """

    async def get(self, record_id: str) -> Optional[Record]: ...

    async def put(self, record_id: str, record: Record) -> None: ...

    async def list_where(
        self, predicate: Callable[[Record], bool], limit: int
    ) -> List[Record]: ...


class InMemoryRecordStore:
    """Process-local store. Records are deep-copied in and out."""

    def __init__(self) -> None:
        self._records: Dict[str, Record] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, record_id: str) -> Optional[Record]:
        record = self._records.get(record_id)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, record_id: str, record: Record) -> None:
        self._records[record_id] = copy.deepcopy(record)

    async def list_where(
        self, predicate: Callable[[Record], bool], limit: int
    ) -> List[Record]:
        out: List[Record] = []
        if limit <= 0:
            return out
        for record in self._records.values():
            if predicate(record):
                out.append(copy.deepcopy(record))
                if len(out) >= limit:
                    break
        return out
