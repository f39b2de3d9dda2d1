"""Infrastructure layer for connection persistence."""
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Callable, Iterable, Protocol

from notegraph.core.errors import StoreError
from notegraph.domain import Connection, ConnectionKey, ConnectionStatus, utcnow

ConnectionPredicate = Callable[[Connection], bool]


class ConnectionRepository(Protocol):
    """Persistence contract for connection records keyed by (source, target, workspace)."""

    def insert(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> Connection: ...

    def upsert(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> Connection: ...

    def set_status(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> bool: ...

    def bulk_set_status(
        self,
        workspace_id: str,
        from_statuses: Iterable[ConnectionStatus],
        to_status: ConnectionStatus,
    ) -> int: ...

    def bulk_delete(self, workspace_id: str, predicate: ConnectionPredicate | None = None) -> int: ...

    def list_by_workspace(self, workspace_id: str) -> list[Connection]: ...

    def get(self, source_id: str, target_id: str, workspace_id: str) -> Connection | None: ...

    def reset(self) -> None: ...


class InMemoryConnectionRepository:
    """Thread-safe in-memory store used for local runs and tests.

    Every record is copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self) -> None:
        self._records: dict[ConnectionKey, Connection] = {}
        self._lock = threading.Lock()

    def insert(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> Connection:
        record = Connection(source_id=source_id, target_id=target_id, workspace_id=workspace_id, status=status)
        with self._lock:
            if record.key in self._records:
                raise StoreError(f"duplicate connection {source_id}->{target_id} in workspace {workspace_id}")
            self._records[record.key] = record
            return replace(record)

    def upsert(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> Connection:
        record = Connection(source_id=source_id, target_id=target_id, workspace_id=workspace_id, status=status)
        with self._lock:
            self._records[record.key] = record
            return replace(record)

    def set_status(self, source_id: str, target_id: str, workspace_id: str, status: ConnectionStatus) -> bool:
        with self._lock:
            record = self._records.get((source_id, target_id, workspace_id))
            if record is None:
                return False
            record.status = status
            record.updated_at = utcnow()
            return True

    def bulk_set_status(
        self,
        workspace_id: str,
        from_statuses: Iterable[ConnectionStatus],
        to_status: ConnectionStatus,
    ) -> int:
        sources = set(from_statuses)
        now = utcnow()
        updated = 0
        with self._lock:
            for record in self._records.values():
                if record.workspace_id == workspace_id and record.status in sources:
                    record.status = to_status
                    record.updated_at = now
                    updated += 1
        return updated

    def bulk_delete(self, workspace_id: str, predicate: ConnectionPredicate | None = None) -> int:
        with self._lock:
            doomed = [
                key
                for key, record in self._records.items()
                if record.workspace_id == workspace_id and (predicate is None or predicate(record))
            ]
            for key in doomed:
                del self._records[key]
        return len(doomed)

    def list_by_workspace(self, workspace_id: str) -> list[Connection]:
        with self._lock:
            return [replace(record) for record in self._records.values() if record.workspace_id == workspace_id]

    def get(self, source_id: str, target_id: str, workspace_id: str) -> Connection | None:
        with self._lock:
            record = self._records.get((source_id, target_id, workspace_id))
            return replace(record) if record else None

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
