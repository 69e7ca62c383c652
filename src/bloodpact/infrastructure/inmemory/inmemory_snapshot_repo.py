from __future__ import annotations

import copy
from typing import List, Optional

from bloodpact.domain.models.snapshot import WorldSnapshot
from bloodpact.domain.repositories import SnapshotRepository


class InMemorySnapshotRepository(SnapshotRepository):
    def __init__(self) -> None:
        self._snapshots: List[WorldSnapshot] = []

    def save(self, snapshot: WorldSnapshot) -> None:
        self._snapshots = [row for row in self._snapshots if row.snapshot_id != snapshot.snapshot_id]
        self._snapshots.append(copy.deepcopy(snapshot))

    def get(self, snapshot_id: str) -> Optional[WorldSnapshot]:
        for row in self._snapshots:
            if row.snapshot_id == snapshot_id:
                return copy.deepcopy(row)
        return None

    def list_recent(self, limit: Optional[int] = None) -> List[WorldSnapshot]:
        rows = list(reversed(self._snapshots))
        if limit is not None:
            rows = rows[: max(0, int(limit))]
        return [copy.deepcopy(row) for row in rows]

    def delete(self, snapshot_id: str) -> bool:
        before = len(self._snapshots)
        self._snapshots = [row for row in self._snapshots if row.snapshot_id != snapshot_id]
        return len(self._snapshots) != before

    def delete_older_than_limit(self, limit: int) -> int:
        overflow = len(self._snapshots) - max(0, int(limit))
        if overflow <= 0:
            return 0
        del self._snapshots[:overflow]
        return overflow
