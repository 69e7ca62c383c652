from __future__ import annotations

import copy
import logging
import time
from datetime import datetime, timezone
from typing import List, Optional

from bloodpact.application.dtos import SnapshotView
from bloodpact.domain.models.snapshot import WorldSnapshot
from bloodpact.domain.models.world import World
from bloodpact.domain.repositories import SnapshotRepository


DEFAULT_SNAPSHOT_LIMIT = 24

logger = logging.getLogger(__name__)


def _to_view(snapshot: WorldSnapshot) -> SnapshotView:
    return SnapshotView(
        snapshot_id=snapshot.snapshot_id,
        label=snapshot.label,
        turn=snapshot.turn,
        created_at=snapshot.created_at,
    )


class SnapshotService:
    """Capture, list and restore whole-world copies for undo."""

    def __init__(self, repository: SnapshotRepository, snapshot_limit: int = DEFAULT_SNAPSHOT_LIMIT) -> None:
        self.repository = repository
        self.snapshot_limit = max(1, int(snapshot_limit))
        self._counter = 0

    def create_snapshot_intent(self, world: World, label: Optional[str] = None) -> SnapshotView:
        self._counter += 1
        now_ms = int(time.time() * 1000)
        snapshot = WorldSnapshot(
            snapshot_id=f"snapshot-{now_ms}-{self._counter}",
            label=str(label or "").strip() or f"Turn {world.turn}",
            turn=world.turn,
            created_at=datetime.now(timezone.utc).isoformat(),
            world=copy.deepcopy(world),
        )
        self.repository.save(snapshot)
        pruned = self.repository.delete_older_than_limit(self.snapshot_limit)
        if pruned:
            logger.debug("Pruned old snapshots", extra={"count": pruned})
        return _to_view(snapshot)

    def list_snapshots_intent(self) -> List[SnapshotView]:
        return [_to_view(row) for row in self.repository.list_recent()]

    def load_snapshot_intent(self, snapshot_id: str) -> World:
        target = str(snapshot_id or "").strip()
        snapshot = self.repository.get(target)
        if snapshot is None:
            raise KeyError(f"Snapshot not found: {target}")
        return copy.deepcopy(snapshot.world)

    def undo_intent(self) -> Optional[World]:
        """Restore the newest snapshot and drop it from the history."""
        recent = self.repository.list_recent(limit=1)
        if not recent:
            return None
        latest = recent[0]
        self.repository.delete(latest.snapshot_id)
        return copy.deepcopy(latest.world)
