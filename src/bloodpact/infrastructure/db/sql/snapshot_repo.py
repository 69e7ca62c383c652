from __future__ import annotations

from typing import Callable, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from bloodpact.domain.models.snapshot import WorldSnapshot
from bloodpact.domain.repositories import SnapshotRepository
from bloodpact.infrastructure.db.sql import connection
from bloodpact.infrastructure.db.sql.migrate import ensure_snapshot_schema
from bloodpact.infrastructure.serialization.world_codec import dumps_world, loads_world


def _row_to_snapshot(row) -> WorldSnapshot:
    return WorldSnapshot(
        snapshot_id=str(row.snapshot_id),
        label=str(row.label),
        turn=int(row.world_turn),
        created_at=str(row.created_at),
        world=loads_world(row.payload_json),
    )


class SqlSnapshotRepository(SnapshotRepository):
    """Snapshots stored as JSON documents in ``world_snapshot``."""

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None, *, create_schema: bool = True) -> None:
        self._session_factory = session_factory
        if create_schema:
            with self._sessions().begin() as session:
                ensure_snapshot_schema(session.connection())

    def _sessions(self):
        return self._session_factory or connection.SessionLocal

    def save(self, snapshot: WorldSnapshot) -> None:
        with self._sessions().begin() as session:
            next_sequence = session.execute(
                text("SELECT COALESCE(MAX(sequence_no), 0) + 1 FROM world_snapshot")
            ).scalar_one()
            session.execute(
                text("DELETE FROM world_snapshot WHERE snapshot_id = :sid"),
                {"sid": snapshot.snapshot_id},
            )
            session.execute(
                text(
                    """
                    INSERT INTO world_snapshot (snapshot_id, label, world_turn, created_at, sequence_no, payload_json)
                    VALUES (:sid, :label, :turn, :created_at, :seq, :payload)
                    """
                ),
                {
                    "sid": snapshot.snapshot_id,
                    "label": snapshot.label,
                    "turn": int(snapshot.turn),
                    "created_at": snapshot.created_at,
                    "seq": int(next_sequence),
                    "payload": dumps_world(snapshot.world),
                },
            )

    def get(self, snapshot_id: str) -> Optional[WorldSnapshot]:
        with self._sessions()() as session:
            row = session.execute(
                text(
                    """
                    SELECT snapshot_id, label, world_turn, created_at, payload_json
                    FROM world_snapshot
                    WHERE snapshot_id = :sid
                    """
                ),
                {"sid": snapshot_id},
            ).first()
        return _row_to_snapshot(row) if row is not None else None

    def list_recent(self, limit: Optional[int] = None) -> List[WorldSnapshot]:
        query = """
            SELECT snapshot_id, label, world_turn, created_at, payload_json
            FROM world_snapshot
            ORDER BY sequence_no DESC
        """
        params = {}
        if limit is not None:
            query += " LIMIT :limit"
            params["limit"] = max(0, int(limit))
        with self._sessions()() as session:
            rows = session.execute(text(query), params).all()
        return [_row_to_snapshot(row) for row in rows]

    def delete(self, snapshot_id: str) -> bool:
        with self._sessions().begin() as session:
            result = session.execute(
                text("DELETE FROM world_snapshot WHERE snapshot_id = :sid"),
                {"sid": snapshot_id},
            )
            return int(result.rowcount or 0) > 0

    def delete_older_than_limit(self, limit: int) -> int:
        keep = max(0, int(limit))
        with self._sessions().begin() as session:
            rows = session.execute(
                text("SELECT snapshot_id FROM world_snapshot ORDER BY sequence_no DESC")
            ).all()
            stale = [str(row.snapshot_id) for row in rows[keep:]]
            for snapshot_id in stale:
                session.execute(
                    text("DELETE FROM world_snapshot WHERE snapshot_id = :sid"),
                    {"sid": snapshot_id},
                )
        return len(stale)
