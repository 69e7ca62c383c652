"""Create the snapshot table.

Usage examples:
    set BLOODPACT_DATABASE_URL=sqlite:///bloodpact.db
    python -m bloodpact.infrastructure.db.sql.migrate

    python -m bloodpact.infrastructure.db.sql.migrate --dry-run
"""

from __future__ import annotations

import argparse
import os

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError


SNAPSHOT_TABLE_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS world_snapshot (
        snapshot_id VARCHAR(64) PRIMARY KEY,
        label VARCHAR(255) NOT NULL,
        world_turn INTEGER NOT NULL,
        created_at VARCHAR(64) NOT NULL,
        sequence_no INTEGER NOT NULL,
        payload_json TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS ix_world_snapshot_sequence ON world_snapshot (sequence_no)",
)


def ensure_snapshot_schema(conn: Connection) -> None:
    for statement in SNAPSHOT_TABLE_STATEMENTS:
        conn.execute(text(statement))


def apply_schema(database_url: str) -> int:
    engine = create_engine(database_url, echo=False, future=True)
    with engine.begin() as conn:
        ensure_snapshot_schema(conn)
    engine.dispose()
    return len(SNAPSHOT_TABLE_STATEMENTS)


def _resolve_database_url(explicit_url: str | None) -> str:
    if explicit_url:
        return explicit_url
    from bloodpact.infrastructure.db.sql.connection import DATABASE_URL

    return os.getenv("BLOODPACT_DATABASE_URL") or DATABASE_URL


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the world snapshot table using SQLAlchemy")
    parser.add_argument("--database-url", type=str, default=None, help="Overrides BLOODPACT_DATABASE_URL")
    parser.add_argument("--dry-run", action="store_true", help="Print the statements without executing them")
    args = parser.parse_args()

    if args.dry_run:
        for statement in SNAPSHOT_TABLE_STATEMENTS:
            print(" ".join(statement.split()) + ";")
        return

    database_url = _resolve_database_url(args.database_url)
    try:
        count = apply_schema(database_url)
    except SQLAlchemyError as exc:
        raise SystemExit(f"Migration failed: {exc}") from exc
    print(f"Applied {count} statements.")


if __name__ == "__main__":
    main()
