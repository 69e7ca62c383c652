import logging
import os
import random
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from bloodpact.application.services.action_service import ActionService
from bloodpact.application.services.contract_service import ContractService
from bloodpact.application.services.event_bus import EventBus
from bloodpact.application.services.simulation_service import SimulationService
from bloodpact.application.services.snapshot_service import DEFAULT_SNAPSHOT_LIMIT, SnapshotService
from bloodpact.application.services.turn_service import TurnService
from bloodpact.domain.events import CharacterDied
from bloodpact.domain.repositories import SnapshotRepository
from bloodpact.infrastructure.inmemory.inmemory_snapshot_repo import InMemorySnapshotRepository


logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    event_bus: EventBus
    action_service: ActionService
    contract_service: ContractService
    turn_service: TurnService
    snapshot_service: SnapshotService
    simulation: SimulationService


def configure_logging() -> None:
    level_name = os.getenv("BLOODPACT_LOG_LEVEL", "WARNING").strip().upper()
    level = getattr(logging, level_name, logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _snapshot_limit() -> int:
    raw = os.getenv("BLOODPACT_SNAPSHOT_LIMIT", str(DEFAULT_SNAPSHOT_LIMIT))
    try:
        return max(1, int(raw))
    except ValueError:
        logger.warning("Ignoring invalid BLOODPACT_SNAPSHOT_LIMIT", extra={"value": raw})
        return DEFAULT_SNAPSHOT_LIMIT


def _seed_from_env() -> Optional[int]:
    raw = os.getenv("BLOODPACT_SEED", "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid BLOODPACT_SEED", extra={"value": raw})
        return None


def _build_snapshot_repository() -> SnapshotRepository:
    database_url = os.getenv("BLOODPACT_DATABASE_URL")
    if not database_url:
        return InMemorySnapshotRepository()
    try:
        from sqlalchemy import create_engine
        from sqlalchemy.orm import sessionmaker

        from bloodpact.infrastructure.db.sql.snapshot_repo import SqlSnapshotRepository

        engine = create_engine(database_url, echo=False, future=True)
        session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
        return SqlSnapshotRepository(session_factory)
    except SQLAlchemyError as exc:
        print(f"Snapshot database unavailable, falling back to in-memory. Reason: {exc}")
        return InMemorySnapshotRepository()


def _log_death(event: CharacterDied) -> None:
    logger.info("Character died", extra={"character_id": event.character_id, "killer_id": event.killer_id})


def create_runtime(seed: Optional[int] = None, repository: Optional[SnapshotRepository] = None) -> Runtime:
    seed = seed if seed is not None else _seed_from_env()
    rng = random.Random(seed) if seed is not None else None

    event_bus = EventBus()
    event_bus.subscribe(CharacterDied, _log_death)
    action_service = ActionService(rng=rng, event_publisher=event_bus.publish)
    contract_service = ContractService(event_publisher=event_bus.publish)
    turn_service = TurnService(
        action_service=action_service,
        event_bus=event_bus,
        contract_service=contract_service,
    )
    snapshot_service = SnapshotService(repository or _build_snapshot_repository(), snapshot_limit=_snapshot_limit())
    return Runtime(
        event_bus=event_bus,
        action_service=action_service,
        contract_service=contract_service,
        turn_service=turn_service,
        snapshot_service=snapshot_service,
        simulation=SimulationService(turn_service, snapshot_service),
    )
