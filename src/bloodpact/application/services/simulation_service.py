from __future__ import annotations

import logging
from typing import Callable, List, Optional

from bloodpact.application.services.snapshot_service import SnapshotService
from bloodpact.application.services.turn_service import DecisionMaker, TurnOutcome, TurnService
from bloodpact.domain.models.world import World


logger = logging.getLogger(__name__)


class SimulationService:
    """Runs whole rounds, snapshotting the world before each one."""

    def __init__(self, turn_service: TurnService, snapshot_service: SnapshotService) -> None:
        self.turn_service = turn_service
        self.snapshot_service = snapshot_service

    def run(
        self,
        world: World,
        decision_maker: DecisionMaker,
        rounds: int,
        on_outcome: Optional[Callable[[TurnOutcome, int], None]] = None,
    ) -> List[TurnOutcome]:
        outcomes: List[TurnOutcome] = []
        for _ in range(max(0, int(rounds))):
            if len(world.living_characters()) == 0:
                logger.info("Simulation stopped early; nobody is left alive", extra={"turn": world.turn})
                break
            self.snapshot_service.create_snapshot_intent(world)
            turn = world.turn
            for outcome in self.turn_service.run_round(world, decision_maker):
                outcomes.append(outcome)
                if on_outcome is not None:
                    on_outcome(outcome, turn)
        return outcomes

    def undo_round(self) -> Optional[World]:
        return self.snapshot_service.undo_intent()
