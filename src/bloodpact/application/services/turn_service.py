from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from bloodpact.application.dtos import CharacterKnowledge, TurnSummaryView
from bloodpact.application.services.action_service import ActionService
from bloodpact.application.services.contract_service import ContractService
from bloodpact.application.services.effect_service import (
    EffectOutcome,
    process_effects,
    resolve_expired_effects,
    tick_effect_durations,
)
from bloodpact.application.services.event_bus import EventBus
from bloodpact.application.services.knowledge_service import get_character_knowledge, is_action_legal
from bloodpact.domain.events import GameEvent, TurnAdvanced
from bloodpact.domain.models.action import (
    Action,
    ActionResult,
    DeclineContractAction,
    IssueContractAction,
    SignContractAction,
    TalkAction,
    WaitAction,
)
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import TriggerPoint
from bloodpact.domain.models.world import World


logger = logging.getLogger(__name__)


class DecisionMaker(Protocol):
    def decide(self, world: World, character: Character, knowledge: CharacterKnowledge) -> Action:
        ...


class WaitingDecisionMaker:
    def decide(self, world: World, character: Character, knowledge: CharacterKnowledge) -> Action:
        return WaitAction()


class RandomLegalDecisionMaker:
    """Picks uniformly among legal actions, filling in placeholder speech."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def decide(self, world: World, character: Character, knowledge: CharacterKnowledge) -> Action:
        candidates = [
            action
            for action in knowledge.possible_actions
            if not isinstance(action, (SignContractAction, DeclineContractAction))
        ]
        if not candidates:
            return WaitAction()
        choice = self.rng.choice(candidates)
        if isinstance(choice, TalkAction):
            return TalkAction(target_id=choice.target_id, message=f"{character.name} nods warily.")
        if isinstance(choice, IssueContractAction):
            return IssueContractAction(
                target_id=choice.target_id,
                contents="Keep your distance for three turns.",
                expiry=3,
            )
        return choice


@dataclass
class TurnOutcome:
    character_id: str
    action: Optional[Action]
    result: Optional[ActionResult]
    replaced_illegal: bool = False
    events: List[GameEvent] = field(default_factory=list)


class TurnService:
    def __init__(
        self,
        action_service: Optional[ActionService] = None,
        event_bus: Optional[EventBus] = None,
        contract_service: Optional[ContractService] = None,
    ) -> None:
        self.event_bus = event_bus
        publisher = event_bus.publish if event_bus is not None else None
        self.action_service = action_service or ActionService(event_publisher=publisher)
        self.contract_service = contract_service or ContractService(event_publisher=publisher)

    def turn_order(self, world: World) -> List[Character]:
        return world.living_characters()

    def _commit(self, world: World, outcome: EffectOutcome) -> List[GameEvent]:
        recorded = world.record_events(outcome.events)
        self.action_service.publish_deaths(world, recorded)
        return recorded

    def begin_turn(self, world: World, character: Character) -> List[GameEvent]:
        return self._commit(world, process_effects(world, character, TriggerPoint.TURN_START))

    def end_turn(self, world: World, character: Character) -> List[GameEvent]:
        if not character.alive:
            return []
        outcome = process_effects(world, character, TriggerPoint.TURN_END)
        if character.alive:
            expired = tick_effect_durations(character)
            outcome.merge(resolve_expired_effects(world, character, expired))
        return self._commit(world, outcome)

    def _settle_contract(self, world: World, character: Character, action: Action) -> List[GameEvent]:
        """Apply an accepted contract action; sign and decline answer the oldest offer."""
        if isinstance(action, IssueContractAction):
            self.contract_service.record_offer(world, character, action)
            return []
        if not isinstance(action, (SignContractAction, DeclineContractAction)):
            return []
        pending = self.contract_service.pending_offers_for(world, character)
        if not pending:
            return []
        logged = len(world.events)
        if isinstance(action, SignContractAction):
            self.contract_service.sign_contract(world, pending[0].id, character)
        else:
            self.contract_service.decline_contract(world, pending[0].id, character)
        return list(world.events[logged:])

    def take_turn(self, world: World, character: Character, decision_maker: DecisionMaker) -> TurnOutcome:
        events = self.begin_turn(world, character)
        if not character.alive:
            return TurnOutcome(character_id=character.id, action=None, result=None, events=events)

        knowledge = get_character_knowledge(world, character)
        action = decision_maker.decide(world, character, knowledge)
        replaced = False
        if not is_action_legal(knowledge, action):
            logger.warning(
                "Illegal action replaced with wait",
                extra={"character_id": character.id, "action": getattr(action, "kind", type(action).__name__)},
            )
            action = WaitAction()
            replaced = True

        result = self.action_service.execute(world, character, action)
        events.extend(result.events)
        if result.success:
            events.extend(self._settle_contract(world, character, action))

        events.extend(self.end_turn(world, character))
        return TurnOutcome(
            character_id=character.id,
            action=action,
            result=result,
            replaced_illegal=replaced,
            events=events,
        )

    def run_round(self, world: World, decision_maker: DecisionMaker) -> List[TurnOutcome]:
        outcomes: List[TurnOutcome] = []
        for character in self.turn_order(world):
            if not character.alive:
                continue
            outcomes.append(self.take_turn(world, character, decision_maker))
        world.turn += 1
        if self.event_bus is not None:
            self.event_bus.publish(TurnAdvanced(turn_after=world.turn))
        return outcomes


def summarize_outcome(outcome: TurnOutcome, turn: int) -> TurnSummaryView:
    if outcome.result is None:
        return TurnSummaryView(
            turn=turn,
            character_id=outcome.character_id,
            action_kind="none",
            success=False,
            message="Died before acting",
        )
    return TurnSummaryView(
        turn=turn,
        character_id=outcome.character_id,
        action_kind=outcome.action.kind.value,
        success=outcome.result.success,
        message=outcome.result.message,
        replaced_illegal=outcome.replaced_illegal,
    )
