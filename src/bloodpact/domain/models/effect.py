import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class TriggerPoint(str, Enum):
    TURN_START = "turn_start"
    TURN_END = "turn_end"
    ON_ATTACK = "on_attack"
    ON_DAMAGED = "on_damaged"
    ON_EXPIRED = "on_expired"


class StatName(str, Enum):
    ATTACK = "attack"
    DEFENSE = "defense"
    SPEED = "speed"


class StatOperation(str, Enum):
    ADD = "add"
    MULTIPLY = "multiply"


PERMANENT_DURATION = -1


@dataclass(frozen=True)
class DamageAction:
    amount: int
    kind: str = field(default="damage", init=False)


@dataclass(frozen=True)
class HealAction:
    amount: int
    kind: str = field(default="heal", init=False)


@dataclass(frozen=True)
class ModifyStatAction:
    stat: StatName
    operation: StatOperation
    value: float
    kind: str = field(default="modify_stat", init=False)


@dataclass(frozen=True)
class MessageAction:
    text: str
    kind: str = field(default="message", init=False)


@dataclass(frozen=True)
class CustomAction:
    """Narrative hook; the engine hands the prompt back to the caller untouched."""

    prompt: str
    kind: str = field(default="custom", init=False)


@dataclass(frozen=True)
class ApplyEffectAction:
    effect: "Effect"
    kind: str = field(default="apply_effect", init=False)


EffectAction = Union[DamageAction, HealAction, ModifyStatAction, MessageAction, CustomAction, ApplyEffectAction]


@dataclass
class EffectTrigger:
    on: TriggerPoint
    actions: List[EffectAction] = field(default_factory=list)


@dataclass
class Effect:
    id: str
    name: str
    duration: int = PERMANENT_DURATION
    prevents_movement: bool = False
    triggers: List[EffectTrigger] = field(default_factory=list)
    source_id: Optional[str] = None

    @property
    def is_permanent(self) -> bool:
        return self.duration < 0

    def actions_for(self, trigger: TriggerPoint) -> List[EffectAction]:
        actions: List[EffectAction] = []
        for bound in self.triggers:
            if bound.on == trigger:
                actions.extend(bound.actions)
        return actions


def default_trap_effect(source_id: Optional[str] = None) -> Effect:
    """Bear-trap style snare used when a trap item carries no effect of its own."""
    return Effect(
        id=f"effect-{uuid.uuid4().hex[:12]}",
        name="Trapped",
        duration=5,
        prevents_movement=True,
        source_id=source_id,
        triggers=[
            EffectTrigger(on=TriggerPoint.TURN_START, actions=[DamageAction(amount=3)]),
            EffectTrigger(
                on=TriggerPoint.ON_ATTACK,
                actions=[ModifyStatAction(stat=StatName.ATTACK, operation=StatOperation.MULTIPLY, value=0.5)],
            ),
        ],
    )
