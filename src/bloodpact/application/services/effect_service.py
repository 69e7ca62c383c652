"""Timed effects: application, trigger resolution, ticking and stat queries."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from bloodpact.domain.events import EventKind, GameEvent, SoundEffect
from bloodpact.domain.models.action import PendingCustomAction
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import (
    ApplyEffectAction,
    CustomAction,
    DamageAction,
    Effect,
    EffectAction,
    HealAction,
    MessageAction,
    ModifyStatAction,
    StatName,
    StatOperation,
    TriggerPoint,
)
from bloodpact.domain.models.world import World
from bloodpact.domain.services.visibility import get_witness_ids


logger = logging.getLogger(__name__)


@dataclass
class EffectOutcome:
    events: List[GameEvent] = field(default_factory=list)
    pending_custom_actions: List[PendingCustomAction] = field(default_factory=list)
    died: bool = False

    def merge(self, other: "EffectOutcome") -> "EffectOutcome":
        self.events.extend(other.events)
        self.pending_custom_actions.extend(other.pending_custom_actions)
        self.died = self.died or other.died
        return self


@dataclass(frozen=True)
class StatModifier:
    additive: float = 0.0
    multiplicative: float = 1.0

    def apply(self, value: float) -> float:
        return (value + self.additive) * self.multiplicative


def _event(world: World, character: Character, kind: EventKind, description: str, **extra) -> GameEvent:
    return GameEvent(
        turn=world.turn,
        kind=kind,
        description=description,
        actor_id=character.id,
        position=character.position,
        witness_ids=tuple(get_witness_ids(world, [character.position])),
        **extra,
    )


def apply_effect(character: Character, effect: Effect) -> bool:
    """Attach a copy of ``effect``; re-applying an id already present does nothing."""
    if character.find_effect(effect.id) is not None:
        return False
    character.effects.append(copy.deepcopy(effect))
    return True


def remove_effect(character: Character, effect_id: str) -> Optional[Effect]:
    effect = character.find_effect(effect_id)
    if effect is None:
        return None
    character.effects = [row for row in character.effects if row.id != effect_id]
    return effect


def is_movement_prevented(character: Character) -> Optional[Effect]:
    for effect in character.effects:
        if effect.prevents_movement:
            return effect
    return None


def kill_character(world: World, victim: Character, killer: Optional[Character] = None) -> List[GameEvent]:
    """Mark ``victim`` dead, drop everything it carries and describe it."""
    if not victim.alive:
        return []

    witnesses = tuple(get_witness_ids(world, [victim.position]))
    dropped = list(victim.inventory)
    tile = world.tile_at(victim.position)
    if tile is not None:
        tile.items.extend(dropped)

    victim.hp = 0
    victim.alive = False
    victim.inventory = []
    victim.equipped_weapon = None
    victim.equipped_clothing = None

    events: List[GameEvent] = []
    if dropped:
        events.append(
            GameEvent(
                turn=world.turn,
                kind=EventKind.DROP,
                description=f"{victim.name}'s items fell to the ground: {', '.join(item.name for item in dropped)}",
                actor_id=victim.id,
                position=victim.position,
                witness_ids=witnesses,
            )
        )
    if killer is not None:
        description = f"{victim.name} has been killed by {killer.name}!"
    else:
        description = f"{victim.name} has died."
    events.append(
        GameEvent(
            turn=world.turn,
            kind=EventKind.DEATH,
            description=description,
            actor_id=killer.id if killer is not None else victim.id,
            target_id=victim.id,
            position=victim.position,
            sound=SoundEffect.DEATH,
            witness_ids=witnesses,
        )
    )
    logger.info("Character died", extra={"character_id": victim.id, "turn": world.turn})
    return events


def apply_effect_action(
    world: World,
    character: Character,
    action: EffectAction,
    source_name: str,
    killer: Optional[Character] = None,
) -> EffectOutcome:
    outcome = EffectOutcome()
    if not character.alive:
        return outcome

    if isinstance(action, DamageAction):
        amount = max(0, int(action.amount))
        character.hp -= amount
        outcome.events.append(
            _event(
                world,
                character,
                EventKind.EFFECT,
                f"{character.name} takes {amount} damage from {source_name}",
                damage=amount,
                sound=SoundEffect.ATTACK,
            )
        )
        if character.hp <= 0:
            outcome.events.extend(kill_character(world, character, killer))
            outcome.died = True
    elif isinstance(action, HealAction):
        healed = min(max(0, int(action.amount)), character.max_hp - character.hp)
        if healed > 0:
            character.hp += healed
            outcome.events.append(
                _event(world, character, EventKind.EFFECT, f"{character.name} recovers {healed} HP from {source_name}")
            )
    elif isinstance(action, ApplyEffectAction):
        if apply_effect(character, action.effect):
            outcome.events.append(
                _event(world, character, EventKind.EFFECT, f"{character.name} is now affected by {action.effect.name}")
            )
    elif isinstance(action, MessageAction):
        outcome.events.append(
            _event(world, character, EventKind.EFFECT, f"{source_name}: {action.text}", message=action.text)
        )
    elif isinstance(action, CustomAction):
        outcome.pending_custom_actions.append(
            PendingCustomAction(character_id=character.id, effect_name=source_name, prompt=action.prompt)
        )
    elif isinstance(action, ModifyStatAction):
        # Read lazily through get_effect_stat_modifier.
        pass
    else:
        raise TypeError(f"Unsupported effect action: {type(action).__name__}")
    return outcome


def process_effects(world: World, character: Character, trigger: TriggerPoint) -> EffectOutcome:
    """Run every action bound to ``trigger`` across the character's active effects."""
    outcome = EffectOutcome()
    for effect in list(character.effects):
        for action in effect.actions_for(trigger):
            outcome.merge(apply_effect_action(world, character, action, effect.name))
            if outcome.died:
                return outcome
    return outcome


def tick_effect_durations(character: Character) -> List[Effect]:
    expired: List[Effect] = []
    remaining: List[Effect] = []
    for effect in character.effects:
        if effect.duration > 0:
            effect.duration -= 1
            if effect.duration == 0:
                expired.append(effect)
                continue
        remaining.append(effect)
    character.effects = remaining
    return expired


def resolve_expired_effects(world: World, character: Character, expired: List[Effect]) -> EffectOutcome:
    outcome = EffectOutcome()
    for effect in expired:
        if not character.alive:
            break
        outcome.events.append(
            _event(world, character, EventKind.EFFECT_EXPIRED, f"{character.name}'s {effect.name} effect has worn off")
        )
        for action in effect.actions_for(TriggerPoint.ON_EXPIRED):
            outcome.merge(apply_effect_action(world, character, action, effect.name))
            if outcome.died:
                return outcome
    return outcome


def get_effect_stat_modifier(character: Character, trigger: TriggerPoint, stat: StatName) -> StatModifier:
    additive = 0.0
    multiplicative = 1.0
    for effect in character.effects:
        for action in effect.actions_for(trigger):
            if not isinstance(action, ModifyStatAction) or action.stat != stat:
                continue
            if action.operation == StatOperation.ADD:
                additive += action.value
            else:
                multiplicative *= action.value
    return StatModifier(additive=additive, multiplicative=multiplicative)
