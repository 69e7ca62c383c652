"""Validates and applies a single character action against the world.

Every handler checks all of its preconditions before touching state, so a
failed action leaves the world exactly as it found it. Successful events are
appended to ``World.events`` in the order they were produced.
"""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bloodpact.application.services.combat_service import calculate_damage
from bloodpact.application.services.effect_service import (
    EffectOutcome,
    apply_effect,
    apply_effect_action,
    is_movement_prevented,
    kill_character,
    process_effects,
)
from bloodpact.application.services.seed_policy import derive_rng
from bloodpact.domain.events import CharacterDied, EventKind, GameEvent, SoundEffect
from bloodpact.domain.models.action import (
    Action,
    ActionErrorKind,
    ActionResult,
    AnimationData,
    AnimationKind,
    AttackAction,
    DeclineContractAction,
    DropAction,
    EquipAction,
    IssueContractAction,
    LookAroundAction,
    MoveAction,
    MoveTowardAction,
    PickUpAction,
    PlaceAction,
    SearchContainerAction,
    SignContractAction,
    TalkAction,
    UnequipAction,
    UnlockAction,
    UseAction,
    WaitAction,
)
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.contract import MAX_CONTRACT_EXPIRY, MIN_CONTRACT_EXPIRY
from bloodpact.domain.models.effect import TriggerPoint, default_trap_effect
from bloodpact.domain.models.feature import ChestFeature, DoorFeature, TrapFeature
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position, chebyshev, is_adjacent, manhattan, neighbors8
from bloodpact.domain.models.tile import WALKABLE_TERRAIN
from bloodpact.domain.models.world import World
from bloodpact.domain.services.map_memory import remember_tile, update_map_memory
from bloodpact.domain.services.pathfinding import approach_path, find_path, is_passable, steps_this_turn
from bloodpact.domain.services.visibility import compute_visible_set, get_visible_tiles, get_witness_ids, line_of_sight


MAX_TALK_DISTANCE = 15

logger = logging.getLogger(__name__)

EventPublisher = Callable[[object], None]


@dataclass
class _Walk:
    final_position: Position
    path: List[Position]
    trap_triggered: bool = False
    events: List[GameEvent] = field(default_factory=list)


def _nearby_positions(character: Character) -> List[Position]:
    return [character.position] + neighbors8(character.position)


def _failure(error: ActionErrorKind, message: str) -> ActionResult:
    return ActionResult.failure(error, message)


def has_pending_offer(world: World, character: Character) -> bool:
    return any(contract.target_id == character.id and not contract.signed for contract in world.active_contracts)


def knows_destination(world: World, character: Character, target: Position) -> bool:
    """A move_toward target must be remembered open ground or a character in view."""
    memory = character.map_memory.get(target)
    if memory is not None and memory.terrain in WALKABLE_TERRAIN:
        return True
    return get_visible_tiles(world, character).character_at(target) is not None


class ActionService:
    def __init__(
        self,
        rng: Optional[random.Random] = None,
        event_publisher: Optional[EventPublisher] = None,
    ) -> None:
        self.rng = rng
        self._event_publisher = event_publisher
        self._handlers: Dict[type, Callable[[World, Character, Action], ActionResult]] = {
            MoveAction: self._move,
            MoveTowardAction: self._move_toward,
            LookAroundAction: self._look_around,
            SearchContainerAction: self._search_container,
            PickUpAction: self._pick_up,
            DropAction: self._drop,
            EquipAction: self._equip,
            UnequipAction: self._unequip,
            UseAction: self._use,
            AttackAction: self._attack,
            TalkAction: self._talk,
            PlaceAction: self._place,
            UnlockAction: self._unlock,
            IssueContractAction: self._issue_contract,
            SignContractAction: self._sign_contract,
            DeclineContractAction: self._decline_contract,
            WaitAction: self._wait,
        }

    def set_seed(self, seed: int) -> None:
        self.rng = random.Random(seed)

    def execute(self, world: World, character: Character, action: Action) -> ActionResult:
        if not character.alive:
            return _failure(ActionErrorKind.ACTOR_DEAD, f"{character.name} is dead and cannot act")

        handler = self._handlers.get(type(action))
        if handler is None:
            return _failure(ActionErrorKind.MALFORMED, f"Unknown action: {type(action).__name__}")

        result = handler(world, character, action)
        if not result.success:
            logger.debug(
                "Action rejected",
                extra={"character_id": character.id, "action": action.kind.value, "reason": result.message},
            )
            return result

        result.events = world.record_events(result.events)
        self.publish_deaths(world, result.events)
        return result

    def publish_deaths(self, world: World, events: List[GameEvent]) -> None:
        if self._event_publisher is None:
            return
        for event in events:
            if event.kind == EventKind.DEATH and event.target_id is not None:
                killer_id = event.actor_id if event.actor_id != event.target_id else None
                self._event_publisher(CharacterDied(character_id=event.target_id, killer_id=killer_id, turn=world.turn))

    def _attack_rng(self, world: World, attacker: Character, target: Character) -> random.Random:
        if self.rng is not None:
            return self.rng
        return derive_rng(
            "combat.attack",
            {"turn": world.turn, "event_count": len(world.events), "attacker": attacker.id, "target": target.id},
        )

    # movement

    def _walk(self, world: World, character: Character, steps: List[Position]) -> _Walk:
        """Move along ``steps``, stopping on the first live trap."""
        start = character.position
        walked: List[Position] = []
        events: List[GameEvent] = []
        trap_triggered = False

        for step in steps:
            walked.append(step)
            tile = world.tiles[step.y][step.x]
            trap = tile.feature
            if isinstance(trap, TrapFeature) and not trap.triggered:
                character.position = step
                effect = copy.deepcopy(trap.applies_effect)
                applied = apply_effect(character, effect)
                trap.triggered = True
                tile.feature = None
                trap_triggered = True
                owner_label = "their own" if trap.owner_id == character.id else "a"
                status = f"and is now {effect.name}!" if applied else f"but was already {effect.name}"
                events.append(
                    GameEvent(
                        turn=world.turn,
                        kind=EventKind.TRAP_TRIGGERED,
                        description=f"{character.name} stepped on {owner_label} {trap.name} {status}",
                        actor_id=character.id,
                        position=step,
                        sound=SoundEffect.TRAP,
                        witness_ids=tuple(get_witness_ids(world, [step])),
                    )
                )
                break

        final = walked[-1] if walked else start
        character.position = final
        return _Walk(final_position=final, path=[start] + walked, trap_triggered=trap_triggered, events=events)

    def _movement_blocked(self, character: Character) -> Optional[ActionResult]:
        effect = is_movement_prevented(character)
        if effect is None:
            return None
        remaining = "" if effect.is_permanent else f" ({effect.duration} turns remaining)"
        return _failure(
            ActionErrorKind.MOVEMENT_PREVENTED,
            f"{character.name} is held by {effect.name} and cannot move{remaining}",
        )

    def _move(self, world: World, character: Character, action: MoveAction) -> ActionResult:
        blocked = self._movement_blocked(character)
        if blocked is not None:
            return blocked
        target = action.target
        if not world.in_bounds(target):
            return _failure(ActionErrorKind.OUT_OF_BOUNDS, f"Position {target} is outside the map")
        if target == character.position:
            return _failure(ActionErrorKind.ALREADY_IN_STATE, "Already standing there")
        occupant = world.living_character_at(target)
        if occupant is not None:
            return _failure(ActionErrorKind.OCCUPIED, f"Cannot move onto {occupant.name}'s position")
        if not is_passable(world, target):
            return _failure(ActionErrorKind.UNREACHABLE, f"Cannot walk onto {target}")

        path = find_path(world, character.position, target, character.movement_range)
        if path is None:
            if find_path(world, character.position, target, world.width * world.height) is not None:
                return _failure(
                    ActionErrorKind.OUT_OF_RANGE,
                    f"{target} is beyond movement range ({character.movement_range})",
                )
            return _failure(ActionErrorKind.UNREACHABLE, "Cannot reach that position")

        walk = self._walk(world, character, path)
        return self._movement_result(world, character, walk, target, arrived_message="Moved successfully")

    def _move_toward(self, world: World, character: Character, action: MoveTowardAction) -> ActionResult:
        blocked = self._movement_blocked(character)
        if blocked is not None:
            return blocked
        target = action.target
        if not world.in_bounds(target):
            return _failure(ActionErrorKind.OUT_OF_BOUNDS, f"Position {target} is outside the map")
        if target == character.position:
            return _failure(ActionErrorKind.ALREADY_IN_STATE, "Already standing there")

        if not knows_destination(world, character, target):
            return _failure(ActionErrorKind.INVALID_TARGET, f"{character.name} has never seen {target}")

        path = approach_path(world, character, target)
        if path is None:
            return _failure(ActionErrorKind.UNREACHABLE, f"No path toward {target}")

        steps = steps_this_turn(world, character, path)
        if not steps:
            return _failure(ActionErrorKind.OCCUPIED, f"Already as close to {target} as possible")

        walk = self._walk(world, character, steps)
        remaining = len(path) - (len(walk.path) - 1)
        if walk.final_position == target:
            message = f"Arrived at {target}"
        else:
            message = f"Moved toward {target}, {remaining} tiles remaining"
        return self._movement_result(world, character, walk, target, arrived_message=message)

    def _movement_result(
        self,
        world: World,
        character: Character,
        walk: _Walk,
        target: Position,
        *,
        arrived_message: str,
    ) -> ActionResult:
        final = walk.final_position
        if walk.trap_triggered:
            description = f"{character.name} moved toward {target} but was caught in a trap at {final}!"
        else:
            description = f"{character.name} moved to {final}"
        move_event = GameEvent(
            turn=world.turn,
            kind=EventKind.MOVE,
            description=description,
            actor_id=character.id,
            position=final,
            witness_ids=tuple(get_witness_ids(world, [walk.path[0], final])),
        )
        return ActionResult(
            success=True,
            message="Trapped!" if walk.trap_triggered else arrived_message,
            events=walk.events + [move_event],
            animation=AnimationData(kind=AnimationKind.MOVE, path=tuple(walk.path)),
        )

    # perception and containers

    def _look_around(self, world: World, character: Character, action: LookAroundAction) -> ActionResult:
        visible = get_visible_tiles(world, character)
        update_map_memory(world, character, visible)
        return ActionResult(
            success=True,
            message=f"Looked around. Saw {len(visible.characters)} characters and {len(visible.items)} items.",
        )

    def _find_chest(self, world: World, feature_id: str) -> Optional[Tuple[Position, ChestFeature]]:
        for y, row in enumerate(world.tiles):
            for x, tile in enumerate(row):
                if isinstance(tile.feature, ChestFeature) and tile.feature.id == feature_id:
                    return Position(x, y), tile.feature
        return None

    def _search_container(self, world: World, character: Character, action: SearchContainerAction) -> ActionResult:
        if not action.feature_id:
            return _failure(ActionErrorKind.MALFORMED, "No container specified")
        found = self._find_chest(world, action.feature_id)
        if found is None:
            return _failure(ActionErrorKind.INVALID_TARGET, "Container not found")
        position, chest = found
        if chebyshev(character.position, position) > 1:
            return _failure(ActionErrorKind.NOT_ADJACENT, f"{chest.name} not adjacent - must be within 1 tile to search")

        chest.searched = True
        names = ", ".join(item.name for item in chest.contents) or "nothing"
        event = GameEvent(
            turn=world.turn,
            kind=EventKind.SEARCH,
            description=f"{character.name} searched {chest.name}",
            actor_id=character.id,
            position=position,
            sound=SoundEffect.SEARCH,
            witness_ids=tuple(get_witness_ids(world, [position])),
        )
        return ActionResult(
            success=True,
            message=f"Searched {chest.name}. Found: {names}",
            events=[event],
        )

    def _locate_pickup(self, world: World, character: Character, name: str) -> Optional[Tuple[Item, List[Item], Optional[ChestFeature]]]:
        for position in _nearby_positions(character):
            tile = world.tile_at(position)
            if tile is None:
                continue
            for item in tile.items:
                if item.matches_name(name):
                    return item, tile.items, None
            chest = tile.feature
            if isinstance(chest, ChestFeature) and chest.searched:
                for item in chest.contents:
                    if item.matches_name(name):
                        return item, chest.contents, chest
        return None

    def _pick_up(self, world: World, character: Character, action: PickUpAction) -> ActionResult:
        if not action.item_name or not action.item_name.strip():
            return _failure(ActionErrorKind.MALFORMED, "PICKUP requires an item name")
        located = self._locate_pickup(world, character, action.item_name)
        if located is None:
            return _failure(ActionErrorKind.MISSING_ITEM, f'Item "{action.item_name}" not found within reach')

        item, source, chest = located
        source.remove(item)
        character.inventory.append(item)
        suffix = f" from {chest.name}" if chest is not None else ""
        event = GameEvent(
            turn=world.turn,
            kind=EventKind.PICKUP,
            description=f"Picked up {item.name}{suffix} ({character.name})",
            actor_id=character.id,
            item_id=item.id,
            position=character.position,
            sound=SoundEffect.PICKUP,
            witness_ids=tuple(get_witness_ids(world, [character.position])),
        )
        return ActionResult(
            success=True,
            message=f"Picked up {item.name}{suffix}",
            events=[event],
            animation=AnimationData(kind=AnimationKind.PICKUP, target_position=character.position, item_name=item.name),
        )

    # inventory

    def _inventory_event(self, world: World, character: Character, kind: EventKind, item: Item, verb: str, sound: Optional[SoundEffect]) -> GameEvent:
        return GameEvent(
            turn=world.turn,
            kind=kind,
            description=f"{character.name} {verb} {item.name}",
            actor_id=character.id,
            item_id=item.id,
            position=character.position,
            sound=sound,
            witness_ids=tuple(get_witness_ids(world, [character.position])),
        )

    def _drop(self, world: World, character: Character, action: DropAction) -> ActionResult:
        item = character.find_item(action.item_id)
        if item is None:
            return _failure(ActionErrorKind.MISSING_ITEM, f'"{action.item_id}" not in inventory')
        character.remove_item(item)
        world.tiles[character.position.y][character.position.x].items.append(item)
        event = self._inventory_event(world, character, EventKind.DROP, item, "dropped", SoundEffect.DROP)
        return ActionResult(success=True, message=f"Dropped {item.name}", events=[event])

    def _equip(self, world: World, character: Character, action: EquipAction) -> ActionResult:
        item = character.find_item(action.item_id)
        if item is None:
            return _failure(ActionErrorKind.MISSING_ITEM, "Item not in inventory")
        if item.type == ItemType.WEAPON:
            character.equipped_weapon = item
        elif item.type == ItemType.CLOTHING:
            character.equipped_clothing = item
        else:
            return _failure(ActionErrorKind.WRONG_ITEM_TYPE, f"Cannot equip {item.name}: not a weapon or clothing")
        event = self._inventory_event(world, character, EventKind.EQUIP, item, "equipped", SoundEffect.EQUIP)
        return ActionResult(success=True, message=f"Equipped {item.name}", events=[event])

    def _unequip(self, world: World, character: Character, action: UnequipAction) -> ActionResult:
        item = character.find_item(action.item_id)
        if item is None or not character.is_equipped(item):
            return _failure(ActionErrorKind.MISSING_ITEM, "That item is not equipped")
        character.unequip_item(item)
        event = self._inventory_event(world, character, EventKind.UNEQUIP, item, "unequipped", None)
        return ActionResult(success=True, message=f"Unequipped {item.name}", events=[event])

    def _use(self, world: World, character: Character, action: UseAction) -> ActionResult:
        item = character.find_item(action.item_id)
        if item is None:
            return _failure(ActionErrorKind.MISSING_ITEM, "Item not in inventory")
        if item.use_effect is None:
            return _failure(ActionErrorKind.WRONG_ITEM_TYPE, f"{item.name} cannot be used")

        character.remove_item(item)
        use_event = self._inventory_event(world, character, EventKind.USE, item, "used", SoundEffect.USE)
        outcome = apply_effect_action(world, character, item.use_effect, item.name)
        return ActionResult(
            success=True,
            message=f"Used {item.name}",
            events=[use_event] + outcome.events,
            pending_custom_actions=list(outcome.pending_custom_actions),
        )

    # interaction

    def _attack(self, world: World, character: Character, action: AttackAction) -> ActionResult:
        target = world.character_by_id(action.target_id)
        if target is None:
            return _failure(ActionErrorKind.INVALID_TARGET, "Target not found")
        if target.id == character.id:
            return _failure(ActionErrorKind.INVALID_TARGET, "Cannot attack yourself")
        if not target.alive:
            return _failure(ActionErrorKind.INVALID_TARGET, "Target is already dead")
        if not is_adjacent(character.position, target.position):
            return _failure(ActionErrorKind.NOT_ADJACENT, f"{target.name} is too far away to attack")
        if target.position not in compute_visible_set(world, character.position, character.view_distance):
            return _failure(ActionErrorKind.INVALID_TARGET, f"{character.name} cannot see {target.name}")

        outcome = EffectOutcome()
        outcome.merge(process_effects(world, character, TriggerPoint.ON_ATTACK))
        if outcome.died:
            return ActionResult(
                success=True,
                message=f"{character.name} collapsed before the blow landed",
                events=outcome.events,
                pending_custom_actions=list(outcome.pending_custom_actions),
            )

        roll = calculate_damage(character, self._attack_rng(world, character, target))
        weapon_name = character.equipped_weapon.name if character.equipped_weapon is not None else "fists"
        witnesses = tuple(get_witness_ids(world, [target.position]))
        events: List[GameEvent] = list(outcome.events)

        if not roll.hit:
            if roll.critical_miss:
                description = f"{character.name} critically missed attacking {target.name}!"
            else:
                description = f"{character.name} missed {target.name} with {weapon_name} (rolled {roll.roll})"
            events.append(
                GameEvent(
                    turn=world.turn,
                    kind=EventKind.MISS,
                    description=description,
                    actor_id=character.id,
                    target_id=target.id,
                    position=target.position,
                    damage=0,
                    sound=SoundEffect.MISS,
                    witness_ids=witnesses,
                )
            )
            return ActionResult(
                success=True,
                message=description,
                events=events,
                animation=AnimationData(kind=AnimationKind.ATTACK, target_position=target.position, damage=0, missed=True),
                pending_custom_actions=list(outcome.pending_custom_actions),
            )

        target.hp -= roll.damage
        if roll.critical:
            description = f"{character.name} CRITICAL HIT {target.name} with {weapon_name} for {roll.damage} damage!"
        else:
            description = f"{character.name} hit {target.name} with {weapon_name} for {roll.damage} damage"
        events.append(
            GameEvent(
                turn=world.turn,
                kind=EventKind.ATTACK,
                description=description,
                actor_id=character.id,
                target_id=target.id,
                position=target.position,
                damage=roll.damage,
                sound=SoundEffect.ATTACK,
                witness_ids=witnesses,
            )
        )

        if target.hp <= 0:
            events.extend(kill_character(world, target, character))
        else:
            damaged = process_effects(world, target, TriggerPoint.ON_DAMAGED)
            events.extend(damaged.events)
            outcome.pending_custom_actions.extend(damaged.pending_custom_actions)

        return ActionResult(
            success=True,
            message=description,
            events=events,
            animation=AnimationData(kind=AnimationKind.ATTACK, target_position=target.position, damage=roll.damage, missed=False),
            pending_custom_actions=list(outcome.pending_custom_actions),
        )

    def _talk(self, world: World, character: Character, action: TalkAction) -> ActionResult:
        if not action.target_id or not action.message or not action.message.strip():
            return _failure(ActionErrorKind.MALFORMED, "No target or message specified")
        target = world.character_by_id(action.target_id)
        if target is None:
            return _failure(ActionErrorKind.INVALID_TARGET, "Target not found")
        if target.id == character.id:
            return _failure(ActionErrorKind.INVALID_TARGET, "Cannot talk to yourself")
        if not target.alive:
            return _failure(ActionErrorKind.INVALID_TARGET, "Cannot talk to the dead")
        if manhattan(character.position, target.position) > MAX_TALK_DISTANCE:
            return _failure(ActionErrorKind.DISTANCE_EXCEEDED, "Target too far away to talk")

        event = GameEvent(
            turn=world.turn,
            kind=EventKind.TALK,
            description=f'{character.name} to {target.name}: "{action.message}"',
            actor_id=character.id,
            target_id=target.id,
            position=character.position,
            message=action.message,
            witness_ids=tuple(get_witness_ids(world, [character.position, target.position])),
        )
        return ActionResult(success=True, message="Message delivered", events=[event])

    def _place(self, world: World, character: Character, action: PlaceAction) -> ActionResult:
        target = action.target
        if target == character.position or not is_adjacent(character.position, target):
            return _failure(ActionErrorKind.NOT_ADJACENT, "Traps must be placed on an adjacent tile")
        if not world.in_bounds(target):
            return _failure(ActionErrorKind.OUT_OF_BOUNDS, f"Position {target} is outside the map")
        if not is_passable(world, target):
            return _failure(ActionErrorKind.INVALID_TARGET, "Cannot place trap on non-walkable tile")
        if world.tiles[target.y][target.x].feature is not None:
            return _failure(ActionErrorKind.INVALID_TARGET, "Something is already there")
        item = character.find_item(action.item_id)
        if item is None:
            return _failure(ActionErrorKind.MISSING_ITEM, "Item not in inventory")
        if item.type != ItemType.TRAP:
            return _failure(ActionErrorKind.WRONG_ITEM_TYPE, f"{item.name} is not a trap")

        character.remove_item(item)
        effect = copy.deepcopy(item.trap_effect) if item.trap_effect is not None else default_trap_effect(item.id)
        witnesses = get_witness_ids(world, [target])
        if character.id not in witnesses:
            witnesses.insert(0, character.id)
        world.tiles[target.y][target.x].feature = TrapFeature(
            id=item.id,
            name=item.name,
            owner_id=character.id,
            applies_effect=effect,
            witness_ids=list(witnesses),
        )
        event = GameEvent(
            turn=world.turn,
            kind=EventKind.PLACE,
            description=f"{character.name} placed {item.name} at {target}",
            actor_id=character.id,
            item_id=item.id,
            position=target,
            sound=SoundEffect.TRAP,
            witness_ids=tuple(witnesses),
        )
        return ActionResult(
            success=True,
            message=f"Placed {item.name} at {target}",
            events=[event],
            animation=AnimationData(kind=AnimationKind.PLACE, target_position=target, item_name=item.name),
        )

    def _unlock(self, world: World, character: Character, action: UnlockAction) -> ActionResult:
        door_position: Optional[Position] = None
        door: Optional[DoorFeature] = None
        for position in neighbors8(character.position):
            tile = world.tile_at(position)
            if tile is not None and isinstance(tile.feature, DoorFeature) and tile.feature.id == action.feature_id:
                door_position, door = position, tile.feature
                break
        if door is None or door_position is None:
            return _failure(ActionErrorKind.NOT_ADJACENT, "Door must be adjacent to unlock")
        if door.open or not door.locked:
            return _failure(ActionErrorKind.ALREADY_IN_STATE, f"{door.name} is already unlocked")
        key = next(
            (item for item in character.inventory if item.type == ItemType.KEY and item.unlocks_feature_id == door.id),
            None,
        )
        if key is None:
            return _failure(ActionErrorKind.MISSING_ITEM, f"You need the right key to unlock {door.name}")

        character.remove_item(key)
        door.locked = False
        door.open = True
        for observer in world.living_characters():
            if line_of_sight(world, observer.position, door_position):
                remember_tile(world, observer, door_position)

        event = GameEvent(
            turn=world.turn,
            kind=EventKind.UNLOCK,
            description=f"{character.name} unlocks {door.name} at {door_position} using {key.name}",
            actor_id=character.id,
            item_id=key.id,
            position=door_position,
            sound=SoundEffect.UNLOCK,
            witness_ids=tuple(get_witness_ids(world, [door_position])),
        )
        return ActionResult(success=True, message=f"Unlocked {door.name}", events=[event])

    # contracts and no-ops

    def _issue_contract(self, world: World, character: Character, action: IssueContractAction) -> ActionResult:
        if not action.target_id:
            return _failure(ActionErrorKind.MALFORMED, "Must specify target character for contract")
        if not action.contents or not action.contents.strip():
            return _failure(ActionErrorKind.MALFORMED, "Must specify contract contents/terms")
        if not MIN_CONTRACT_EXPIRY <= int(action.expiry) <= MAX_CONTRACT_EXPIRY:
            return _failure(
                ActionErrorKind.OUT_OF_RANGE,
                f"Contract expiry must be between {MIN_CONTRACT_EXPIRY} and {MAX_CONTRACT_EXPIRY} turns",
            )
        target = world.character_by_id(action.target_id)
        if target is None:
            return _failure(ActionErrorKind.INVALID_TARGET, "Target character not found")
        if target.id == character.id:
            return _failure(ActionErrorKind.INVALID_TARGET, "Cannot issue contract to yourself")
        if not target.alive:
            return _failure(ActionErrorKind.INVALID_TARGET, "Target character is dead")
        distance = manhattan(character.position, target.position)
        if distance > MAX_TALK_DISTANCE:
            return _failure(
                ActionErrorKind.DISTANCE_EXCEEDED,
                f"{target.name} is too far away ({distance} tiles, max {MAX_TALK_DISTANCE})",
            )

        pitch = f' saying "{action.message}"' if action.message else ""
        event = GameEvent(
            turn=world.turn,
            kind=EventKind.CONTRACT_OFFER,
            description=(
                f'{character.name} offers a Blood Contract to {target.name}{pitch}: '
                f'"{action.contents}" ({action.expiry} turns)'
            ),
            actor_id=character.id,
            target_id=target.id,
            message=action.contents,
            witness_ids=(character.id, target.id),
        )
        return ActionResult(success=True, message=f"Blood Contract offered to {target.name}", events=[event])

    def _sign_contract(self, world: World, character: Character, action: SignContractAction) -> ActionResult:
        if not has_pending_offer(world, character):
            return _failure(ActionErrorKind.INVALID_TARGET, "No Blood Contract is waiting for an answer")
        return ActionResult(success=True, message="Agreed to sign the contract")

    def _decline_contract(self, world: World, character: Character, action: DeclineContractAction) -> ActionResult:
        if not has_pending_offer(world, character):
            return _failure(ActionErrorKind.INVALID_TARGET, "No Blood Contract is waiting for an answer")
        return ActionResult(success=True, message="Declined the contract")

    def _wait(self, world: World, character: Character, action: WaitAction) -> ActionResult:
        return ActionResult(success=True, message=f"{character.name} waits")


def execute_action(
    world: World,
    character: Character,
    action: Action,
    *,
    rng: Optional[random.Random] = None,
) -> ActionResult:
    return ActionService(rng=rng).execute(world, character, action)


__all__ = ["ActionService", "MAX_TALK_DISTANCE", "execute_action", "has_pending_offer", "knows_destination"]
