"""Per-character partial knowledge and the legal action list built from it."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from bloodpact.application.dtos import CharacterKnowledge, LegalActionView, StatusView
from bloodpact.application.services.action_service import MAX_TALK_DISTANCE, has_pending_offer
from bloodpact.application.services.effect_service import is_movement_prevented
from bloodpact.domain.models.action import (
    Action,
    ActionType,
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
from bloodpact.domain.models.feature import ChestFeature, DoorFeature
from bloodpact.domain.models.item import ItemType
from bloodpact.domain.models.position import Position, chebyshev, is_adjacent, manhattan, neighbors8
from bloodpact.domain.models.tile import WALKABLE_TERRAIN, TerrainType
from bloodpact.domain.models.world import World
from bloodpact.domain.services.map_memory import update_map_memory
from bloodpact.domain.services.pathfinding import approach_path, get_reachable_tiles, is_passable, steps_this_turn
from bloodpact.domain.services.visibility import VisibleState, get_visible_tiles


_VERBS: Dict[ActionType, str] = {
    ActionType.MOVE: "MOVE",
    ActionType.MOVE_TOWARD: "MOVE_TOWARD",
    ActionType.LOOK_AROUND: "LOOK_AROUND",
    ActionType.SEARCH_CONTAINER: "SEARCH",
    ActionType.PICK_UP: "PICKUP",
    ActionType.DROP: "DROP",
    ActionType.EQUIP: "EQUIP",
    ActionType.UNEQUIP: "UNEQUIP",
    ActionType.USE: "USE",
    ActionType.ATTACK: "ATTACK",
    ActionType.TALK: "TALK",
    ActionType.PLACE: "PLACE",
    ActionType.UNLOCK: "UNLOCK",
    ActionType.ISSUE_CONTRACT: "ISSUE_CONTRACT",
    ActionType.SIGN_CONTRACT: "SIGN_CONTRACT",
    ActionType.DECLINE_CONTRACT: "DECLINE_CONTRACT",
    ActionType.WAIT: "WAIT",
}


def build_status(character: Character) -> StatusView:
    return StatusView(
        character_id=character.id,
        name=character.name,
        hp=character.hp,
        max_hp=character.max_hp,
        position=character.position,
        inventory=list(character.inventory),
        equipped_weapon=character.equipped_weapon,
        equipped_clothing=character.equipped_clothing,
        effect_names=[effect.name for effect in character.effects],
    )


def _nearby_tiles(world: World, character: Character):
    for position in [character.position] + neighbors8(character.position):
        tile = world.tile_at(position)
        if tile is not None:
            yield position, tile


def enumerate_possible_actions(world: World, character: Character, visible: VisibleState) -> List[Action]:
    """Every action ``execute_action`` would currently accept for ``character``.

    Free-text fields (talk messages, contract terms) are left empty; legality
    only compares ``legal_key()``.
    """
    if not character.alive:
        return []

    actions: List[Action] = [LookAroundAction(), WaitAction()]
    seen = {action.legal_key() for action in actions}

    def add(action: Action) -> None:
        key = action.legal_key()
        if key not in seen:
            seen.add(key)
            actions.append(action)

    if is_movement_prevented(character) is None:
        for position in get_reachable_tiles(world, character):
            add(MoveAction(target=position))
        destinations = [
            position
            for position, memory in character.map_memory.items()
            if position != character.position and memory.terrain in WALKABLE_TERRAIN
        ]
        destinations.extend(
            row.position for row in visible.characters if row.character.alive and row.position != character.position
        )
        for position in destinations:
            path = approach_path(world, character, position)
            if path is not None and steps_this_turn(world, character, path):
                add(MoveTowardAction(target=position))

    for position, tile in _nearby_tiles(world, character):
        feature = tile.feature
        for item in tile.items:
            add(PickUpAction(item_name=item.name))
        if isinstance(feature, ChestFeature):
            add(SearchContainerAction(feature_id=feature.id))
            if feature.searched:
                for item in feature.contents:
                    add(PickUpAction(item_name=item.name))
        if isinstance(feature, DoorFeature) and position != character.position:
            if feature.locked and not feature.open:
                if any(item.type == ItemType.KEY and item.unlocks_feature_id == feature.id for item in character.inventory):
                    add(UnlockAction(feature_id=feature.id))

    for item in character.inventory:
        add(DropAction(item_id=item.id))
        if item.is_equippable:
            add(EquipAction(item_id=item.id))
        if character.is_equipped(item):
            add(UnequipAction(item_id=item.id))
        if item.use_effect is not None:
            add(UseAction(item_id=item.id))
        if item.type == ItemType.TRAP:
            for position in neighbors8(character.position):
                tile = world.tile_at(position)
                if tile is not None and tile.feature is None and is_passable(world, position):
                    add(PlaceAction(target=position, item_id=item.id))

    for row in visible.characters:
        other = row.character
        if other.alive and other.id != character.id and is_adjacent(character.position, other.position):
            add(AttackAction(target_id=other.id))

    for other in world.living_characters():
        if other.id == character.id:
            continue
        if manhattan(character.position, other.position) <= MAX_TALK_DISTANCE:
            add(TalkAction(target_id=other.id))
            add(IssueContractAction(target_id=other.id))

    if has_pending_offer(world, character):
        add(SignContractAction())
        add(DeclineContractAction())

    return actions


def get_character_knowledge(world: World, character: Character) -> CharacterKnowledge:
    visible = get_visible_tiles(world, character)
    return CharacterKnowledge(
        status=build_status(character),
        visible=visible,
        witnessed_events=[event for event in world.events if event.witnessed_by(character.id)],
        possible_actions=enumerate_possible_actions(world, character, visible),
    )


def is_action_legal(knowledge: CharacterKnowledge, action: Action) -> bool:
    key = action.legal_key()
    return any(candidate.legal_key() == key for candidate in knowledge.possible_actions)


def _target_label(world: World, action: Action) -> Optional[str]:
    if isinstance(action, (MoveAction, MoveTowardAction)):
        occupant = world.living_character_at(action.target)
        if isinstance(action, MoveTowardAction) and occupant is not None:
            return occupant.name
        return f"{action.target.x},{action.target.y}"
    if isinstance(action, PickUpAction):
        return action.item_name
    if isinstance(action, SearchContainerAction):
        for row in world.tiles:
            for tile in row:
                if isinstance(tile.feature, ChestFeature) and tile.feature.id == action.feature_id:
                    return tile.feature.name
        return action.feature_id
    if isinstance(action, UnlockAction):
        for row in world.tiles:
            for tile in row:
                if isinstance(tile.feature, DoorFeature) and tile.feature.id == action.feature_id:
                    return tile.feature.name
        return action.feature_id
    if isinstance(action, (DropAction, EquipAction, UnequipAction, UseAction, PlaceAction)):
        for character in world.characters:
            item = character.find_item(action.item_id)
            if item is not None:
                return item.name
        return action.item_id
    if isinstance(action, (AttackAction, TalkAction, IssueContractAction)):
        target = world.character_by_id(action.target_id)
        return target.name if target is not None else action.target_id
    return None


def get_legal_actions(
    world: World,
    character: Character,
    knowledge: Optional[CharacterKnowledge] = None,
) -> List[LegalActionView]:
    """Decision-maker facing view of the legal actions, with readable targets."""
    knowledge = knowledge or get_character_knowledge(world, character)
    return [
        LegalActionView(verb=_VERBS[action.kind], target=_target_label(world, action), action=action)
        for action in knowledge.possible_actions
    ]


def get_unexplored_frontier_tiles(world: World, character: Character) -> List[Position]:
    """Unremembered walkable tiles bordering remembered open ground, nearest first."""
    frontier: Dict[Position, Tuple[int, int, int]] = {}
    for position, memory in character.map_memory.items():
        if memory.terrain == TerrainType.WALL:
            continue
        for neighbor in neighbors8(position):
            if neighbor in frontier or neighbor in character.map_memory:
                continue
            tile = world.tile_at(neighbor)
            if tile is None or tile.terrain not in WALKABLE_TERRAIN:
                continue
            frontier[neighbor] = (chebyshev(character.position, neighbor), neighbor.y, neighbor.x)
    return sorted(frontier, key=lambda pos: frontier[pos])


__all__ = [
    "enumerate_possible_actions",
    "get_character_knowledge",
    "get_legal_actions",
    "get_unexplored_frontier_tiles",
    "is_action_legal",
    "update_map_memory",
]
