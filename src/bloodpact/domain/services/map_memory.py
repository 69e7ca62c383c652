from __future__ import annotations

from typing import Optional

from bloodpact.domain.models.character import Character
from bloodpact.domain.models.feature import ChestFeature, TrapFeature
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import FeatureMemory, TileMemory
from bloodpact.domain.models.world import World
from bloodpact.domain.services.visibility import VisibleState, get_visible_tiles


def snapshot_tile(world: World, observer: Character, position: Position) -> TileMemory:
    """What ``observer`` would record about ``position`` if it looked right now."""
    tile = world.tiles[position.y][position.x]

    item_names = [item.name for item in tile.items]
    feature = tile.feature
    if isinstance(feature, ChestFeature) and feature.searched:
        item_names.extend(item.name for item in feature.contents)

    feature_memory: Optional[FeatureMemory] = None
    if feature is not None and not (isinstance(feature, TrapFeature) and not feature.is_known_to(observer.id)):
        feature_memory = FeatureMemory(kind=feature.kind, name=feature.name)

    occupant = None
    for other in world.characters:
        if other.position == position and other.id != observer.id:
            occupant = other
            if other.alive:
                break

    return TileMemory(
        terrain=tile.terrain,
        last_seen_turn=world.turn,
        items=item_names or None,
        character_name=occupant.name if occupant is not None else None,
        character_alive=occupant.alive if occupant is not None else None,
        feature=feature_memory,
    )


def update_map_memory(world: World, character: Character, visible: Optional[VisibleState] = None) -> int:
    """Refresh ``character.map_memory`` for every tile it currently sees.

    Returns the number of tiles written.
    """
    state = visible if visible is not None else get_visible_tiles(world, character)
    written = 0
    for tile in state.tiles:
        character.map_memory[tile.position] = snapshot_tile(world, character, tile.position)
        written += 1
    return written


def remember_tile(world: World, character: Character, position: Position) -> None:
    character.map_memory[position] = snapshot_tile(world, character, position)
