"""Field of view, line of sight and witness queries.

Vision uses recursive shadowcasting. Each of the eight octants is swept row by
row, and every wall found narrows the angular window for the rows behind it.
Only ``wall`` terrain blocks sight; bars, water and closed doors do not.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set, Tuple

from bloodpact.domain.models.character import Character
from bloodpact.domain.models.feature import ChestFeature, Feature, TrapFeature
from bloodpact.domain.models.item import Item
from bloodpact.domain.models.position import Position, euclidean, manhattan
from bloodpact.domain.models.tile import TerrainType, Tile
from bloodpact.domain.models.world import World


LINE_OF_SIGHT_RANGE = 20

# (row, col) -> (dx, dy) for each octant.
_OCTANT_TRANSFORMS: Tuple[Tuple[int, int, int, int], ...] = (
    (0, 1, -1, 0),
    (1, 0, 0, -1),
    (1, 0, 0, 1),
    (0, 1, 1, 0),
    (0, -1, 1, 0),
    (-1, 0, 0, 1),
    (-1, 0, 0, -1),
    (0, -1, -1, 0),
)

_ORTHOGONAL_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class _ShadowLine:
    intervals: List[Tuple[float, float]] = field(default_factory=list)

    def add(self, start: float, end: float) -> None:
        index = 0
        while index < len(self.intervals) and self.intervals[index][1] < start:
            index += 1
        new_start, new_end = start, end
        while index < len(self.intervals) and self.intervals[index][0] <= new_end:
            new_start = min(new_start, self.intervals[index][0])
            new_end = max(new_end, self.intervals[index][1])
            del self.intervals[index]
        self.intervals.insert(index, (new_start, new_end))

    def covers(self, start: float, end: float) -> bool:
        return any(low <= start and high >= end for low, high in self.intervals)

    @property
    def is_full(self) -> bool:
        return len(self.intervals) == 1 and self.intervals[0][0] <= 0 and self.intervals[0][1] >= 1


def _transform(octant: int, row: int, col: int) -> Tuple[int, int]:
    xx, xy, yx, yy = _OCTANT_TRANSFORMS[octant]
    return row * xx + col * xy, row * yx + col * yy


def _cast_octant(world: World, origin: Position, max_range: int, octant: int, visible: Set[Position]) -> None:
    shadows = _ShadowLine()
    for row in range(1, max_range + 1):
        for col in range(row + 1):
            dx, dy = _transform(octant, row, col)
            cell = origin.offset(dx, dy)
            if not world.in_bounds(cell):
                continue
            if euclidean(origin, cell) > max_range:
                continue

            slope_start = col / (row + 1)
            slope_end = (col + 1) / row
            if shadows.covers(slope_start, slope_end):
                continue

            visible.add(cell)
            if world.tiles[cell.y][cell.x].blocks_vision:
                shadows.add(slope_start, slope_end)

        if shadows.is_full:
            break


def _add_corner_walls(world: World, visible: Set[Position]) -> None:
    def is_wall(position: Position) -> bool:
        return world.in_bounds(position) and world.tiles[position.y][position.x].terrain == TerrainType.WALL

    visible_walls = [position for position in visible if is_wall(position)]
    candidates: Set[Position] = set()
    for wall in visible_walls:
        for dx, dy in _ORTHOGONAL_OFFSETS:
            neighbor = wall.offset(dx, dy)
            if neighbor not in visible and is_wall(neighbor):
                candidates.add(neighbor)

    corners: List[Position] = []
    for candidate in candidates:
        seen_walls = sum(
            1
            for dx, dy in _ORTHOGONAL_OFFSETS
            if candidate.offset(dx, dy) in visible and is_wall(candidate.offset(dx, dy))
        )
        if seen_walls >= 2:
            corners.append(candidate)
    visible.update(corners)


def compute_visible_set(world: World, origin: Position, max_range: int) -> Set[Position]:
    """Return every position visible from ``origin`` within ``max_range``.

    The origin is always included. Wall corners whose two orthogonal wall
    neighbours are both visible are added afterwards, so room corners do not
    show up as gaps.
    """
    visible: Set[Position] = {origin}
    for octant in range(len(_OCTANT_TRANSFORMS)):
        _cast_octant(world, origin, max_range, octant, visible)
    _add_corner_walls(world, visible)
    return visible


def line_of_sight(world: World, origin: Position, target: Position) -> bool:
    if manhattan(origin, target) > LINE_OF_SIGHT_RANGE:
        return False
    return target in compute_visible_set(world, origin, LINE_OF_SIGHT_RANGE)


@dataclass(frozen=True)
class VisibleTile:
    position: Position
    terrain: TerrainType
    item_names: Tuple[str, ...] = ()
    feature: Optional[Feature] = None
    room_id: Optional[str] = None


@dataclass(frozen=True)
class VisibleCharacter:
    character: Character
    position: Position


@dataclass(frozen=True)
class VisibleItem:
    item: Item
    position: Position
    in_container: bool = False


@dataclass
class VisibleState:
    tiles: List[VisibleTile] = field(default_factory=list)
    characters: List[VisibleCharacter] = field(default_factory=list)
    items: List[VisibleItem] = field(default_factory=list)

    def positions(self) -> Set[Position]:
        return {tile.position for tile in self.tiles}

    def character_at(self, position: Position) -> Optional[Character]:
        for row in self.characters:
            if row.position == position and row.character.alive:
                return row.character
        return None


def _perceived_feature(tile: Tile, viewer: Character) -> Optional[Feature]:
    feature = tile.feature
    if isinstance(feature, TrapFeature) and not feature.is_known_to(viewer.id):
        return None
    return feature


def get_visible_tiles(world: World, character: Character) -> VisibleState:
    visible_set = compute_visible_set(world, character.position, character.view_distance)
    state = VisibleState()

    for position in sorted(visible_set, key=lambda pos: (pos.y, pos.x)):
        tile = world.tiles[position.y][position.x]
        feature = _perceived_feature(tile, character)
        state.tiles.append(
            VisibleTile(
                position=position,
                terrain=tile.terrain,
                item_names=tuple(item.name for item in tile.items),
                feature=feature,
                room_id=tile.room_id,
            )
        )
        for item in tile.items:
            state.items.append(VisibleItem(item=item, position=position))
        if isinstance(feature, ChestFeature) and feature.searched:
            for item in feature.contents:
                state.items.append(VisibleItem(item=item, position=position, in_container=True))

    for other in world.characters:
        if other.id == character.id:
            continue
        if other.position in visible_set:
            state.characters.append(VisibleCharacter(character=other, position=other.position))

    return state


def get_witness_ids(world: World, positions: Iterable[Position]) -> List[str]:
    """Ids of living characters who can see at least one of ``positions``."""
    targets = list(positions)
    witnesses: List[str] = []
    for character in world.living_characters():
        for position in targets:
            if manhattan(character.position, position) > character.view_distance:
                continue
            if line_of_sight(world, character.position, position):
                witnesses.append(character.id)
                break
    return witnesses
