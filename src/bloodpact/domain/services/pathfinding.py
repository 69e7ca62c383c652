from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Optional, Set, Tuple

from bloodpact.domain.models.character import Character
from bloodpact.domain.models.position import Position, is_diagonal_step, neighbors8
from bloodpact.domain.models.world import World


def is_passable(world: World, position: Position) -> bool:
    """Terrain and feature check only; characters are handled by the searches."""
    tile = world.tile_at(position)
    return tile is not None and tile.is_walkable


def is_diagonal_squeeze(world: World, origin: Position, target: Position) -> bool:
    """A diagonal step is blocked when both tiles sharing an edge with it are impassable."""
    if not is_diagonal_step(origin, target):
        return False
    side_a = Position(target.x, origin.y)
    side_b = Position(origin.x, target.y)
    return not is_passable(world, side_a) and not is_passable(world, side_b)


def _occupied_positions(world: World, ignore_id: Optional[str] = None) -> Set[Position]:
    return {
        character.position
        for character in world.characters
        if character.alive and character.id != ignore_id
    }


def _step_allowed(world: World, origin: Position, target: Position, occupied: Set[Position]) -> bool:
    if not is_passable(world, target):
        return False
    if is_diagonal_squeeze(world, origin, target):
        return False
    return target not in occupied


def find_path(
    world: World,
    start: Position,
    goal: Position,
    max_steps: int,
    *,
    allow_occupied_goal: bool = False,
) -> Optional[List[Position]]:
    """Shortest 8-directional path from ``start`` to ``goal``, excluding ``start``.

    Returns ``[]`` when the two positions are equal and ``None`` when the goal
    cannot be reached in at most ``max_steps`` steps. Living characters block
    every tile they stand on, the goal included, unless ``allow_occupied_goal``
    is set.
    """
    if start == goal:
        return []
    if max_steps <= 0:
        return None

    occupied = _occupied_positions(world)
    occupied.discard(start)
    if allow_occupied_goal:
        occupied.discard(goal)

    parents: Dict[Position, Position] = {}
    visited: Set[Position] = {start}
    queue: Deque[Tuple[Position, int]] = deque([(start, 0)])

    while queue:
        current, steps = queue.popleft()
        for neighbor in neighbors8(current):
            if neighbor in visited:
                continue
            if not _step_allowed(world, current, neighbor, occupied):
                continue
            visited.add(neighbor)
            parents[neighbor] = current
            if neighbor == goal:
                return _rebuild_path(parents, start, goal)
            if steps + 1 < max_steps:
                queue.append((neighbor, steps + 1))
    return None


def _rebuild_path(parents: Dict[Position, Position], start: Position, goal: Position) -> List[Position]:
    path: List[Position] = [goal]
    cursor = goal
    while parents[cursor] != start:
        cursor = parents[cursor]
        path.append(cursor)
    path.reverse()
    return path


def get_reachable_tiles(world: World, character: Character) -> List[Position]:
    """Every tile ``character`` could end a move on this turn, in BFS order."""
    start = character.position
    occupied = _occupied_positions(world, ignore_id=character.id)
    reachable: List[Position] = []
    visited: Set[Position] = {start}
    queue: Deque[Tuple[Position, int]] = deque([(start, 0)])

    while queue:
        current, steps = queue.popleft()
        if steps > 0:
            reachable.append(current)
        if steps >= character.movement_range:
            continue
        for neighbor in neighbors8(current):
            if neighbor in visited:
                continue
            if not _step_allowed(world, current, neighbor, occupied):
                continue
            visited.add(neighbor)
            queue.append((neighbor, steps + 1))
    return reachable


def approach_path(world: World, character: Character, target: Position) -> Optional[List[Position]]:
    """Full path toward ``target``, which may be occupied, ignoring movement range."""
    return find_path(
        world,
        character.position,
        target,
        world.width * world.height,
        allow_occupied_goal=True,
    )


def steps_this_turn(world: World, character: Character, path: List[Position]) -> List[Position]:
    """The leading part of ``path`` walkable now, stopping short of an occupied end tile."""
    steps = path[: max(0, character.movement_range)]
    if steps and any(
        other.alive and other.id != character.id and other.position == steps[-1] for other in world.characters
    ):
        steps = steps[:-1]
    return steps
