from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional

from bloodpact.domain.events import GameEvent
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.contract import BloodContract
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import TerrainType, Tile


@dataclass(frozen=True)
class RoomBounds:
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def contains(self, position: Position) -> bool:
        return self.min_x <= position.x <= self.max_x and self.min_y <= position.y <= self.max_y


@dataclass
class Room:
    id: str
    name: str
    bounds: RoomBounds


@dataclass
class World:
    width: int
    height: int
    tiles: List[List[Tile]]
    rooms: List[Room] = field(default_factory=list)
    characters: List[Character] = field(default_factory=list)
    turn: int = 0
    events: List[GameEvent] = field(default_factory=list)
    active_contracts: List[BloodContract] = field(default_factory=list)

    @classmethod
    def blank(cls, width: int, height: int, terrain: TerrainType = TerrainType.GROUND) -> "World":
        tiles = [[Tile(terrain=terrain) for _ in range(width)] for _ in range(height)]
        return cls(width=width, height=height, tiles=tiles)

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def tile_at(self, position: Position) -> Optional[Tile]:
        if not self.in_bounds(position):
            return None
        return self.tiles[position.y][position.x]

    def character_by_id(self, character_id: str) -> Optional[Character]:
        for character in self.characters:
            if character.id == character_id:
                return character
        return None

    def living_characters(self) -> List[Character]:
        return [character for character in self.characters if character.alive]

    def living_character_at(self, position: Position) -> Optional[Character]:
        for character in self.characters:
            if character.alive and character.position == position:
                return character
        return None

    def room_at(self, position: Position) -> Optional[Room]:
        for room in self.rooms:
            if room.bounds.contains(position):
                return room
        return None

    def record_events(self, events: Iterable[GameEvent]) -> List[GameEvent]:
        """Append events to the log, stamping each with the next order number."""
        recorded: List[GameEvent] = []
        next_order = self.events[-1].order + 1 if self.events else 0
        for event in events:
            stamped = replace(event, order=next_order)
            self.events.append(stamped)
            recorded.append(stamped)
            next_order += 1
        return recorded
