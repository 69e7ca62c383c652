from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from bloodpact.domain.models.feature import ChestFeature, DoorFeature, Feature
from bloodpact.domain.models.item import Item


class TerrainType(str, Enum):
    GROUND = "ground"
    WALL = "wall"
    GRASS = "grass"
    BARS = "bars"
    WATER = "water"
    DOOR = "door"  # legacy terrain, walkable like ground


WALKABLE_TERRAIN = frozenset({TerrainType.GROUND, TerrainType.GRASS, TerrainType.DOOR})
VISION_BLOCKING_TERRAIN = frozenset({TerrainType.WALL})


@dataclass
class Tile:
    terrain: TerrainType = TerrainType.GROUND
    items: List[Item] = field(default_factory=list)
    feature: Optional[Feature] = None
    room_id: Optional[str] = None

    @property
    def blocks_vision(self) -> bool:
        return self.terrain in VISION_BLOCKING_TERRAIN

    @property
    def is_walkable(self) -> bool:
        if self.terrain not in WALKABLE_TERRAIN:
            return False
        if isinstance(self.feature, ChestFeature):
            return False
        if isinstance(self.feature, DoorFeature) and not self.feature.open:
            return False
        return True


@dataclass(frozen=True)
class FeatureMemory:
    kind: str
    name: str


@dataclass
class TileMemory:
    terrain: TerrainType
    last_seen_turn: int
    items: Optional[List[str]] = None
    character_name: Optional[str] = None
    character_alive: Optional[bool] = None
    feature: Optional[FeatureMemory] = None
