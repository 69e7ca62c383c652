from dataclasses import dataclass, field
from typing import List, Optional, Union

from bloodpact.domain.models.effect import Effect
from bloodpact.domain.models.item import Item


@dataclass
class DoorFeature:
    id: str
    name: str = "Door"
    locked: bool = False
    open: bool = False
    key_id: Optional[str] = None
    kind: str = field(default="door", init=False)

    @property
    def blocks_movement(self) -> bool:
        return not self.open


@dataclass
class ChestFeature:
    id: str
    name: str = "Chest"
    searched: bool = False
    contents: List[Item] = field(default_factory=list)
    kind: str = field(default="chest", init=False)

    @property
    def blocks_movement(self) -> bool:
        return True


@dataclass
class TrapFeature:
    id: str
    owner_id: str
    applies_effect: Effect
    name: str = "Trap"
    witness_ids: List[str] = field(default_factory=list)
    triggered: bool = False
    kind: str = field(default="trap", init=False)

    @property
    def blocks_movement(self) -> bool:
        return False

    def is_known_to(self, character_id: str) -> bool:
        return character_id == self.owner_id or character_id in self.witness_ids


Feature = Union[DoorFeature, ChestFeature, TrapFeature]
