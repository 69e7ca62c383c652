from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from bloodpact.domain.models.effect import Effect
from bloodpact.domain.models.item import Item
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import TileMemory


class ReasoningEffort(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def normalize(cls, value: object) -> "ReasoningEffort":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for candidate in cls:
            if candidate.value == raw:
                return candidate
        return cls.MEDIUM


@dataclass
class Character:
    id: str
    name: str
    position: Position
    gender: str = "unspecified"
    hp: int = 10
    max_hp: int = 10
    inventory: List[Item] = field(default_factory=list)
    equipped_weapon: Optional[Item] = None
    equipped_clothing: Optional[Item] = None
    alive: bool = True
    personality_prompt: str = ""
    movement_range: int = 4
    view_distance: int = 8
    effects: List[Effect] = field(default_factory=list)
    map_memory: Dict[Position, TileMemory] = field(default_factory=dict)
    ai_model: str = ""
    reasoning_effort: ReasoningEffort = ReasoningEffort.MEDIUM

    def __post_init__(self) -> None:
        self.reasoning_effort = ReasoningEffort.normalize(self.reasoning_effort)

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None

    def find_effect(self, effect_id: str) -> Optional[Effect]:
        for effect in self.effects:
            if effect.id == effect_id:
                return effect
        return None

    def is_equipped(self, item: Item) -> bool:
        return any(slot is not None and slot.id == item.id for slot in (self.equipped_weapon, self.equipped_clothing))

    def unequip_item(self, item: Item) -> bool:
        changed = False
        if self.equipped_weapon is not None and self.equipped_weapon.id == item.id:
            self.equipped_weapon = None
            changed = True
        if self.equipped_clothing is not None and self.equipped_clothing.id == item.id:
            self.equipped_clothing = None
            changed = True
        return changed

    def remove_item(self, item: Item) -> None:
        self.unequip_item(item)
        self.inventory = [row for row in self.inventory if row.id != item.id]
