from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bloodpact.domain.models.contract import BloodContract
from bloodpact.domain.models.effect import Effect, EffectAction


class ItemType(str, Enum):
    WEAPON = "weapon"
    CLOTHING = "clothing"
    CONSUMABLE = "consumable"
    TRAP = "trap"
    CONTRACT = "contract"
    KEY = "key"
    MISC = "misc"

    @classmethod
    def normalize(cls, value: object) -> "ItemType":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        for candidate in cls:
            if candidate.value == raw:
                return candidate
        return cls.MISC


EQUIPPABLE_TYPES = frozenset({ItemType.WEAPON, ItemType.CLOTHING})


@dataclass
class Item:
    id: str
    name: str
    type: ItemType = ItemType.MISC
    damage: Optional[int] = None
    armor: Optional[int] = None
    use_effect: Optional[EffectAction] = None
    trap_effect: Optional[Effect] = None
    unlocks_feature_id: Optional[str] = None
    contract: Optional[BloodContract] = None

    @property
    def is_equippable(self) -> bool:
        return self.type in EQUIPPABLE_TYPES

    def matches_name(self, name: str) -> bool:
        return self.name.strip().lower() == str(name or "").strip().lower()
