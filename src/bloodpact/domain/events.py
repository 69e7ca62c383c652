from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from bloodpact.domain.models.position import Position


class EventKind(str, Enum):
    MOVE = "move"
    TRAP_TRIGGERED = "trap_triggered"
    SEARCH = "search"
    PICKUP = "pickup"
    DROP = "drop"
    EQUIP = "equip"
    UNEQUIP = "unequip"
    USE = "use"
    ATTACK = "attack"
    MISS = "miss"
    DEATH = "death"
    TALK = "talk"
    PLACE = "place"
    UNLOCK = "unlock"
    CONTRACT_OFFER = "contract_offer"
    CONTRACT_SIGNED = "contract_signed"
    CONTRACT_DECLINED = "contract_declined"
    EFFECT = "effect"
    EFFECT_EXPIRED = "effect_expired"


class SoundEffect(str, Enum):
    PICKUP = "pickup"
    DROP = "drop"
    EQUIP = "equip"
    ATTACK = "attack"
    MISS = "miss"
    DEATH = "death"
    SEARCH = "search"
    TRAP = "trap"
    UNLOCK = "unlock"
    USE = "use"


@dataclass(frozen=True)
class GameEvent:
    turn: int
    kind: EventKind
    description: str
    actor_id: Optional[str] = None
    target_id: Optional[str] = None
    item_id: Optional[str] = None
    position: Optional[Position] = None
    damage: Optional[int] = None
    message: Optional[str] = None
    sound: Optional[SoundEffect] = None
    witness_ids: Tuple[str, ...] = field(default_factory=tuple)
    order: int = 0

    def witnessed_by(self, character_id: str) -> bool:
        return character_id in self.witness_ids


@dataclass
class TurnAdvanced:
    turn_after: int


@dataclass
class CharacterDied:
    character_id: str
    killer_id: Optional[str]
    turn: int


@dataclass
class ContractSigned:
    contract_id: str
    issuer_id: str
    target_id: str
    turn: int
