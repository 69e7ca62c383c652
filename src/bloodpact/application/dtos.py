from dataclasses import dataclass, field
from typing import List, Optional

from bloodpact.domain.events import GameEvent
from bloodpact.domain.models.action import Action
from bloodpact.domain.models.item import Item
from bloodpact.domain.models.position import Position
from bloodpact.domain.services.visibility import VisibleState


@dataclass
class StatusView:
    character_id: str
    name: str
    hp: int
    max_hp: int
    position: Position
    inventory: List[Item] = field(default_factory=list)
    equipped_weapon: Optional[Item] = None
    equipped_clothing: Optional[Item] = None
    effect_names: List[str] = field(default_factory=list)


@dataclass
class CharacterKnowledge:
    status: StatusView
    visible: VisibleState
    witnessed_events: List[GameEvent] = field(default_factory=list)
    possible_actions: List[Action] = field(default_factory=list)


@dataclass(frozen=True)
class LegalActionView:
    verb: str
    target: Optional[str]
    action: Action


@dataclass
class TurnSummaryView:
    turn: int
    character_id: str
    action_kind: str
    success: bool
    message: str
    replaced_illegal: bool = False


@dataclass
class SnapshotView:
    snapshot_id: str
    label: str
    turn: int
    created_at: str
