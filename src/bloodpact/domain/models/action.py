from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from bloodpact.domain.events import GameEvent
from bloodpact.domain.models.position import Position


class ActionType(str, Enum):
    MOVE = "move"
    MOVE_TOWARD = "move_toward"
    LOOK_AROUND = "look_around"
    SEARCH_CONTAINER = "search_container"
    PICK_UP = "pick_up"
    DROP = "drop"
    EQUIP = "equip"
    UNEQUIP = "unequip"
    USE = "use"
    ATTACK = "attack"
    TALK = "talk"
    PLACE = "place"
    UNLOCK = "unlock"
    ISSUE_CONTRACT = "issue_contract"
    SIGN_CONTRACT = "sign_contract"
    DECLINE_CONTRACT = "decline_contract"
    WAIT = "wait"


@dataclass(frozen=True)
class MoveAction:
    target: Position
    kind: ActionType = field(default=ActionType.MOVE, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target)


@dataclass(frozen=True)
class MoveTowardAction:
    target: Position
    kind: ActionType = field(default=ActionType.MOVE_TOWARD, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target)


@dataclass(frozen=True)
class LookAroundAction:
    kind: ActionType = field(default=ActionType.LOOK_AROUND, init=False)

    def legal_key(self) -> tuple:
        return (self.kind,)


@dataclass(frozen=True)
class SearchContainerAction:
    feature_id: str
    kind: ActionType = field(default=ActionType.SEARCH_CONTAINER, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.feature_id)


@dataclass(frozen=True)
class PickUpAction:
    item_name: str
    kind: ActionType = field(default=ActionType.PICK_UP, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.item_name.strip().lower())


@dataclass(frozen=True)
class DropAction:
    item_id: str
    kind: ActionType = field(default=ActionType.DROP, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.item_id)


@dataclass(frozen=True)
class EquipAction:
    item_id: str
    kind: ActionType = field(default=ActionType.EQUIP, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.item_id)


@dataclass(frozen=True)
class UnequipAction:
    item_id: str
    kind: ActionType = field(default=ActionType.UNEQUIP, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.item_id)


@dataclass(frozen=True)
class UseAction:
    item_id: str
    kind: ActionType = field(default=ActionType.USE, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.item_id)


@dataclass(frozen=True)
class AttackAction:
    target_id: str
    kind: ActionType = field(default=ActionType.ATTACK, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target_id)


@dataclass(frozen=True)
class TalkAction:
    target_id: str
    message: str = ""
    kind: ActionType = field(default=ActionType.TALK, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target_id)


@dataclass(frozen=True)
class PlaceAction:
    target: Position
    item_id: str
    kind: ActionType = field(default=ActionType.PLACE, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target, self.item_id)


@dataclass(frozen=True)
class UnlockAction:
    feature_id: str
    kind: ActionType = field(default=ActionType.UNLOCK, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.feature_id)


@dataclass(frozen=True)
class IssueContractAction:
    target_id: str
    contents: str = ""
    expiry: int = 1
    message: Optional[str] = None
    kind: ActionType = field(default=ActionType.ISSUE_CONTRACT, init=False)

    def legal_key(self) -> tuple:
        return (self.kind, self.target_id)


@dataclass(frozen=True)
class SignContractAction:
    kind: ActionType = field(default=ActionType.SIGN_CONTRACT, init=False)

    def legal_key(self) -> tuple:
        return (self.kind,)


@dataclass(frozen=True)
class DeclineContractAction:
    kind: ActionType = field(default=ActionType.DECLINE_CONTRACT, init=False)

    def legal_key(self) -> tuple:
        return (self.kind,)


@dataclass(frozen=True)
class WaitAction:
    kind: ActionType = field(default=ActionType.WAIT, init=False)

    def legal_key(self) -> tuple:
        return (self.kind,)


Action = Union[
    MoveAction,
    MoveTowardAction,
    LookAroundAction,
    SearchContainerAction,
    PickUpAction,
    DropAction,
    EquipAction,
    UnequipAction,
    UseAction,
    AttackAction,
    TalkAction,
    PlaceAction,
    UnlockAction,
    IssueContractAction,
    SignContractAction,
    DeclineContractAction,
    WaitAction,
]


class ActionErrorKind(str, Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    OUT_OF_RANGE = "out_of_range"
    UNREACHABLE = "unreachable"
    OCCUPIED = "occupied"
    MISSING_ITEM = "missing_item"
    WRONG_ITEM_TYPE = "wrong_item_type"
    NOT_ADJACENT = "not_adjacent"
    DISTANCE_EXCEEDED = "distance_exceeded"
    ALREADY_IN_STATE = "already_in_state"
    MALFORMED = "malformed"
    INVALID_TARGET = "invalid_target"
    MOVEMENT_PREVENTED = "movement_prevented"
    ACTOR_DEAD = "actor_dead"


class AnimationKind(str, Enum):
    MOVE = "move"
    ATTACK = "attack"
    PICKUP = "pickup"
    PLACE = "place"


@dataclass(frozen=True)
class AnimationData:
    kind: AnimationKind
    path: Tuple[Position, ...] = ()
    target_position: Optional[Position] = None
    damage: Optional[int] = None
    missed: Optional[bool] = None
    item_name: Optional[str] = None


@dataclass(frozen=True)
class PendingCustomAction:
    character_id: str
    effect_name: str
    prompt: str


@dataclass
class ActionResult:
    success: bool
    message: str
    events: List[GameEvent] = field(default_factory=list)
    animation: Optional[AnimationData] = None
    error: Optional[ActionErrorKind] = None
    pending_custom_actions: List[PendingCustomAction] = field(default_factory=list)

    @classmethod
    def failure(cls, error: ActionErrorKind, message: str) -> "ActionResult":
        return cls(success=False, message=message, error=error)
