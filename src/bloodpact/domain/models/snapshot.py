from dataclasses import dataclass

from bloodpact.domain.models.world import World


@dataclass
class WorldSnapshot:
    snapshot_id: str
    label: str
    turn: int
    created_at: str
    world: World
