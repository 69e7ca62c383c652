"""Worlds for headless runs: a built-in arena or a JSON world file.

Usage:
    python -m bloodpact.infrastructure.world_import.arena_builder --output arena.json
"""

from __future__ import annotations

import argparse
from pathlib import Path

from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import (
    Effect,
    EffectTrigger,
    HealAction,
    MessageAction,
    TriggerPoint,
)
from bloodpact.domain.models.feature import ChestFeature, DoorFeature
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import TerrainType
from bloodpact.domain.models.world import Room, RoomBounds, World
from bloodpact.infrastructure.serialization.world_codec import dumps_world, loads_world


ARENA_WIDTH = 14
ARENA_HEIGHT = 9


def _wall_border(world: World) -> None:
    for x in range(world.width):
        world.tiles[0][x].terrain = TerrainType.WALL
        world.tiles[world.height - 1][x].terrain = TerrainType.WALL
    for y in range(world.height):
        world.tiles[y][0].terrain = TerrainType.WALL
        world.tiles[y][world.width - 1].terrain = TerrainType.WALL


def build_demo_arena() -> World:
    """Two chambers split by a wall with a locked door and a barred window."""
    world = World.blank(ARENA_WIDTH, ARENA_HEIGHT)
    _wall_border(world)

    for y in range(1, ARENA_HEIGHT - 1):
        world.tiles[y][7].terrain = TerrainType.WALL
    world.tiles[2][7].terrain = TerrainType.BARS
    world.tiles[6][7].terrain = TerrainType.GROUND
    world.tiles[6][7].feature = DoorFeature(id="door-cellar", name="Cellar Door", locked=True, key_id="key-cellar")

    for x in range(2, 5):
        world.tiles[7][x].terrain = TerrainType.GRASS
    world.tiles[4][11].terrain = TerrainType.WATER

    west = Room(id="room-west", name="Guard Room", bounds=RoomBounds(1, 1, 6, 7))
    east = Room(id="room-east", name="Cellar", bounds=RoomBounds(8, 1, 12, 7))
    world.rooms.extend([west, east])
    for room in world.rooms:
        for y in range(room.bounds.min_y, room.bounds.max_y + 1):
            for x in range(room.bounds.min_x, room.bounds.max_x + 1):
                world.tiles[y][x].room_id = room.id

    potion = Item(
        id="item-potion",
        name="Health Potion",
        type=ItemType.CONSUMABLE,
        use_effect=HealAction(amount=5),
    )
    world.tiles[1][1].feature = ChestFeature(id="chest-supply", name="Supply Crate", contents=[potion])
    world.tiles[5][3].items.append(Item(id="item-sword", name="Rusty Sword", type=ItemType.WEAPON, damage=3))
    world.tiles[3][10].items.append(Item(id="item-snare", name="Bear Trap", type=ItemType.TRAP))
    world.tiles[6][10].items.append(
        Item(id="item-cloak", name="Wool Cloak", type=ItemType.CLOTHING, armor=1)
    )

    resolve = Effect(
        id="effect-resolve",
        name="Grim Resolve",
        duration=3,
        triggers=[EffectTrigger(on=TriggerPoint.TURN_END, actions=[MessageAction(text="Steady now.")])],
    )
    world.characters = [
        Character(
            id="char-mara",
            name="Mara",
            position=Position(2, 3),
            gender="female",
            personality_prompt="A wary guard who trusts no bargain.",
            inventory=[Item(id="key-cellar", name="Cellar Key", type=ItemType.KEY, unlocks_feature_id="door-cellar")],
            effects=[resolve],
        ),
        Character(
            id="char-osric",
            name="Osric",
            position=Position(10, 2),
            gender="male",
            personality_prompt="A smuggler fond of binding promises.",
            inventory=[
                Item(id="item-dagger", name="Dagger", type=ItemType.WEAPON, damage=2),
                Item(id="item-pact", name="Blank Pact", type=ItemType.CONTRACT),
            ],
        ),
        Character(
            id="char-wren",
            name="Wren",
            position=Position(5, 6),
            movement_range=3,
            view_distance=6,
        ),
    ]
    return world


def load_world_file(path: Path) -> World:
    return loads_world(Path(path).read_text(encoding="utf-8"))


def write_world_file(world: World, path: Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dumps_world(world, indent=2), encoding="utf-8")
    return target


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Write the built-in arena as a JSON world file")
    parser.add_argument("--output", default="arena.json", help="Output JSON file path")
    return parser


def main() -> None:
    args = build_parser().parse_args()
    target = write_world_file(build_demo_arena(), Path(args.output))
    print(f"Wrote {target}")


if __name__ == "__main__":
    main()
