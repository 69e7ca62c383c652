import json
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.domain.events import EventKind, GameEvent, SoundEffect
from bloodpact.domain.models.character import ReasoningEffort
from bloodpact.domain.models.contract import BloodContract
from bloodpact.domain.models.effect import ApplyEffectAction, DamageAction, default_trap_effect
from bloodpact.domain.models.feature import ChestFeature, DoorFeature, TrapFeature
from bloodpact.domain.models.item import ItemType
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.tile import FeatureMemory, TerrainType, TileMemory
from bloodpact.infrastructure.serialization.world_codec import (
    WorldFormatError,
    dumps_world,
    item_from_dict,
    loads_world,
    world_to_dict,
)
from bloodpact.infrastructure.world_import.arena_builder import build_demo_arena


class WorldCodecTests(unittest.TestCase):
    def test_arena_survives_a_json_round_trip(self) -> None:
        world = build_demo_arena()
        mara = world.characters[0]
        mara.equipped_weapon = None
        mara.map_memory[Position(2, 2)] = TileMemory(
            terrain=TerrainType.GROUND,
            last_seen_turn=1,
            items=["Rusty Sword"],
            character_name="Wren",
            character_alive=True,
            feature=FeatureMemory(kind="chest", name="Supply Crate"),
        )
        world.tiles[3][3].feature = TrapFeature(
            id="snare",
            owner_id=mara.id,
            applies_effect=default_trap_effect("snare"),
            witness_ids=[mara.id],
        )
        world.active_contracts.append(
            BloodContract(
                id="contract-1",
                issuer_id="char-osric",
                issuer_name="Osric",
                target_id=mara.id,
                target_name="Mara",
                contents="Leave the cellar be",
                expiry_turn=4,
            )
        )
        world.record_events(
            [GameEvent(turn=0, kind=EventKind.PLACE, description="placed", sound=SoundEffect.TRAP, witness_ids=(mara.id,))]
        )

        restored = loads_world(dumps_world(world))

        self.assertEqual(world_to_dict(world), world_to_dict(restored))
        self.assertIsInstance(restored.tiles[6][7].feature, DoorFeature)
        self.assertTrue(restored.tiles[6][7].feature.locked)
        self.assertIsInstance(restored.tiles[1][1].feature, ChestFeature)
        self.assertEqual("Health Potion", restored.tiles[1][1].feature.contents[0].name)
        trap = restored.tiles[3][3].feature
        self.assertEqual(5, trap.applies_effect.duration)
        self.assertTrue(trap.applies_effect.prevents_movement)
        self.assertEqual("Supply Crate", restored.characters[0].map_memory[Position(2, 2)].feature.name)
        self.assertEqual(ReasoningEffort.MEDIUM, restored.characters[0].reasoning_effort)

    def test_equipment_is_restored_by_identity(self) -> None:
        world = build_demo_arena()
        osric = world.characters[1]
        osric.equipped_weapon = osric.inventory[0]

        restored = loads_world(dumps_world(world)).characters[1]

        self.assertIs(restored.inventory[0], restored.equipped_weapon)

    def test_nested_effect_actions_round_trip(self) -> None:
        world = build_demo_arena()
        payload = world_to_dict(world)
        payload["characters"][2]["inventory"] = [
            {
                "id": "vial",
                "name": "Black Vial",
                "type": "consumable",
                "useEffect": {
                    "type": "apply_effect",
                    "effect": {
                        "id": "bleed",
                        "name": "Bleeding",
                        "duration": 2,
                        "triggers": [{"on": "turn_start", "actions": [{"type": "damage", "amount": 2}]}],
                    },
                },
            }
        ]

        vial = loads_world(json.dumps(payload)).characters[2].inventory[0]

        self.assertIsInstance(vial.use_effect, ApplyEffectAction)
        self.assertEqual("Bleeding", vial.use_effect.effect.name)
        self.assertEqual([DamageAction(amount=2)], vial.use_effect.effect.triggers[0].actions)

    def test_unknown_item_types_fall_back_to_misc(self) -> None:
        self.assertEqual(ItemType.MISC, item_from_dict({"id": "x", "name": "Odd", "type": "relic"}).type)

    def test_bad_payloads_raise_world_format_error(self) -> None:
        with self.assertRaises(WorldFormatError):
            loads_world("{not json")
        with self.assertRaises(WorldFormatError):
            loads_world("[]")
        with self.assertRaises(WorldFormatError):
            loads_world(json.dumps({"width": 2, "height": 1, "tiles": [[{"type": "ground"}]]}))


if __name__ == "__main__":
    unittest.main()
