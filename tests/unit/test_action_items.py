import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.application.services.action_service import execute_action
from bloodpact.domain.events import EventKind
from bloodpact.domain.models.action import (
    ActionErrorKind,
    DropAction,
    EquipAction,
    LookAroundAction,
    PickUpAction,
    SearchContainerAction,
    UnequipAction,
    UseAction,
)
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import CustomAction, HealAction
from bloodpact.domain.models.feature import ChestFeature
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.world import World


class ContainerAndPickupTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World.blank(6, 6)
        self.hero = Character(id="hero", name="Ann", position=Position(2, 2))
        self.world.characters = [self.hero]
        self.potion = Item(id="potion", name="Health Potion", type=ItemType.CONSUMABLE, use_effect=HealAction(amount=3))
        self.chest = ChestFeature(id="crate", name="Supply Crate", contents=[self.potion])
        self.world.tiles[1][3].feature = self.chest

    def test_chest_contents_need_a_search_first(self) -> None:
        blocked = execute_action(self.world, self.hero, PickUpAction(item_name="Health Potion"))
        self.assertEqual(ActionErrorKind.MISSING_ITEM, blocked.error)
        self.assertEqual('Item "Health Potion" not found within reach', blocked.message)

        searched = execute_action(self.world, self.hero, SearchContainerAction(feature_id="crate"))
        self.assertTrue(searched.success)
        self.assertEqual("Searched Supply Crate. Found: Health Potion", searched.message)
        self.assertTrue(self.chest.searched)

        picked = execute_action(self.world, self.hero, PickUpAction(item_name="Health Potion"))
        self.assertTrue(picked.success)
        self.assertEqual("Picked up Health Potion from Supply Crate", picked.message)
        self.assertEqual([], self.chest.contents)
        self.assertEqual(["potion"], [item.id for item in self.hero.inventory])

    def test_search_requires_adjacency(self) -> None:
        self.hero.position = Position(5, 5)

        result = execute_action(self.world, self.hero, SearchContainerAction(feature_id="crate"))

        self.assertEqual(ActionErrorKind.NOT_ADJACENT, result.error)
        self.assertIn("not adjacent", result.message)
        self.assertFalse(self.chest.searched)

    def test_search_rejects_missing_or_unknown_container(self) -> None:
        self.assertEqual(
            ActionErrorKind.MALFORMED,
            execute_action(self.world, self.hero, SearchContainerAction(feature_id="")).error,
        )
        self.assertEqual(
            ActionErrorKind.INVALID_TARGET,
            execute_action(self.world, self.hero, SearchContainerAction(feature_id="nope")).error,
        )

    def test_pickup_matches_whole_name_ignoring_case(self) -> None:
        self.world.tiles[2][3].items.append(Item(id="rope", name="Coil of Rope"))

        partial = execute_action(self.world, self.hero, PickUpAction(item_name="Rope"))
        self.assertEqual(ActionErrorKind.MISSING_ITEM, partial.error)

        shouted = execute_action(self.world, self.hero, PickUpAction(item_name="  COIL OF ROPE "))
        self.assertTrue(shouted.success)
        self.assertEqual("Picked up Coil of Rope", shouted.message)
        self.assertEqual("Picked up Coil of Rope (Ann)", self.world.events[-1].description)

    def test_items_out_of_reach_cannot_be_picked_up(self) -> None:
        self.world.tiles[5][5].items.append(Item(id="coin", name="Coin"))
        result = execute_action(self.world, self.hero, PickUpAction(item_name="Coin"))
        self.assertEqual(ActionErrorKind.MISSING_ITEM, result.error)

    def test_look_around_fills_map_memory(self) -> None:
        result = execute_action(self.world, self.hero, LookAroundAction())

        self.assertTrue(result.success)
        self.assertEqual("Looked around. Saw 0 characters and 0 items.", result.message)
        self.assertEqual(36, len(self.hero.map_memory))
        self.assertEqual("chest", self.hero.map_memory[Position(3, 1)].feature.kind)
        self.assertEqual([], self.world.events)


class InventoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.world = World.blank(4, 4)
        self.sword = Item(id="sword", name="Sword", type=ItemType.WEAPON, damage=3)
        self.cloak = Item(id="cloak", name="Cloak", type=ItemType.CLOTHING, armor=1)
        self.key = Item(id="key", name="Iron Key", type=ItemType.KEY, unlocks_feature_id="door")
        self.hero = Character(
            id="hero",
            name="Ann",
            position=Position(1, 1),
            hp=5,
            inventory=[self.sword, self.cloak, self.key],
        )
        self.world.characters = [self.hero]

    def test_equip_by_slot_and_reject_other_types(self) -> None:
        self.assertTrue(execute_action(self.world, self.hero, EquipAction(item_id="sword")).success)
        self.assertTrue(execute_action(self.world, self.hero, EquipAction(item_id="cloak")).success)
        self.assertIs(self.sword, self.hero.equipped_weapon)
        self.assertIs(self.cloak, self.hero.equipped_clothing)

        wrong = execute_action(self.world, self.hero, EquipAction(item_id="key"))
        self.assertEqual(ActionErrorKind.WRONG_ITEM_TYPE, wrong.error)

        missing = execute_action(self.world, self.hero, EquipAction(item_id="ghost"))
        self.assertEqual(ActionErrorKind.MISSING_ITEM, missing.error)

    def test_unequip_requires_equipped_item(self) -> None:
        not_worn = execute_action(self.world, self.hero, UnequipAction(item_id="sword"))
        self.assertFalse(not_worn.success)

        execute_action(self.world, self.hero, EquipAction(item_id="sword"))
        result = execute_action(self.world, self.hero, UnequipAction(item_id="sword"))
        self.assertTrue(result.success)
        self.assertIsNone(self.hero.equipped_weapon)
        self.assertIn(self.sword, self.hero.inventory)

    def test_dropping_equipped_item_unequips_it(self) -> None:
        execute_action(self.world, self.hero, EquipAction(item_id="sword"))

        result = execute_action(self.world, self.hero, DropAction(item_id="sword"))

        self.assertTrue(result.success)
        self.assertIsNone(self.hero.equipped_weapon)
        self.assertNotIn(self.sword, self.hero.inventory)
        self.assertEqual([self.sword], self.world.tiles[1][1].items)
        self.assertEqual(EventKind.DROP, self.world.events[-1].kind)

    def test_use_consumes_item_and_applies_effect(self) -> None:
        self.hero.inventory.append(Item(id="potion", name="Health Potion", type=ItemType.CONSUMABLE, use_effect=HealAction(amount=3)))

        result = execute_action(self.world, self.hero, UseAction(item_id="potion"))

        self.assertTrue(result.success)
        self.assertEqual(8, self.hero.hp)
        self.assertIsNone(self.hero.find_item("potion"))
        self.assertEqual([EventKind.USE, EventKind.EFFECT], [event.kind for event in result.events])

    def test_use_returns_pending_custom_actions(self) -> None:
        self.hero.inventory.append(Item(id="brew", name="Strange Brew", use_effect=CustomAction(prompt="Describe the visions")))

        result = execute_action(self.world, self.hero, UseAction(item_id="brew"))

        self.assertEqual(["Describe the visions"], [row.prompt for row in result.pending_custom_actions])
        self.assertEqual("Strange Brew", result.pending_custom_actions[0].effect_name)

    def test_items_without_use_effect_cannot_be_used(self) -> None:
        result = execute_action(self.world, self.hero, UseAction(item_id="sword"))
        self.assertEqual(ActionErrorKind.WRONG_ITEM_TYPE, result.error)
        self.assertIn(self.sword, self.hero.inventory)


if __name__ == "__main__":
    unittest.main()
