import sys
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.application.services.combat_service import calculate_damage, resolve_roll, roll_d20
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import default_trap_effect
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position


def _fighter(weapon_damage=None) -> Character:
    fighter = Character(id="f", name="Ann", position=Position(0, 0))
    if weapon_damage is not None:
        weapon = Item(id="w", name="Sword", type=ItemType.WEAPON, damage=weapon_damage)
        fighter.inventory.append(weapon)
        fighter.equipped_weapon = weapon
    return fighter


class ResolveRollTests(unittest.TestCase):
    def test_natural_one_is_a_critical_miss(self) -> None:
        roll = resolve_roll(_fighter(3), 1)
        self.assertTrue(roll.critical_miss)
        self.assertFalse(roll.hit)
        self.assertEqual(0, roll.damage)

    def test_low_rolls_miss(self) -> None:
        for value in (2, 7):
            roll = resolve_roll(_fighter(3), value)
            self.assertFalse(roll.hit, value)
            self.assertFalse(roll.critical_miss, value)

    def test_hits_deal_weapon_damage_or_one_unarmed(self) -> None:
        self.assertEqual(3, resolve_roll(_fighter(3), 8).damage)
        self.assertEqual(3, resolve_roll(_fighter(3), 19).damage)
        self.assertEqual(1, resolve_roll(_fighter(), 12).damage)

    def test_natural_twenty_doubles_damage(self) -> None:
        roll = resolve_roll(_fighter(3), 20)
        self.assertTrue(roll.critical)
        self.assertEqual(6, roll.damage)

    def test_attack_modifiers_floor_with_minimum_of_one(self) -> None:
        snared = _fighter(3)
        snared.effects.append(default_trap_effect("trap"))
        self.assertEqual(1, resolve_roll(snared, 10).damage)
        self.assertEqual(3, resolve_roll(snared, 20).damage)

        unarmed = _fighter()
        unarmed.effects.append(default_trap_effect("trap"))
        self.assertEqual(1, resolve_roll(unarmed, 10).damage)


class DiceTests(unittest.TestCase):
    def test_roll_uses_injected_rng(self) -> None:
        rng = mock.Mock()
        rng.randint.return_value = 17

        self.assertEqual(17, roll_d20(rng))
        rng.randint.assert_called_once_with(1, 20)

    def test_calculate_damage_rolls_once(self) -> None:
        rng = mock.Mock()
        rng.randint.return_value = 20

        roll = calculate_damage(_fighter(2), rng)

        self.assertEqual(20, roll.roll)
        self.assertEqual(4, roll.damage)


if __name__ == "__main__":
    unittest.main()
