import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from bloodpact.application.services.effect_service import (
    apply_effect,
    apply_effect_action,
    get_effect_stat_modifier,
    is_movement_prevented,
    kill_character,
    process_effects,
    remove_effect,
    resolve_expired_effects,
    tick_effect_durations,
)
from bloodpact.domain.events import EventKind
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import (
    ApplyEffectAction,
    CustomAction,
    DamageAction,
    Effect,
    EffectTrigger,
    HealAction,
    MessageAction,
    ModifyStatAction,
    StatName,
    StatOperation,
    TriggerPoint,
    default_trap_effect,
)
from bloodpact.domain.models.item import Item, ItemType
from bloodpact.domain.models.position import Position
from bloodpact.domain.models.world import World


def _setup(hp: int = 10):
    world = World.blank(5, 5)
    hero = Character(id="hero", name="Ann", position=Position(2, 2), hp=hp, max_hp=10)
    world.characters = [hero]
    return world, hero


def _effect(effect_id: str, duration: int, trigger: TriggerPoint, *actions) -> Effect:
    return Effect(id=effect_id, name=effect_id.title(), duration=duration, triggers=[EffectTrigger(on=trigger, actions=list(actions))])


class ApplyEffectTests(unittest.TestCase):
    def test_apply_copies_and_ignores_duplicate_ids(self) -> None:
        _, hero = _setup()
        effect = _effect("burn", 3, TriggerPoint.TURN_START, DamageAction(amount=1))

        self.assertTrue(apply_effect(hero, effect))
        self.assertFalse(apply_effect(hero, effect))

        effect.duration = 99
        self.assertEqual(1, len(hero.effects))
        self.assertEqual(3, hero.effects[0].duration)

    def test_remove_and_movement_prevention(self) -> None:
        _, hero = _setup()
        trap = default_trap_effect("trap-1")
        apply_effect(hero, trap)

        self.assertEqual("Trapped", is_movement_prevented(hero).name)
        removed = remove_effect(hero, trap.id)
        self.assertEqual(trap.id, removed.id)
        self.assertIsNone(is_movement_prevented(hero))
        self.assertIsNone(remove_effect(hero, trap.id))


class EffectActionTests(unittest.TestCase):
    def test_damage_is_reported_with_source(self) -> None:
        world, hero = _setup()

        outcome = apply_effect_action(world, hero, DamageAction(amount=3), "Poison")

        self.assertEqual(7, hero.hp)
        self.assertEqual("Ann takes 3 damage from Poison", outcome.events[0].description)
        self.assertFalse(outcome.died)

    def test_lethal_damage_kills_and_drops_items(self) -> None:
        world, hero = _setup(hp=2)
        hero.inventory = [Item(id="i1", name="Rope"), Item(id="i2", name="Torch")]

        outcome = apply_effect_action(world, hero, DamageAction(amount=5), "Poison")

        self.assertTrue(outcome.died)
        self.assertFalse(hero.alive)
        self.assertEqual(0, hero.hp)
        self.assertEqual(["Rope", "Torch"], [item.name for item in world.tiles[2][2].items])
        kinds = [event.kind for event in outcome.events]
        self.assertEqual([EventKind.EFFECT, EventKind.DROP, EventKind.DEATH], kinds)
        self.assertEqual("Ann has died.", outcome.events[-1].description)
        self.assertEqual("Ann's items fell to the ground: Rope, Torch", outcome.events[1].description)

    def test_heal_is_capped_and_silent_at_full_health(self) -> None:
        world, hero = _setup(hp=8)

        outcome = apply_effect_action(world, hero, HealAction(amount=5), "Health Potion")
        self.assertEqual(10, hero.hp)
        self.assertEqual(1, len(outcome.events))

        outcome = apply_effect_action(world, hero, HealAction(amount=5), "Health Potion")
        self.assertEqual([], outcome.events)

    def test_custom_action_is_handed_back(self) -> None:
        world, hero = _setup()

        outcome = apply_effect_action(world, hero, CustomAction(prompt="Describe the vision"), "Strange Brew")

        self.assertEqual([], outcome.events)
        self.assertEqual("Describe the vision", outcome.pending_custom_actions[0].prompt)
        self.assertEqual("hero", outcome.pending_custom_actions[0].character_id)

    def test_apply_effect_action_nests_effects(self) -> None:
        world, hero = _setup()
        nested = _effect("chill", 2, TriggerPoint.TURN_END)

        outcome = apply_effect_action(world, hero, ApplyEffectAction(effect=nested), "Frost Rune")

        self.assertEqual("Ann is now affected by Chill", outcome.events[0].description)
        self.assertEqual(["chill"], [effect.id for effect in hero.effects])

    def test_unknown_action_type_raises(self) -> None:
        world, hero = _setup()
        with self.assertRaises(TypeError):
            apply_effect_action(world, hero, object(), "Bad")


class ProcessEffectsTests(unittest.TestCase):
    def test_only_actions_for_the_trigger_run(self) -> None:
        world, hero = _setup()
        hero.effects = [
            _effect("burn", 3, TriggerPoint.TURN_START, DamageAction(amount=2)),
            _effect("chant", 3, TriggerPoint.TURN_END, MessageAction(text="Hum")),
        ]

        outcome = process_effects(world, hero, TriggerPoint.TURN_END)

        self.assertEqual(10, hero.hp)
        self.assertEqual(["Chant: Hum"], [event.description for event in outcome.events])

    def test_processing_stops_when_the_character_dies(self) -> None:
        world, hero = _setup(hp=1)
        hero.effects = [
            _effect("burn", 3, TriggerPoint.TURN_START, DamageAction(amount=2), MessageAction(text="never")),
            _effect("chant", 3, TriggerPoint.TURN_START, MessageAction(text="never either")),
        ]

        outcome = process_effects(world, hero, TriggerPoint.TURN_START)

        self.assertTrue(outcome.died)
        self.assertNotIn(EventKind.EFFECT, [event.kind for event in outcome.events[1:]])


class DurationTests(unittest.TestCase):
    def test_tick_removes_effects_that_reach_zero(self) -> None:
        _, hero = _setup()
        hero.effects = [
            _effect("short", 1, TriggerPoint.TURN_END),
            _effect("long", 3, TriggerPoint.TURN_END),
            _effect("forever", -1, TriggerPoint.TURN_END),
        ]

        expired = tick_effect_durations(hero)

        self.assertEqual(["short"], [effect.id for effect in expired])
        self.assertEqual({"long": 2, "forever": -1}, {effect.id: effect.duration for effect in hero.effects})

    def test_expired_effects_announce_and_run_on_expired_actions(self) -> None:
        world, hero = _setup(hp=5)
        fading = _effect("regrowth", 1, TriggerPoint.ON_EXPIRED, HealAction(amount=2))
        hero.effects = [fading]

        outcome = resolve_expired_effects(world, hero, tick_effect_durations(hero))

        self.assertEqual(7, hero.hp)
        self.assertEqual(EventKind.EFFECT_EXPIRED, outcome.events[0].kind)
        self.assertEqual("Ann's Regrowth effect has worn off", outcome.events[0].description)


class StatModifierTests(unittest.TestCase):
    def test_additive_values_sum_and_multipliers_multiply(self) -> None:
        _, hero = _setup()
        hero.effects = [
            _effect(
                "rage",
                3,
                TriggerPoint.ON_ATTACK,
                ModifyStatAction(stat=StatName.ATTACK, operation=StatOperation.ADD, value=2),
                ModifyStatAction(stat=StatName.ATTACK, operation=StatOperation.MULTIPLY, value=0.5),
            ),
            _effect(
                "focus",
                3,
                TriggerPoint.ON_ATTACK,
                ModifyStatAction(stat=StatName.ATTACK, operation=StatOperation.ADD, value=3),
                ModifyStatAction(stat=StatName.ATTACK, operation=StatOperation.MULTIPLY, value=3),
                ModifyStatAction(stat=StatName.DEFENSE, operation=StatOperation.ADD, value=10),
            ),
        ]

        modifier = get_effect_stat_modifier(hero, TriggerPoint.ON_ATTACK, StatName.ATTACK)

        self.assertEqual(5, modifier.additive)
        self.assertEqual(1.5, modifier.multiplicative)
        self.assertEqual(10.5, modifier.apply(2))


class KillCharacterTests(unittest.TestCase):
    def test_killer_is_named_and_dead_cannot_die_twice(self) -> None:
        world, hero = _setup()
        villain = Character(id="villain", name="Bo", position=Position(3, 2))
        world.characters.append(villain)
        hero.inventory = [Item(id="sword", name="Sword", type=ItemType.WEAPON, damage=3)]
        hero.equipped_weapon = hero.inventory[0]

        events = kill_character(world, hero, villain)

        self.assertEqual("Ann has been killed by Bo!", events[-1].description)
        self.assertIsNone(hero.equipped_weapon)
        self.assertEqual([], kill_character(world, hero, villain))


if __name__ == "__main__":
    unittest.main()
