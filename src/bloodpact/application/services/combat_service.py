import math
import random
from dataclasses import dataclass
from typing import Optional

from bloodpact.application.services.effect_service import get_effect_stat_modifier
from bloodpact.domain.models.character import Character
from bloodpact.domain.models.effect import StatName, TriggerPoint


UNARMED_DAMAGE = 1
CRITICAL_MISS_ROLL = 1
HIT_THRESHOLD = 8
CRITICAL_HIT_ROLL = 20


@dataclass(frozen=True)
class AttackRoll:
    roll: int
    damage: int
    base_damage: int
    critical: bool = False
    critical_miss: bool = False

    @property
    def hit(self) -> bool:
        return self.damage > 0


def roll_d20(rng: Optional[random.Random] = None) -> int:
    rng = rng or random
    return rng.randint(1, 20)


def base_damage(attacker: Character) -> int:
    weapon = attacker.equipped_weapon
    if weapon is not None and weapon.damage is not None:
        return int(weapon.damage)
    return UNARMED_DAMAGE


def resolve_roll(attacker: Character, roll: int) -> AttackRoll:
    """Turn a d20 result into damage for ``attacker``.

    A natural 1 is a critical miss and 2-7 miss outright. 8-19 hit for the
    base damage; a natural 20 doubles it before the attacker's on-attack
    modifiers are applied. Any hit deals at least 1.
    """
    base = base_damage(attacker)
    if roll <= CRITICAL_MISS_ROLL:
        return AttackRoll(roll=roll, damage=0, base_damage=base, critical_miss=True)
    if roll < HIT_THRESHOLD:
        return AttackRoll(roll=roll, damage=0, base_damage=base)

    critical = roll >= CRITICAL_HIT_ROLL
    raw = base * 2 if critical else base
    modifier = get_effect_stat_modifier(attacker, TriggerPoint.ON_ATTACK, StatName.ATTACK)
    damage = max(1, math.floor(modifier.apply(raw)))
    return AttackRoll(roll=roll, damage=damage, base_damage=base, critical=critical)


def calculate_damage(attacker: Character, rng: Optional[random.Random] = None) -> AttackRoll:
    return resolve_roll(attacker, roll_d20(rng))
