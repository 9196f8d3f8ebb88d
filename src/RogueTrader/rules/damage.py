# rules/damage.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

import structlog

from .dice import DiceRNG
from .formula import build_damage_formula, build_penetration_formula
from .locations import get_additional_location, get_location
from .types import AttackContext, DamageRecord, DamageResult, RollRequest, WeaponTraits

log = structlog.get_logger()

ACCURATE_DIE_FACES = 10
ACCURATE_MAX_DICE = 2


def roll_penetration(formula: str, multiplier: int, rng: DiceRNG) -> int:
    return rng.evaluate(formula).total * multiplier


def compute_damage(
    formula: str,
    penetration: int,
    dos: int,
    is_aiming: bool,
    traits: WeaponTraits,
    rng: DiceRNG,
) -> DamageRecord:
    """Roll one hit's damage.

    Righteous fury triggers when any active die of the formula shows its
    highest face. Accurate weapons fired while aiming add up to two d10 per
    two degrees of success; those dice count towards the low-dice tracking
    but never trigger fury.
    """
    roll = rng.evaluate(formula)
    total = roll.total
    righteous_fury = False
    dices: list[int] = []
    min_dice: int | None = None

    for die in roll.active_dice:
        if die.result >= die.faces:
            righteous_fury = True
        if die.result < dos:
            dices.append(die.result)
        if min_dice is None or die.result < min_dice:
            min_dice = die.result

    accurate_dice: tuple[int, ...] = ()
    if traits.accurate and is_aiming:
        num_dice = min(ACCURATE_MAX_DICE, dos // 2)
        if num_dice >= 1:
            extra = [d for d in rng.roll_group(num_dice, ACCURATE_DIE_FACES) if d.active]
            accurate_dice = tuple(d.result for d in extra)
            total += sum(accurate_dice)
            for result in accurate_dice:
                if result < dos:
                    dices.append(result)
                if min_dice is None or result < min_dice:
                    min_dice = result

    return DamageRecord(
        total=total,
        penetration=penetration,
        dos=dos,
        formula=roll.formula,
        righteous_fury=righteous_fury,
        dices=tuple(dices),
        min_dice=min_dice,
        accurate_dice=accurate_dice,
    )


def apply_minimum_damage(damages: list[DamageRecord], dos: int) -> list[DamageRecord]:
    """Raise the hit with the lowest die so it deals at least ``dos`` from that die."""
    lowest_idx: int | None = None
    for i, dmg in enumerate(damages):
        if dmg.min_dice is None:
            continue
        if lowest_idx is None or dmg.min_dice <= damages[lowest_idx].min_dice:  # type: ignore[operator]
            lowest_idx = i
    if lowest_idx is None:
        return damages
    lowest = damages[lowest_idx]
    if lowest.min_dice is not None and lowest.min_dice < dos:
        out = list(damages)
        out[lowest_idx] = replace(lowest, total=lowest.total + (dos - lowest.min_dice))
        return out
    return damages


def resolve_damage(
    request: RollRequest,
    attack: AttackContext,
    rng: DiceRNG,
    bonuses: Mapping[str, int] | None = None,
) -> DamageResult:
    traits = request.weapon_traits
    psy_rating: int | None = None
    if attack.psy is not None:
        psy_rating = attack.psy.value
    elif request.psy is not None:
        psy_rating = request.psy.value

    formula = build_damage_formula(
        request.damage_formula,
        traits,
        request.damage_bonus,
        psy_rating=psy_rating,
        bonuses=bonuses,
    )
    pen_formula, multiplier = build_penetration_formula(
        request.penetration_formula,
        traits,
        attack.attack_degree,
        psy_rating=psy_rating,
        bonuses=bonuses,
    )
    penetration = roll_penetration(pen_formula, multiplier, rng)

    def _hit() -> DamageRecord:
        return compute_damage(
            formula, penetration, attack.attack_degree, request.is_aiming, traits, rng
        )

    first_location = get_location(attack.attack_result)
    damages = [replace(_hit(), location=first_location)]

    storm = 2 if traits.storm else 1
    for i in range(attack.number_of_hits * storm - 1):
        damages.append(replace(_hit(), location=get_additional_location(first_location, i)))

    damages = apply_minimum_damage(damages, attack.attack_degree)
    log.debug(
        "rules.damage.resolved",
        formula=formula,
        penetration=penetration,
        hits=len(damages),
        totals=[d.total for d in damages],
    )
    return DamageResult(formula=formula, penetration=penetration, damages=tuple(damages))
