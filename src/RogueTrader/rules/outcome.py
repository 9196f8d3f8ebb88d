# rules/outcome.py

from __future__ import annotations

import structlog

from .dice import DiceRNG
from .types import AttackMode, HitResult, PsychicPhenomenaResult, RollOutcome, WeaponTraits

log = structlog.get_logger()


def get_degree(a: int, b: int) -> int:
    return (a - b) // 10


def resolve_outcome(target: int, result: int) -> RollOutcome:
    """Compare a d100 result against a target (roll-under)."""
    is_success = result <= target
    if is_success:
        return RollOutcome(
            target=target, result=result, is_success=True, dos=get_degree(target, result), dof=0
        )
    return RollOutcome(
        target=target, result=result, is_success=False, dos=0, dof=get_degree(result, target)
    )


def roll_outcome(target: int, rng: DiceRNG) -> RollOutcome:
    outcome = resolve_outcome(target, rng.roll_d100())
    log.debug(
        "rules.outcome.rolled",
        target=target,
        result=outcome.result,
        success=outcome.is_success,
        dos=outcome.dos,
        dof=outcome.dof,
    )
    return outcome


def is_double(number: int) -> bool:
    if number == 100:
        return True
    digit = number % 10
    return number - digit == digit * 10


def detect_phenomena(result: int, push: bool) -> PsychicPhenomenaResult:
    # A push inverts the rule: phenomena on anything but a double.
    has_phenomena = not is_double(result) if push else is_double(result)
    return PsychicPhenomenaResult(has_phenomena=has_phenomena, push=push, result=result)


def compute_number_of_hits(
    attack_degree: int,
    evasion_degree: int,
    attack_mode: AttackMode,
    traits: WeaponTraits,
) -> int:
    max_hits = attack_mode.max_hits
    if traits.twin_linked and attack_degree >= 2:
        max_hits += 1
        attack_degree += attack_mode.hit_margin

    hits = min(1 + attack_degree // attack_mode.hit_margin, max_hits)
    hits -= evasion_degree
    return max(hits, 0)


def count_attack_hits(outcome: RollOutcome, attack_mode: AttackMode, traits: WeaponTraits) -> HitResult:
    return HitResult(compute_number_of_hits(outcome.dos, 0, attack_mode, traits))


def count_evaded_hits(
    attack_degree: int,
    evasion: RollOutcome,
    attack_mode: AttackMode,
    traits: WeaponTraits,
) -> HitResult:
    """Hits that land after an evasion roll.

    Every degree of success on the evasion removes a hit, and a success with
    zero degrees still removes one.
    """
    hits = compute_number_of_hits(attack_degree, evasion.dos, attack_mode, traits)
    if evasion.is_success:
        hits = max(hits - 1, 0)
    return HitResult(hits)
