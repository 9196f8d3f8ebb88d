"""Roll resolution rules: targets, outcomes, hits, damage and locations.

Only leaf modules are re-exported here; import the ruleset from
``RogueTrader.rules.engine`` (it depends on ``RogueTrader.config``).
"""

# ruff: noqa: N999

from .dice import DiceRNG
from .errors import MalformedFormula, MissingRequiredField, RulesError
from .types import (
    Aim,
    AttackContext,
    AttackMode,
    CombatRollResult,
    CommonRollResult,
    DamageRecord,
    DamageResult,
    Evasion,
    HitLocation,
    HitResult,
    PsyDescriptor,
    PsychicPhenomenaResult,
    RateOfFire,
    RollOutcome,
    RollRequest,
    WeaponTraits,
)

__all__ = [
    "Aim",
    "AttackContext",
    "AttackMode",
    "CombatRollResult",
    "CommonRollResult",
    "DamageRecord",
    "DamageResult",
    "DiceRNG",
    "Evasion",
    "HitLocation",
    "HitResult",
    "MalformedFormula",
    "MissingRequiredField",
    "PsyDescriptor",
    "PsychicPhenomenaResult",
    "RateOfFire",
    "RollOutcome",
    "RollRequest",
    "RulesError",
    "WeaponTraits",
]
