"""Damage and penetration formula rewriting.

Weapon qualities are expressed by rewriting the first dice group of a formula
(see ``DICE_GROUP_RE`` in ``rules.dice``) before it is evaluated:

- tearing: one extra die, lowest dropped (``1d10`` -> ``2d10dl``)
- proven N: no die rolls below N (``1d10`` -> ``1d10min3``)
- primitive N: no die rolls above N (``1d10`` -> ``1d10max7``)

Symbols (``PR`` for psy rating, attribute bonus tokens such as ``SB``) are
replaced with their numbers last, so the formula handed to ``DiceRNG`` is
purely numeric. The one exception is a symbol used as a dice count
(``PRd10``), which is resolved before the rewrites.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from .dice import DICE_GROUP_RE
from .errors import MalformedFormula
from .types import WeaponTraits

_PSY_RATING_RE = re.compile(r"PR", re.IGNORECASE)
_KEEP_DROP_RE = re.compile(r"dl|kh", re.IGNORECASE)
# A symbol used as a dice count, e.g. the "PR" of "PRd10".
_SYMBOLIC_COUNT_RE = re.compile(r"(?<![A-Za-z\d])(?P<sym>[A-Za-z]+)(?=d\d)", re.IGNORECASE)

# Legacy razor-sharp notation: "base(override)", e.g. "3(6)". An integer
# glued to a parenthesized integer; "2*(4)" or "(3)" are plain arithmetic.
_LEGACY_OVERRIDE_RE = re.compile(r"(?<![\w)])(?P<base>\d+)\((?P<override>\d+)\)")


def _first_dice_group(formula: str, trait: str) -> re.Match[str]:
    m = DICE_GROUP_RE.search(formula)
    if not m:
        raise MalformedFormula(formula, f"{trait} needs a dice group")
    return m


def _splice(formula: str, m: re.Match[str], replacement: str) -> str:
    return formula[: m.start()] + replacement + formula[m.end() :]


def has_keep_or_drop(formula: str) -> bool:
    return any(_KEEP_DROP_RE.search(m.group("qualifiers")) for m in DICE_GROUP_RE.finditer(formula))


def append_tearing(formula: str) -> str:
    if has_keep_or_drop(formula):
        return formula
    m = _first_dice_group(formula, "tearing")
    count = int(m.group("count") or 1) + 1
    return _splice(formula, m, f"{count}d{m.group('faces')}dl{m.group('qualifiers')}")


def append_dice_qualifier(formula: str, qualifier: str, value: int) -> str:
    """Attach ``<qualifier><value>`` to the first dice group unless it already has one."""
    m = _first_dice_group(formula, qualifier)
    if qualifier in m.group("qualifiers").lower():
        return formula
    return _splice(formula, m, f"{m.group(0)}{qualifier}{value}")


def replace_symbols(
    formula: str, *, psy_rating: int | None = None, bonuses: Mapping[str, int] | None = None
) -> str:
    if psy_rating is not None:
        formula = _PSY_RATING_RE.sub(str(psy_rating), formula)
    # Longest tokens first so "WPB" is not eaten by a "WP" entry.
    for token in sorted(bonuses or {}, key=len, reverse=True):
        formula = re.sub(re.escape(token), str(bonuses[token]), formula, flags=re.IGNORECASE)
    return formula


def resolve_dice_counts(
    formula: str, *, psy_rating: int | None = None, bonuses: Mapping[str, int] | None = None
) -> str:
    """Substitute symbolic dice counts (``PRd10`` -> ``3d10``) so trait rewrites see real groups."""
    return _SYMBOLIC_COUNT_RE.sub(
        lambda m: replace_symbols(m.group("sym"), psy_rating=psy_rating, bonuses=bonuses), formula
    )


def build_damage_formula(
    formula: str,
    traits: WeaponTraits,
    damage_bonus: int = 0,
    *,
    psy_rating: int | None = None,
    bonuses: Mapping[str, int] | None = None,
) -> str:
    if not formula:
        return "0"
    formula = resolve_dice_counts(formula, psy_rating=psy_rating, bonuses=bonuses)
    if traits.tearing:
        formula = append_tearing(formula)
    if traits.proven:
        formula = append_dice_qualifier(formula, "min", traits.proven)
    if traits.primitive:
        formula = append_dice_qualifier(formula, "max", traits.primitive)
    formula = f"{formula}+{damage_bonus}"
    return replace_symbols(formula, psy_rating=psy_rating, bonuses=bonuses)


def build_penetration_formula(
    formula: str,
    traits: WeaponTraits,
    attack_degree: int,
    *,
    psy_rating: int | None = None,
    bonuses: Mapping[str, int] | None = None,
) -> tuple[str, int]:
    """Return the penetration formula to evaluate and the multiplier to apply."""
    if not formula:
        return "0", 1
    formula = replace_symbols(formula, psy_rating=psy_rating, bonuses=bonuses)
    legacy = _LEGACY_OVERRIDE_RE.search(formula)
    if legacy is None:
        multiplier = 2 if attack_degree >= 3 and traits.razor_sharp else 1
        return formula, multiplier
    part = "override" if attack_degree >= 3 else "base"
    return _splice(formula, legacy, legacy.group(part)), 1
