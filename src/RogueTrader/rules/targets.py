# rules/targets.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

import structlog

from .dice import DiceRNG
from .errors import MissingRequiredField
from .types import AttackMode, PsyDescriptor, PsyState, RateOfFire, RollRequest, TargetResult

log = structlog.get_logger()

MODIFIER_CAP = 60
TWIN_LINKED_BONUS = 20

MaxHitsSource = Literal["one", "burst", "full"]


@dataclass(frozen=True)
class FireMode:
    modifier: int = 0
    hit_margin: int = 1
    max_hits: MaxHitsSource = "one"

    def __post_init__(self) -> None:
        if self.hit_margin < 1:
            raise ValueError("hit_margin must be at least 1")


DEFAULT_FIRE_MODE = FireMode()

FIRE_MODES: dict[str, FireMode] = {
    "standard": FireMode(0, 1, "one"),
    "bolt": FireMode(0, 1, "one"),
    "blast": FireMode(0, 1, "one"),
    "semi_auto": FireMode(10, 2, "burst"),
    "barrage": FireMode(0, 2, "burst"),
    "full_auto": FireMode(20, 1, "full"),
    "suppressing_fire": FireMode(-20, 2, "full"),
    "called_shot": FireMode(-20, 1, "one"),
    "charge": FireMode(10, 1, "one"),
    "allOut": FireMode(20, 1, "one"),
    "guarded": FireMode(-10, 1, "one"),
}


def resolve_attack_mode(
    name: str | None,
    rate_of_fire: RateOfFire,
    table: Mapping[str, FireMode] | None = None,
) -> AttackMode:
    """Derive modifier, hit margin and max hits for a named attack mode.

    Unknown names fall back to a single-shot profile rather than failing.
    """
    modes = FIRE_MODES if table is None else table
    mode = modes.get(name or "")
    if mode is None:
        log.warning("rules.target.attack_mode.unrecognized", attack_mode=name)
        mode = DEFAULT_FIRE_MODE
    if mode.max_hits == "burst":
        max_hits = rate_of_fire.burst
    elif mode.max_hits == "full":
        max_hits = rate_of_fire.full
    else:
        max_hits = 1
    return AttackMode(
        name=name or "", modifier=mode.modifier, hit_margin=mode.hit_margin, max_hits=max_hits
    )


def clamp_modifier(total: int) -> int:
    return max(-MODIFIER_CAP, min(MODIFIER_CAP, total))


def roll_target(modifier_total: int, base_target: int) -> int:
    return base_target + clamp_modifier(modifier_total)


def compute_psy_state(psy: PsyDescriptor, rng: DiceRNG) -> tuple[PsyState, int]:
    """Return the psychic state after strain and the target modifier it grants.

    The current value is capped at the maximum; using more than the rating is
    a push, and a pushing warp conduit adds 1d5 to the value.
    """
    value = min(psy.value, psy.max)
    modifier = (psy.rating - value) * 10
    push = modifier < 0
    if push and psy.warp_conduit:
        value += rng.randint(1, 5)
    return PsyState(rating=psy.rating, value=value, push=push), modifier


def compute_combat_target(
    request: RollRequest, attack_mode: AttackMode, rng: DiceRNG
) -> TargetResult:
    if request.base_target is None:
        raise MissingRequiredField("base_target", "combat")

    psy_state: PsyState | None = None
    psy_modifier = 0
    if request.psy is not None:
        if request.psy.use_modifier:
            psy_state, psy_modifier = compute_psy_state(request.psy, rng)
        else:
            psy_state = PsyState(rating=request.psy.rating, value=request.psy.value)

    mods = (
        request.modifier
        + (request.aim.val if request.aim else 0)
        + request.range_modifier
        + (TWIN_LINKED_BONUS if request.weapon_traits.twin_linked else 0)
        + attack_mode.modifier
        + psy_modifier
    )
    target = roll_target(mods, request.base_target)
    log.debug("rules.target.combat", modifiers=mods, target=target, attack_mode=attack_mode.name)
    return TargetResult(target=target, modifier_total=mods, psy=psy_state)


def compute_common_target(request: RollRequest) -> TargetResult:
    if request.evasion is not None:
        selected = request.evasion.selected
        if selected == "dodge":
            base = request.evasion.dodge
        elif selected == "parry":
            base = request.evasion.parry
        else:
            raise MissingRequiredField("evasion.selected", "evasion")
    elif request.base_target is None:
        raise MissingRequiredField("base_target", "common")
    else:
        base = request.base_target

    psy_state = None
    if request.psy is not None:
        psy_state = PsyState(rating=request.psy.rating, value=request.psy.value)
    target = roll_target(request.modifier, base)
    log.debug("rules.target.common", modifiers=request.modifier, target=target)
    return TargetResult(target=target, modifier_total=request.modifier, psy=psy_state)
