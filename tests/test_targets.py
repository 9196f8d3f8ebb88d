# test_targets.py
import pytest
from hypothesis import given
from hypothesis import strategies as st

from RogueTrader.rules.errors import MissingRequiredField
from RogueTrader.rules.targets import (
    FIRE_MODES,
    FireMode,
    clamp_modifier,
    compute_combat_target,
    compute_common_target,
    compute_psy_state,
    resolve_attack_mode,
    roll_target,
)
from RogueTrader.rules.types import (
    Aim,
    AttackMode,
    Evasion,
    PsyDescriptor,
    RateOfFire,
    RollRequest,
    WeaponTraits,
)


def test_modifiers_clamp_at_sixty():
    assert clamp_modifier(75) == 60
    assert clamp_modifier(-90) == -60
    assert clamp_modifier(35) == 35
    assert roll_target(75, 30) == 90
    assert roll_target(-90, 30) == -30


@given(st.integers(min_value=-300, max_value=300), st.integers(min_value=0, max_value=100))
def test_target_is_base_plus_clamped_sum(mods: int, base: int):
    assert roll_target(mods, base) == base + max(-60, min(60, mods))


@pytest.mark.parametrize(
    "name,expected",
    [
        ("standard", (0, 1, 1)),
        ("semi_auto", (10, 2, 3)),
        ("barrage", (0, 2, 3)),
        ("full_auto", (20, 1, 8)),
        ("suppressing_fire", (-20, 2, 8)),
        ("called_shot", (-20, 1, 1)),
        ("charge", (10, 1, 1)),
        ("allOut", (20, 1, 1)),
        ("guarded", (-10, 1, 1)),
    ],
)
def test_fire_mode_table(name, expected):
    mode = resolve_attack_mode(name, RateOfFire(burst=3, full=8))
    assert (mode.modifier, mode.hit_margin, mode.max_hits) == expected
    assert mode.name == name


def test_unknown_attack_mode_falls_back_to_single_shot():
    mode = resolve_attack_mode("spray_and_pray", RateOfFire(burst=3, full=8))
    assert mode == AttackMode(name="spray_and_pray", modifier=0, hit_margin=1, max_hits=1)
    assert resolve_attack_mode(None, RateOfFire()).max_hits == 1


def test_attack_mode_uses_custom_table():
    table = dict(FIRE_MODES, volley=FireMode(5, 3, "full"))
    mode = resolve_attack_mode("volley", RateOfFire(burst=2, full=6), table)
    assert (mode.modifier, mode.hit_margin, mode.max_hits) == (5, 3, 6)


def test_fire_mode_rejects_zero_margin():
    with pytest.raises(ValueError):
        FireMode(0, 0, "one")


def test_combat_target_sums_all_modifiers(scripted):
    rng, _ = scripted()
    req = RollRequest(
        base_target=40,
        modifier=10,
        aim=Aim(val=10, is_aiming=True),
        range_modifier=10,
        weapon_traits=WeaponTraits(twin_linked=True),
        attack_mode="semi_auto",
        rate_of_fire=RateOfFire(burst=3),
    )
    mode = resolve_attack_mode(req.attack_mode, req.rate_of_fire)
    # 10 + 10 + 10 + 20 (twin-linked) + 10 (semi auto) = 60
    res = compute_combat_target(req, mode, rng)
    assert res.modifier_total == 60
    assert res.target == 100
    assert res.psy is None


def test_combat_target_clamps_large_penalties(scripted):
    rng, _ = scripted()
    req = RollRequest(base_target=50, modifier=-60, range_modifier=-30, attack_mode="called_shot")
    mode = resolve_attack_mode(req.attack_mode, req.rate_of_fire)
    assert compute_combat_target(req, mode, rng).target == -10


def test_combat_target_requires_base(scripted):
    rng, _ = scripted()
    with pytest.raises(MissingRequiredField):
        compute_combat_target(RollRequest(attack_mode="standard"), AttackMode("standard"), rng)


def test_psy_push_with_warp_conduit_adds_feedback(scripted):
    rng, src = scripted(3)
    psy = PsyDescriptor(rating=3, value=5, max=4, warp_conduit=True)
    state, modifier = compute_psy_state(psy, rng)
    # value clamped to max 4 first, then pushed by 1d5
    assert modifier == -10
    assert state.push is True
    assert state.value == 7
    assert src.calls == [(1, 5)]
    # request untouched
    assert psy.value == 5


def test_psy_push_without_conduit_draws_nothing(scripted):
    rng, src = scripted()
    state, modifier = compute_psy_state(PsyDescriptor(rating=3, value=4, max=4), rng)
    assert (state.value, state.push, modifier) == (4, True, -10)
    assert src.calls == []


def test_psy_below_rating_is_a_bonus(scripted):
    rng, _ = scripted()
    req = RollRequest(
        base_target=30,
        attack_mode="standard",
        psy=PsyDescriptor(rating=4, value=2, max=5, warp_conduit=True),
    )
    res = compute_combat_target(req, resolve_attack_mode("standard", RateOfFire()), rng)
    assert res.target == 50
    assert res.psy.push is False
    assert res.psy.value == 2


def test_psy_modifier_ignored_when_disabled(scripted):
    rng, _ = scripted()
    req = RollRequest(
        base_target=30,
        attack_mode="standard",
        psy=PsyDescriptor(rating=4, value=8, max=8, use_modifier=False),
    )
    res = compute_combat_target(req, resolve_attack_mode("standard", RateOfFire()), rng)
    assert res.target == 30
    assert res.psy.push is False


def test_common_target_uses_selected_evasion_skill():
    req = RollRequest(modifier=10, evasion=Evasion(selected="parry", dodge=35, parry=45))
    assert compute_common_target(req).target == 55
    req = RollRequest(modifier=10, evasion=Evasion(selected="dodge", dodge=35, parry=45))
    assert compute_common_target(req).target == 45


def test_common_target_ignores_combat_modifiers():
    req = RollRequest(base_target=40, modifier=-5, range_modifier=30, aim=Aim(val=20))
    assert compute_common_target(req).target == 35


def test_common_target_requires_base_or_evasion():
    with pytest.raises(MissingRequiredField):
        compute_common_target(RollRequest(modifier=10))
    with pytest.raises(MissingRequiredField):
        compute_common_target(RollRequest(evasion=Evasion(selected="block")))
