# test_dice.py
import pytest

from RogueTrader.rules.dice import DiceRNG
from RogueTrader.rules.errors import MalformedFormula
from RogueTrader.rules.types import DieResult


def test_plain_dice_with_modifier(scripted):
    rng, src = scripted(4, 7)
    res = rng.evaluate("2d10+3")
    assert res.total == 14
    assert res.dice == (DieResult(10, 4), DieResult(10, 7))
    assert src.calls == [(1, 10), (1, 10)]


def test_count_defaults_to_one(scripted):
    rng, _ = scripted(5)
    assert rng.evaluate("d6").total == 5


def test_drop_lowest(scripted):
    rng, _ = scripted(2, 9, 5)
    res = rng.evaluate("3d10dl")
    assert res.total == 14
    assert [d.active for d in res.dice] == [False, True, True]
    assert [d.result for d in res.active_dice] == [9, 5]


def test_keep_highest(scripted):
    rng, _ = scripted(3, 8)
    assert rng.evaluate("2d10kh").total == 8


def test_min_and_max_clamp_faces(scripted):
    rng, _ = scripted(1, 10)
    assert rng.evaluate("1d10min3").total == 3
    assert rng.evaluate("1d10max7").total == 7


def test_clamp_applies_before_drop(scripted):
    rng, _ = scripted(1, 2, 6)
    res = rng.evaluate("3d10dlmin3")
    # 1 and 2 both become 3; one of them is dropped
    assert res.total == 9
    assert sorted(d.result for d in res.active_dice) == [3, 6]


@pytest.mark.parametrize(
    "formula,total",
    [("(6)", 6), ("2*3-1", 5), ("7/2", 3), ("-2+5", 3), ("4+-1", 3), ("2*(1+2)", 6)],
)
def test_arithmetic(formula, total):
    assert DiceRNG(seed=1).evaluate(formula).total == total


def test_negative_bonus_after_dice(scripted):
    rng, _ = scripted(5)
    assert rng.evaluate("1d10+-1").total == 4


def test_whitespace_is_ignored(scripted):
    rng, _ = scripted(5)
    res = rng.evaluate(" 1d10 + 2 ")
    assert res.total == 7
    assert res.formula == "1d10+2"


@pytest.mark.parametrize("formula", ["", "1d10+SB", "(3", "3(6)", "2d", "1d0", "4/0", "+"])
def test_malformed(formula):
    with pytest.raises(MalformedFormula):
        DiceRNG(seed=1).evaluate(formula)


def test_seed_reproduces_rolls():
    a = DiceRNG(seed=1234).evaluate("4d10+2")
    b = DiceRNG(seed=1234).evaluate("4d10+2")
    assert a == b
    assert 6 <= a.total <= 42


def test_roll_d100_range():
    rng = DiceRNG(seed=99)
    assert all(1 <= rng.roll_d100() <= 100 for _ in range(200))
