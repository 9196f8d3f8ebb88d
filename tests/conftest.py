# tests/conftest.py

import pytest

from RogueTrader.metrics import reset_counters
from RogueTrader.rules.dice import DiceRNG


class ScriptedRandom:
    """randint() stand-in that replays a fixed list of draws in order."""

    def __init__(self, values):
        self.values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError(f"unexpected draw randint({a}, {b})")
        v = self.values.pop(0)
        assert a <= v <= b, f"scripted value {v} outside {a}..{b}"
        return v


@pytest.fixture
def scripted():
    """Factory: scripted(4, 7, ...) -> (DiceRNG, ScriptedRandom)."""

    def _make(*values):
        src = ScriptedRandom(values)
        return DiceRNG(rng=src), src

    return _make


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_counters()
    yield
    reset_counters()
