# rules/dice.py

from __future__ import annotations

import random
import re
from typing import Protocol

import structlog

from .errors import MalformedFormula
from .types import DieResult, FormulaRoll

_QUALIFIERS = r"(?:dl\d*|kh\d*|min\d+|max\d+)*"

# One dice group, e.g. "2d10", "3d10dl", "1d10min3". Never starts mid-token,
# so the "d10" of "PRd10" or the "2d10" of "12d10" is not a group.
DICE_GROUP_RE = re.compile(
    rf"(?<![A-Za-z\d])(?P<count>\d*)d(?P<faces>\d+)(?P<qualifiers>{_QUALIFIERS})",
    re.IGNORECASE,
)
_QUALIFIER_RE = re.compile(r"(?P<op>dl|kh|min|max)(?P<n>\d*)", re.IGNORECASE)
_TOKEN_RE = re.compile(
    rf"(?P<dice>\d*d\d+{_QUALIFIERS})|(?P<num>\d+)|(?P<op>[-+*/()])", re.IGNORECASE
)


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int:
        ...


class DiceRNG:
    """Seedable random source that also evaluates dice formulas.

    Any object exposing ``randint(a, b)`` (``random.Random`` or a scripted
    stand-in) can back it, so a fixed seed or a fixed sequence reproduces
    every draw of a roll.
    """

    def __init__(self, seed: int | None = None, rng: RandomSource | None = None):
        self._rng = rng if rng is not None else random.Random(seed)
        self._log = structlog.get_logger()

    def randint(self, low: int, high: int) -> int:
        return int(self._rng.randint(low, high))

    def roll_d100(self) -> int:
        return self.randint(1, 100)

    def evaluate(self, formula: str) -> FormulaRoll:
        """
        Supports: NdM with dl/kh/min/max qualifiers, integers, + - * / and parentheses.
        Division floors.
        """
        self._log.debug("rules.dice.evaluate.start", formula=formula)
        text = (formula or "").replace(" ", "")
        if not text:
            raise MalformedFormula(formula, "empty formula")
        parser = _FormulaParser(text, self)
        total = parser.parse()
        out = FormulaRoll(formula=text, total=total, dice=tuple(parser.dice))
        self._log.debug(
            "rules.dice.evaluate.result",
            formula=text,
            total=total,
            dice=[d.result for d in out.dice],
        )
        return out

    def roll_group(self, count: int, faces: int, qualifiers: str = "") -> list[DieResult]:
        if faces < 1:
            raise MalformedFormula(f"{count}d{faces}{qualifiers}", "dice need at least one face")
        results = [self.randint(1, faces) for _ in range(count)]
        mods = [(m.group("op").lower(), m.group("n")) for m in _QUALIFIER_RE.finditer(qualifiers)]

        # Face clamps apply before anything is dropped.
        for op, n in mods:
            if op == "min":
                results = [max(r, int(n)) for r in results]
            elif op == "max":
                results = [min(r, int(n)) for r in results]

        active = [True] * len(results)
        for op, n in mods:
            amount = int(n) if n else 1
            live = [i for i in range(len(results)) if active[i]]
            if op == "dl":
                for i in sorted(live, key=lambda i: results[i])[:amount]:
                    active[i] = False
            elif op == "kh":
                for i in sorted(live, key=lambda i: results[i], reverse=True)[amount:]:
                    active[i] = False

        return [DieResult(faces=faces, result=r, active=a) for r, a in zip(results, active)]


class _FormulaParser:
    def __init__(self, text: str, rng: DiceRNG):
        self.text = text
        self.rng = rng
        self.tokens = self._tokenize(text)
        self.pos = 0
        self.dice: list[DieResult] = []

    def _tokenize(self, text: str) -> list[tuple[str, str]]:
        tokens: list[tuple[str, str]] = []
        i = 0
        while i < len(text):
            m = _TOKEN_RE.match(text, i)
            if not m:
                raise MalformedFormula(text, f"unexpected {text[i]!r} at position {i}")
            kind = m.lastgroup or ""
            tokens.append((kind, m.group(kind)))
            i = m.end()
        return tokens

    def parse(self) -> int:
        value = self._expr()
        if self.pos != len(self.tokens):
            raise MalformedFormula(self.text, f"unexpected {self.tokens[self.pos][1]!r}")
        return value

    def _peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take(self) -> tuple[str, str]:
        tok = self._peek()
        if tok is None:
            raise MalformedFormula(self.text, "unexpected end of formula")
        self.pos += 1
        return tok

    def _expr(self) -> int:
        value = self._term()
        while (tok := self._peek()) is not None and tok[1] in ("+", "-"):
            self.pos += 1
            rhs = self._term()
            value = value + rhs if tok[1] == "+" else value - rhs
        return value

    def _term(self) -> int:
        value = self._factor()
        while (tok := self._peek()) is not None and tok[1] in ("*", "/"):
            self.pos += 1
            rhs = self._factor()
            if tok[1] == "*":
                value *= rhs
            else:
                if rhs == 0:
                    raise MalformedFormula(self.text, "division by zero")
                value //= rhs
        return value

    def _factor(self) -> int:
        kind, raw = self._take()
        if kind == "num":
            return int(raw)
        if kind == "dice":
            m = DICE_GROUP_RE.fullmatch(raw)
            if not m:
                raise MalformedFormula(self.text, f"bad dice group {raw!r}")
            group = self.rng.roll_group(
                int(m.group("count") or 1), int(m.group("faces")), m.group("qualifiers")
            )
            self.dice.extend(group)
            return sum(d.result for d in group if d.active)
        if raw == "(":
            value = self._expr()
            if self._take()[1] != ")":
                raise MalformedFormula(self.text, "unbalanced parentheses")
            return value
        if raw == "-":
            return -self._factor()
        if raw == "+":
            return self._factor()
        raise MalformedFormula(self.text, f"unexpected {raw!r}")
