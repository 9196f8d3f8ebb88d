"""Exceptions raised by the roll resolution pipeline."""

from __future__ import annotations


class RulesError(Exception):
    """Base class for roll resolution failures."""

    pass


class MalformedFormula(RulesError, ValueError):
    """Raised when a damage or penetration formula cannot be parsed or rewritten."""

    def __init__(self, formula: str, reason: str):
        self.formula = formula
        self.reason = reason
        super().__init__(f"Bad formula {formula!r}: {reason}")


class MissingRequiredField(RulesError, ValueError):
    """Raised when a roll request lacks a field its roll kind needs."""

    def __init__(self, field: str, roll_kind: str):
        self.field = field
        self.roll_kind = roll_kind
        super().__init__(f"{roll_kind} roll requires '{field}'")
