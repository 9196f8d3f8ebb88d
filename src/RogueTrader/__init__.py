"""Rogue Trader roll resolution.

The rules live in ``RogueTrader.rules``; ``RogueTraderRuleset`` in
``RogueTrader.rules.engine`` is the entry point.
"""

# ruff: noqa: N999  # Package name uses project-specific casing 'RogueTrader'
