"""Hit location lookup for attack rolls."""

from __future__ import annotations

from .types import HitLocation

# Attacks that skip the hit roll use this result: "05" reverses to 50, body.
SKIP_ATTACK_RESULT = 5

_BUCKETS: tuple[tuple[int, HitLocation], ...] = (
    (10, HitLocation.HEAD),
    (20, HitLocation.RIGHT_ARM),
    (30, HitLocation.LEFT_ARM),
    (70, HitLocation.BODY),
    (85, HitLocation.RIGHT_LEG),
    (100, HitLocation.LEFT_LEG),
)

ADDITIONAL_HITS: dict[HitLocation, tuple[HitLocation, ...]] = {
    HitLocation.HEAD: (
        HitLocation.HEAD,
        HitLocation.RIGHT_ARM,
        HitLocation.BODY,
        HitLocation.LEFT_ARM,
        HitLocation.BODY,
    ),
    HitLocation.RIGHT_ARM: (
        HitLocation.RIGHT_ARM,
        HitLocation.BODY,
        HitLocation.HEAD,
        HitLocation.BODY,
        HitLocation.RIGHT_ARM,
    ),
    HitLocation.LEFT_ARM: (
        HitLocation.LEFT_ARM,
        HitLocation.BODY,
        HitLocation.HEAD,
        HitLocation.BODY,
        HitLocation.LEFT_ARM,
    ),
    HitLocation.BODY: (
        HitLocation.BODY,
        HitLocation.RIGHT_ARM,
        HitLocation.HEAD,
        HitLocation.LEFT_ARM,
        HitLocation.BODY,
    ),
    HitLocation.RIGHT_LEG: (
        HitLocation.RIGHT_LEG,
        HitLocation.BODY,
        HitLocation.RIGHT_ARM,
        HitLocation.HEAD,
        HitLocation.BODY,
    ),
    HitLocation.LEFT_LEG: (
        HitLocation.LEFT_LEG,
        HitLocation.BODY,
        HitLocation.LEFT_ARM,
        HitLocation.HEAD,
        HitLocation.BODY,
    ),
}


def reverse_digits(result: int) -> int | None:
    """Swap tens and units of a two-digit d100 result (7 -> 70, 42 -> 24).

    Returns None for anything outside 1..99.
    """
    if not 1 <= result <= 99:
        return None
    tens, units = divmod(result, 10)
    return units * 10 + tens


def get_location(attack_result: int) -> HitLocation:
    reversed_value = reverse_digits(attack_result)
    if reversed_value is None:
        return HitLocation.BODY
    for upper, location in _BUCKETS:
        if reversed_value <= upper:
            return location
    return HitLocation.BODY


def get_additional_location(first: HitLocation, index: int) -> HitLocation:
    """Location of the ``index``-th hit after the first (0-based)."""
    sequence = ADDITIONAL_HITS.get(first, ADDITIONAL_HITS[HitLocation.BODY])
    return sequence[min(index, len(sequence) - 1)]
