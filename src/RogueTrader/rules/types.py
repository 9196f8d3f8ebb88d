from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class HitLocation(str, Enum):
    HEAD = "head"
    RIGHT_ARM = "right_arm"
    LEFT_ARM = "left_arm"
    BODY = "body"
    RIGHT_LEG = "right_leg"
    LEFT_LEG = "left_leg"


@dataclass(frozen=True)
class WeaponTraits:
    twin_linked: bool = False
    flame: bool = False
    tearing: bool = False
    # proven/primitive carry the face value clamp; 0 means absent
    proven: int = 0
    primitive: int = 0
    accurate: bool = False
    razor_sharp: bool = False
    storm: bool = False
    skip_attack_roll: bool = False


@dataclass(frozen=True)
class RateOfFire:
    burst: int = 0
    full: int = 0


@dataclass(frozen=True)
class Aim:
    val: int = 0
    is_aiming: bool = False


@dataclass(frozen=True)
class PsyDescriptor:
    rating: int
    value: int
    max: int
    warp_conduit: bool = False
    use_modifier: bool = True


@dataclass(frozen=True)
class Evasion:
    selected: str
    dodge: int = 0
    parry: int = 0
    # degrees of success scored by the attack being evaded
    attack_degree: int = 0


@dataclass(frozen=True)
class RollRequest:
    base_target: int | None = None
    modifier: int = 0
    aim: Aim | None = None
    range_modifier: int = 0
    weapon_traits: WeaponTraits = field(default_factory=WeaponTraits)
    attack_mode: str | None = None
    rate_of_fire: RateOfFire = field(default_factory=RateOfFire)
    psy: PsyDescriptor | None = None
    damage_formula: str = ""
    penetration_formula: str = ""
    damage_bonus: int = 0
    evasion: Evasion | None = None
    owner_id: str | None = None
    name: str = ""
    item_id: str | None = None

    @property
    def is_evasion(self) -> bool:
        return self.evasion is not None

    @property
    def is_aiming(self) -> bool:
        return bool(self.aim and self.aim.is_aiming)


@dataclass(frozen=True)
class AttackMode:
    name: str
    modifier: int = 0
    hit_margin: int = 1
    max_hits: int = 1


@dataclass(frozen=True)
class PsyState:
    rating: int
    value: int
    push: bool = False


@dataclass(frozen=True)
class TargetResult:
    target: int
    modifier_total: int
    psy: PsyState | None = None


@dataclass(frozen=True)
class RollOutcome:
    target: int
    result: int
    is_success: bool
    dos: int
    dof: int


@dataclass(frozen=True)
class PsychicPhenomenaResult:
    has_phenomena: bool
    push: bool
    result: int


@dataclass(frozen=True)
class HitResult:
    number_of_hits: int


@dataclass(frozen=True)
class AttackContext:
    """What a damage roll needs to know about the attack that preceded it."""

    attack_degree: int
    attack_result: int
    number_of_hits: int
    psy: PsyState | None = None


@dataclass(frozen=True)
class DieResult:
    faces: int
    result: int
    active: bool = True


@dataclass(frozen=True)
class FormulaRoll:
    formula: str
    total: int
    dice: tuple[DieResult, ...] = ()

    @property
    def active_dice(self) -> tuple[DieResult, ...]:
        return tuple(d for d in self.dice if d.active)


@dataclass(frozen=True)
class DamageRecord:
    total: int
    penetration: int
    dos: int
    formula: str
    location: HitLocation = HitLocation.BODY
    righteous_fury: bool = False
    # active die results below the degree of success
    dices: tuple[int, ...] = ()
    min_dice: int | None = None
    accurate_dice: tuple[int, ...] = ()


@dataclass(frozen=True)
class DamageResult:
    formula: str
    penetration: int
    damages: tuple[DamageRecord, ...]

    @property
    def total(self) -> int:
        return sum(d.total for d in self.damages)

    @property
    def righteous_fury(self) -> bool:
        return any(d.righteous_fury for d in self.damages)


@dataclass(frozen=True)
class CommonRollResult:
    outcome: RollOutcome
    psychic: PsychicPhenomenaResult | None = None
    hits: HitResult | None = None


@dataclass(frozen=True)
class CombatRollResult:
    attack_mode: AttackMode | None
    outcome: RollOutcome | None
    hits: HitResult
    attack: AttackContext
    psychic: PsychicPhenomenaResult | None = None
    damage: DamageResult | None = None
    template_required: bool = False
