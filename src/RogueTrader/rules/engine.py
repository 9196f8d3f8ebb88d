from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import structlog

from RogueTrader.config import Settings
from RogueTrader.dispatch import MessageKind, RollSink, build_message
from RogueTrader.metrics import inc_counter, observe_histogram

from .damage import resolve_damage
from .dice import DiceRNG, RandomSource
from .errors import MissingRequiredField, RulesError
from .locations import SKIP_ATTACK_RESULT
from .outcome import count_attack_hits, count_evaded_hits, detect_phenomena, roll_outcome
from .targets import FireMode, compute_combat_target, compute_common_target, resolve_attack_mode
from .types import (
    AttackContext,
    CombatRollResult,
    CommonRollResult,
    DamageResult,
    HitResult,
    PsychicPhenomenaResult,
    RollOutcome,
    RollRequest,
    TargetResult,
)

log = structlog.get_logger()


class AttributeResolver(Protocol):
    """Looks up the attribute bonus tokens (e.g. ``SB``) of an acting entity."""

    def bonuses(self, owner_id: str | None) -> Mapping[str, int]:
        ...


class StaticAttributes:
    """AttributeResolver backed by a plain ``owner_id -> {token: value}`` mapping."""

    def __init__(self, table: Mapping[str, Mapping[str, int]] | None = None):
        self._table = dict(table or {})

    def bonuses(self, owner_id: str | None) -> Mapping[str, int]:
        if owner_id is None:
            return {}
        return self._table.get(owner_id, {})


class RogueTraderRuleset:
    """
    Resolves Rogue Trader skill, combat and damage rolls.

    Collaborators are injected: ``rng`` (or ``seed``) supplies every draw,
    ``attributes`` resolves formula symbols per owner and ``sink`` receives
    the finished messages. Each call is independent; nothing from one roll
    is kept for the next.
    """

    def __init__(
        self,
        seed: int | None = None,
        *,
        rng: DiceRNG | RandomSource | None = None,
        attributes: AttributeResolver | None = None,
        sink: RollSink | None = None,
        settings: Settings | None = None,
        fire_modes: Mapping[str, FireMode] | None = None,
    ):
        if isinstance(rng, DiceRNG):
            self.rng = rng
        else:
            self.rng = DiceRNG(seed, rng=rng)
        self.attributes = attributes or StaticAttributes()
        self.sink = sink
        self.settings = settings or Settings()
        self.fire_modes = dict(fire_modes) if fire_modes is not None else self.settings.fire_mode_table()

    # --- publishing ---

    def _publish(self, kind: MessageKind, result: Any, request: RollRequest) -> None:
        if self.sink is None:
            return
        message = build_message(
            kind,
            result,
            visibility=self.settings.roll_visibility,
            name=request.name,
            item_id=request.item_id,
            owner_id=request.owner_id,
        )
        self.sink.publish(message)

    # --- pipeline stages ---

    def _phenomena(self, target: TargetResult, outcome: RollOutcome) -> PsychicPhenomenaResult | None:
        if target.psy is None:
            return None
        phenomena = detect_phenomena(outcome.result, target.psy.push)
        if phenomena.has_phenomena:
            inc_counter("rules.psychic.phenomena")
        return phenomena

    def common_roll(self, request: RollRequest) -> CommonRollResult:
        """Skill/characteristic roll; evasion rolls also report the hits that still land."""
        kind = "evasion" if request.is_evasion else "common"
        try:
            target = compute_common_target(request)
            outcome = roll_outcome(target.target, self.rng)
            phenomena = self._phenomena(target, outcome)

            hits: HitResult | None = None
            if request.evasion is not None:
                attack_mode = resolve_attack_mode(
                    request.attack_mode, request.rate_of_fire, self.fire_modes
                )
                hits = count_evaded_hits(
                    request.evasion.attack_degree, outcome, attack_mode, request.weapon_traits
                )
        except RulesError as e:
            inc_counter(f"rules.{kind}.error")
            log.warning(f"rules.{kind}.failed", error=str(e))
            raise

        result = CommonRollResult(outcome=outcome, psychic=phenomena, hits=hits)
        inc_counter(f"rules.{kind}.rolled")
        if outcome.is_success:
            inc_counter(f"rules.{kind}.success")
        log.info(
            f"rules.{kind}.completed",
            target=outcome.target,
            result=outcome.result,
            success=outcome.is_success,
            dos=outcome.dos,
            dof=outcome.dof,
            hits=hits.number_of_hits if hits else None,
        )
        self._publish("evasion" if request.is_evasion else "roll", result, request)
        return result

    def combat_roll(self, request: RollRequest) -> CombatRollResult:
        """Attack roll. Weapons that skip the attack roll go straight to damage."""
        traits = request.weapon_traits
        template_required = bool(traits.flame and self.settings.use_flame_template)

        try:
            if traits.skip_attack_roll:
                attack = AttackContext(
                    attack_degree=0,
                    attack_result=SKIP_ATTACK_RESULT,
                    number_of_hits=1,
                    psy=None,
                )
                damage = self._damage(request, attack)
                inc_counter("rules.combat.rolled")
                log.info("rules.combat.completed", skipped_attack=True, hits=1)
                self._publish("damage", damage, request)
                return CombatRollResult(
                    attack_mode=None,
                    outcome=None,
                    hits=HitResult(1),
                    attack=attack,
                    damage=damage,
                    template_required=template_required,
                )

            if request.base_target is None:
                raise MissingRequiredField("base_target", "combat")
            if not request.attack_mode:
                raise MissingRequiredField("attack_mode", "combat")

            attack_mode = resolve_attack_mode(request.attack_mode, request.rate_of_fire, self.fire_modes)
            target = compute_combat_target(request, attack_mode, self.rng)
            outcome = roll_outcome(target.target, self.rng)
            phenomena = self._phenomena(target, outcome)
            hits = count_attack_hits(outcome, attack_mode, traits)
        except RulesError as e:
            inc_counter("rules.combat.error")
            log.warning("rules.combat.failed", error=str(e))
            raise

        attack = AttackContext(
            attack_degree=outcome.dos,
            attack_result=outcome.result,
            number_of_hits=hits.number_of_hits,
            psy=target.psy,
        )
        result = CombatRollResult(
            attack_mode=attack_mode,
            outcome=outcome,
            hits=hits,
            attack=attack,
            psychic=phenomena,
            template_required=template_required,
        )
        inc_counter("rules.combat.rolled")
        if outcome.is_success:
            inc_counter("rules.combat.success")
            observe_histogram("rules.combat.hits", hits.number_of_hits)
        log.info(
            "rules.combat.completed",
            attack_mode=attack_mode.name,
            target=outcome.target,
            result=outcome.result,
            success=outcome.is_success,
            dos=outcome.dos,
            hits=hits.number_of_hits,
        )
        self._publish("roll", result, request)
        return result

    def _damage(self, request: RollRequest, attack: AttackContext) -> DamageResult:
        bonuses = self.attributes.bonuses(request.owner_id)
        damage = resolve_damage(request, attack, self.rng, bonuses)
        if damage.righteous_fury:
            inc_counter("rules.damage.righteous_fury")
        return damage

    def damage_roll(self, request: RollRequest, attack: AttackContext) -> DamageResult:
        """Roll damage for every hit of an attack resolved by ``combat_roll``."""
        try:
            damage = self._damage(request, attack)
        except RulesError as e:
            inc_counter("rules.damage.error")
            log.warning("rules.damage.failed", error=str(e), formula=request.damage_formula)
            raise
        inc_counter("rules.damage.rolled")
        log.info(
            "rules.damage.completed",
            hits=len(damage.damages),
            total=damage.total,
            penetration=damage.penetration,
            righteous_fury=damage.righteous_fury,
        )
        self._publish("damage", damage, request)
        return damage

    def report_empty_clip(self, request: RollRequest) -> None:
        inc_counter("rules.combat.empty_clip")
        log.info("rules.combat.empty_clip", name=request.name, item_id=request.item_id)
        self._publish("empty_clip", {"name": request.name}, request)
