"""
Heuristic Go AI.

This agent scores every candidate point with a weighted sum of pure
evaluators (see :mod:`goai.ai.evaluators`) and ranks them best first. It has
three scorers:

- ``PROFILE``: the full skill-profile scorer used from level 4 up. Each
  evaluator is gated by a profile tendency or a technique flag, so higher
  levels add terms rather than change them.
- ``FAST``: a small capture/rescue/atari scorer for levels 1-3, which play
  from the fast candidate generator.
- ``AGGRESSIVE_CAPTURE``: the survival-variant scorer when the bot plays
  White and has to capture a set number of stones within a turn limit.

Score tiers
===========
The weights are tuned so the tiers below never overlap in practice:

1. Rescue of an own atari group and captures (thousands).
2. Atari threats (about 1000 and up).
3. Territory, combat and strategy terms (tens to hundreds). The territory
   strategy term is capped at ``WEIGHT_TERRITORY_STRATEGY_CAP``.
4. Positional heuristics: joseki, fuseki, shape (tens).

A move that puts its own new group into atari without capturing anything
gets ``SELF_ATARI_SENTINEL`` once the profile knows to avoid self-atari,
unless the same move also rescues an own atari group.

Configurable Weight Constants
=============================
The rescue, capture and atari bonuses are ``WEIGHT_*`` class constants.
``weight_overrides`` passed to the constructor shadow them on the instance
without changing the class, which the self-play ladder uses to compare
tunings.

Look-ahead
==========
Profiles with ``calculation_depth > 1`` add a look-ahead term weighted by
``calculation_depth * WEIGHT_LOOKAHEAD``. The simulated depth itself is
clamped by :class:`~goai.ai.lookahead.LookAheadEvaluator` (see
``GOAI_LOOKAHEAD_MAX_DEPTH``).
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..models import MoveCandidate, Point, SkillProfile, Stone
from .base import BaseAI
from .evaluators import (
    MoveContext,
    ScoringContext,
    captured_group_value,
    evaluate_advanced_techniques,
    evaluate_atari_judgment,
    evaluate_atari_opportunity,
    evaluate_attack_opportunity,
    evaluate_capture_opportunity,
    evaluate_combat,
    evaluate_connection_and_cut,
    evaluate_defensive_direction,
    evaluate_directional_attack,
    evaluate_endgame,
    evaluate_escape_from_surround,
    evaluate_fuseki,
    evaluate_group_value,
    evaluate_joseki,
    evaluate_life_death,
    evaluate_life_death_advanced,
    evaluate_movement,
    evaluate_movement_advanced,
    evaluate_proximity,
    evaluate_safety,
    evaluate_sacrifice_and_counter,
    evaluate_self_atari,
    evaluate_surround_opportunity,
    evaluate_territory,
    evaluate_territory_and_combat,
    evaluate_territory_strategy,
    evaluate_win_focus,
)
from .evaluators.positional import FUSEKI_MOVE_LIMIT
from .lookahead import LookAheadEvaluator

logger = logging.getLogger(__name__)

__all__ = ["HeuristicAI", "ScoringMode", "SELF_ATARI_SENTINEL"]

SELF_ATARI_SENTINEL = -100000.0

# Endgame terms switch on once the board is this full (or this many moves
# relative to the board area have been played).
ENDGAME_THRESHOLD = 0.7

# Tendencies below this do not contribute their positional term.
TENDENCY_GATE = 0.3


class ScoringMode(str, Enum):
    PROFILE = "profile"
    FAST = "fast"
    AGGRESSIVE_CAPTURE = "aggressive_capture"


class HeuristicAI(BaseAI):
    """Heuristic AI that scores and ranks candidate placements."""

    # Rescue of an own atari group (profile scorer)
    WEIGHT_SAVE_BASE = 5000.0
    WEIGHT_SAVE_GROUP_VALUE = 500.0
    WEIGHT_SAVE_GROUP_SIZE = 200.0
    WEIGHT_DOOMED_SAVE_BASE = 2000.0
    WEIGHT_DOOMED_SAVE_GROUP_VALUE = 200.0
    WEIGHT_DOOMED_SAVE_GROUP_SIZE = 100.0

    # Captures
    WEIGHT_CAPTURE_BASE = 5000.0
    WEIGHT_CAPTURE_PER_STONE = 500.0
    WEIGHT_CAPTURE_TENDENCY = 300.0
    WEIGHT_SECONDARY_SHARE = 0.3

    # Territory
    WEIGHT_TERRITORY_DEFENSIVE = 200.0
    WEIGHT_TERRITORY_FILLING = 100.0
    WEIGHT_TERRITORY_QUIET = 50.0
    WEIGHT_DEFENSIVE_DIRECTION = 150.0
    WEIGHT_TERRITORY_STRATEGY_CAP = 800.0

    # Fighting
    WEIGHT_COMBAT = 80.0
    WEIGHT_ATARI_BASE = 1000.0
    WEIGHT_ATARI = 200.0
    WEIGHT_PROXIMITY = 250.0
    WEIGHT_ATTACK = 200.0

    # Tendency-gated positional terms
    WEIGHT_JOSEKI = 40.0
    WEIGHT_LIFE_DEATH = 80.0
    WEIGHT_MOVEMENT = 40.0
    WEIGHT_WIN_FOCUS = 150.0

    # Knowledge-gated terms
    WEIGHT_SACRIFICE = 300.0
    WEIGHT_ATARI_JUDGMENT = 400.0
    WEIGHT_JUDGED_CAPTURE_BASE = 3000.0
    WEIGHT_JUDGED_CAPTURE = 400.0
    WEIGHT_DIRECTIONAL = 200.0
    WEIGHT_FUSEKI = 150.0
    WEIGHT_TERRITORY_AND_COMBAT = 100.0
    WEIGHT_ADVANCED = 250.0
    WEIGHT_ESCAPE = 150.0
    WEIGHT_CONNECTION = 200.0
    WEIGHT_LIFE_DEATH_ADVANCED = 300.0
    WEIGHT_MOVEMENT_ADVANCED = 150.0
    WEIGHT_ENDGAME = 400.0
    WEIGHT_LOOKAHEAD = 50.0

    # Fast scorer (levels 1-3)
    WEIGHT_FAST_SAVE_BASE = 8000.0
    WEIGHT_FAST_SAVE_SIZE = 1000.0
    WEIGHT_FAST_ATARI_BASE = 2000.0
    WEIGHT_FAST_PROXIMITY = 300.0
    WEIGHT_FAST_ATTACK = 250.0

    # Aggressive capture scorer (survival, bot as White)
    WEIGHT_AGGRO_SAVE_BASE = 10000.0
    WEIGHT_AGGRO_SAVE_SIZE = 1500.0
    WEIGHT_AGGRO_CAPTURE_PER_STONE = 800.0
    WEIGHT_AGGRO_ATTACK = 500.0
    WEIGHT_AGGRO_PROXIMITY = 400.0
    WEIGHT_AGGRO_SURROUND = 350.0
    WEIGHT_AGGRO_COMBAT = 150.0
    WEIGHT_AGGRO_SAFETY = 20.0

    def __init__(
        self,
        player: Stone,
        profile: SkillProfile,
        rng_seed: int | None = None,
        lookahead: LookAheadEvaluator | None = None,
        weight_overrides: dict[str, float] | None = None,
        mode: ScoringMode = ScoringMode.PROFILE,
    ) -> None:
        super().__init__(player, profile, rng_seed)
        self.lookahead = lookahead or LookAheadEvaluator()
        self.mode = mode
        if weight_overrides:
            self._apply_weight_overrides(weight_overrides)

    def _apply_weight_overrides(self, overrides: dict[str, float]) -> None:
        """Shadow class-level ``WEIGHT_*`` constants on this instance."""
        for name, value in overrides.items():
            if not name.startswith("WEIGHT_") or not hasattr(self, name):
                raise ValueError(f"Unknown heuristic weight: {name}")
            setattr(self, name, float(value))

    def get_weights(self) -> dict[str, float]:
        return {
            name: getattr(self, name)
            for name in dir(self)
            if name.startswith("WEIGHT_")
        }

    # ------------------------------------------------------------------
    # BaseAI interface
    # ------------------------------------------------------------------

    def rank_moves(
        self, scoring: ScoringContext, moves: list[Point]
    ) -> list[MoveCandidate]:
        if self.mode == ScoringMode.FAST:
            return self.score_moves_fast(scoring, moves)
        if self.mode == ScoringMode.AGGRESSIVE_CAPTURE:
            return self.score_moves_for_aggressive_capture(scoring, moves)
        return self.score_moves_by_profile(scoring, moves)

    def evaluate_move(self, scoring: ScoringContext, point: Point) -> float:
        ctx = scoring.for_point(point)
        if self.mode == ScoringMode.FAST:
            return self._score_fast(ctx)
        if self.mode == ScoringMode.AGGRESSIVE_CAPTURE:
            return self._score_aggressive(ctx)
        return self._score_profile(ctx)

    def get_evaluation_breakdown(
        self, scoring: ScoringContext, point: Point
    ) -> dict[str, float]:
        """Raw evaluator values for one point, plus the scorer total."""
        ctx = scoring.for_point(point)
        return {
            "total": self.evaluate_move(scoring, point),
            "capture": evaluate_capture_opportunity(ctx),
            "atari": evaluate_atari_opportunity(ctx),
            "self_atari": evaluate_self_atari(ctx),
            "territory": evaluate_territory(ctx),
            "combat": evaluate_combat(ctx),
            "attack": evaluate_attack_opportunity(ctx),
            "proximity": evaluate_proximity(ctx),
            "safety": evaluate_safety(ctx),
            "escape": evaluate_escape_from_surround(ctx),
            "rescued_groups": float(len(ctx.rescued_groups)),
        }

    # ------------------------------------------------------------------
    # Scorers
    # ------------------------------------------------------------------

    @staticmethod
    def _rank(scored: list[MoveCandidate]) -> list[MoveCandidate]:
        # list.sort is stable: ties keep generation order.
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored

    def _score_all(
        self, scoring: ScoringContext, moves: list[Point], scorer
    ) -> list[MoveCandidate]:
        scored = []
        for p in moves:
            ctx = scoring.for_point(p)
            scored.append(
                MoveCandidate(
                    point=p, score=scorer(ctx), suppressed=self._is_suppressed(ctx)
                )
            )
        return self._rank(scored)

    def score_moves_by_profile(
        self, scoring: ScoringContext, moves: list[Point]
    ) -> list[MoveCandidate]:
        return self._score_all(scoring, moves, self._score_profile)

    def score_moves_fast(
        self, scoring: ScoringContext, moves: list[Point]
    ) -> list[MoveCandidate]:
        return self._score_all(scoring, moves, self._score_fast)

    def score_moves_for_aggressive_capture(
        self, scoring: ScoringContext, moves: list[Point]
    ) -> list[MoveCandidate]:
        return self._score_all(scoring, moves, self._score_aggressive)

    def _is_suppressed(self, ctx: MoveContext) -> bool:
        """Whether the active scorer pins this move to ``SELF_ATARI_SENTINEL``."""
        if self.mode == ScoringMode.PROFILE:
            return (
                self.profile.knowledge.avoids_self_atari
                and not ctx.is_rescue
                and evaluate_self_atari(ctx) > 0
            )
        return self._self_atari_without_capture(ctx)

    def _rescue_score(self, ctx: MoveContext) -> float:
        score = 0.0
        scoring = ctx.scoring
        for before, after in ctx.rescued_groups:
            value = evaluate_group_value(before, scoring)
            survives = self.lookahead.can_group_be_saved(
                ctx.sim.new_board,
                ctx.sim.new_ko_info,
                after,
                ctx.player,
                scoring.move_history_length,
                self.profile.calculation_depth,
            )
            if survives:
                score += (
                    self.WEIGHT_SAVE_BASE
                    + value * self.WEIGHT_SAVE_GROUP_VALUE
                    + before.size * self.WEIGHT_SAVE_GROUP_SIZE
                )
            else:
                score += (
                    self.WEIGHT_DOOMED_SAVE_BASE
                    + value * self.WEIGHT_DOOMED_SAVE_GROUP_VALUE
                    + before.size * self.WEIGHT_DOOMED_SAVE_GROUP_SIZE
                )
        return score

    def _score_profile(self, ctx: MoveContext) -> float:
        profile = self.profile
        knows = profile.knowledge
        scoring = ctx.scoring
        score = 0.0

        # Rescue versus capture: the stronger motive leads, the other adds
        # a share. A rescue the look-ahead deems hopeless yields to capture.
        save = self._rescue_score(ctx)
        capture_count = evaluate_capture_opportunity(ctx)
        capture = 0.0
        if capture_count > 0:
            capture += (
                self.WEIGHT_CAPTURE_BASE
                + capture_count * self.WEIGHT_CAPTURE_PER_STONE
            )
        capture += (
            capture_count * profile.capture_tendency * self.WEIGHT_CAPTURE_TENDENCY
        )
        if save > 0 and capture > 0:
            if save >= self.WEIGHT_SAVE_BASE:
                score += save + capture * self.WEIGHT_SECONDARY_SHARE
            else:
                score += capture + save * self.WEIGHT_SECONDARY_SHARE
        elif save > 0:
            score += save
        elif capture > 0:
            score += capture

        score += min(
            evaluate_territory_strategy(ctx), self.WEIGHT_TERRITORY_STRATEGY_CAP
        )
        territory = evaluate_territory(ctx)
        if territory > 5.0:
            score += (
                territory * profile.territory_tendency
                * self.WEIGHT_TERRITORY_DEFENSIVE
            )
            score += (
                evaluate_defensive_direction(ctx) * profile.territory_tendency
                * self.WEIGHT_DEFENSIVE_DIRECTION
            )
        elif territory < 0:
            score += (
                territory * profile.territory_tendency
                * self.WEIGHT_TERRITORY_FILLING
            )
        else:
            score += (
                territory * profile.territory_tendency
                * self.WEIGHT_TERRITORY_QUIET
            )

        score += evaluate_combat(ctx) * profile.combat_tendency * self.WEIGHT_COMBAT

        atari = evaluate_atari_opportunity(ctx)
        if atari > 0:
            score += (
                self.WEIGHT_ATARI_BASE
                + atari * profile.capture_tendency * self.WEIGHT_ATARI
            )

        if scoring.is_single_player:
            score += (
                evaluate_proximity(ctx) * profile.combat_tendency
                * self.WEIGHT_PROXIMITY
            )
            score += (
                evaluate_attack_opportunity(ctx) * profile.combat_tendency
                * self.WEIGHT_ATTACK
            )

        if profile.joseki_usage > TENDENCY_GATE:
            score += evaluate_joseki(ctx) * profile.joseki_usage * self.WEIGHT_JOSEKI
        if profile.life_death_skill > TENDENCY_GATE:
            score += (
                evaluate_life_death(ctx) * profile.life_death_skill
                * self.WEIGHT_LIFE_DEATH
            )
        if profile.movement_skill > TENDENCY_GATE:
            score += (
                evaluate_movement(ctx) * profile.movement_skill
                * self.WEIGHT_MOVEMENT
            )
        if profile.win_focus > 0.5 and (
            scoring.is_single_player or scoring.capture_mode
        ):
            score += (
                evaluate_win_focus(ctx) * profile.win_focus * self.WEIGHT_WIN_FOCUS
            )

        if knows.sacrifice_and_counter:
            score += evaluate_sacrifice_and_counter(ctx) * self.WEIGHT_SACRIFICE

        if knows.atari_judgment and not ctx.is_rescue:
            judged_capture = captured_group_value(ctx)
            if judged_capture > 0:
                score += (
                    self.WEIGHT_JUDGED_CAPTURE_BASE
                    + judged_capture * self.WEIGHT_JUDGED_CAPTURE
                )
            else:
                score += evaluate_atari_judgment(ctx) * self.WEIGHT_ATARI_JUDGMENT

        if knows.directional_attack:
            score += evaluate_directional_attack(ctx) * self.WEIGHT_DIRECTIONAL
        if knows.fuseki and scoring.move_history_length <= FUSEKI_MOVE_LIMIT:
            score += evaluate_fuseki(ctx) * self.WEIGHT_FUSEKI
        if knows.territory_and_combat:
            score += (
                evaluate_territory_and_combat(ctx)
                * self.WEIGHT_TERRITORY_AND_COMBAT
            )
        if knows.advanced_techniques:
            score += evaluate_advanced_techniques(ctx) * self.WEIGHT_ADVANCED

        escape = evaluate_escape_from_surround(ctx)
        if escape > 0:
            score += escape * self.WEIGHT_ESCAPE

        if knows.connection_life_death_movement:
            score += evaluate_connection_and_cut(ctx) * self.WEIGHT_CONNECTION
            score += (
                evaluate_life_death_advanced(ctx)
                * self.WEIGHT_LIFE_DEATH_ADVANCED
            )
            score += (
                evaluate_movement_advanced(ctx) * self.WEIGHT_MOVEMENT_ADVANCED
            )

        if knows.endgame and self._in_endgame(scoring):
            score += evaluate_endgame(ctx) * self.WEIGHT_ENDGAME

        if profile.calculation_depth > 1 and ctx.valid:
            look = self.lookahead.look_ahead(
                ctx.sim.new_board,
                ctx.sim.new_ko_info,
                ctx.player,
                scoring.move_history_length,
                profile.calculation_depth - 1,
            )
            score += look * profile.calculation_depth * self.WEIGHT_LOOKAHEAD

        if self._is_suppressed(ctx):
            return SELF_ATARI_SENTINEL
        return score

    @staticmethod
    def _in_endgame(scoring: ScoringContext) -> bool:
        area = scoring.size * scoring.size
        return (
            scoring.occupancy >= ENDGAME_THRESHOLD
            or scoring.move_history_length >= area * ENDGAME_THRESHOLD
        )

    def _self_atari_without_capture(self, ctx: MoveContext) -> bool:
        own = ctx.own_group
        return (
            ctx.valid
            and own is not None
            and own.liberties == 1
            and not ctx.captured
        )

    def _score_fast(self, ctx: MoveContext) -> float:
        score = 0.0
        for before, _after in ctx.rescued_groups:
            score += self.WEIGHT_FAST_SAVE_BASE + before.size * self.WEIGHT_FAST_SAVE_SIZE

        capture = evaluate_capture_opportunity(ctx)
        if capture > 0:
            score += self.WEIGHT_CAPTURE_BASE + capture * self.WEIGHT_CAPTURE_PER_STONE
        atari = evaluate_atari_opportunity(ctx)
        if atari > 0:
            score += self.WEIGHT_FAST_ATARI_BASE + atari * self.WEIGHT_ATARI

        score += evaluate_proximity(ctx) * self.WEIGHT_FAST_PROXIMITY
        score += evaluate_attack_opportunity(ctx) * self.WEIGHT_FAST_ATTACK

        if self._self_atari_without_capture(ctx):
            score = SELF_ATARI_SENTINEL
        elif ctx.own_group is not None:
            libs = ctx.own_group.liberties
            if libs >= 3:
                score += 50
            elif libs == 2:
                score += 30
            elif libs == 1:
                score += 10

        return score * (1 + self.profile.capture_tendency * 0.5)

    def _score_aggressive(self, ctx: MoveContext) -> float:
        score = 0.0
        for before, _after in ctx.rescued_groups:
            score += self.WEIGHT_AGGRO_SAVE_BASE + before.size * self.WEIGHT_AGGRO_SAVE_SIZE

        capture = evaluate_capture_opportunity(ctx)
        if capture > 0:
            score += (
                self.WEIGHT_CAPTURE_BASE
                + capture * self.WEIGHT_AGGRO_CAPTURE_PER_STONE
            )
        score += evaluate_attack_opportunity(ctx) * self.WEIGHT_AGGRO_ATTACK
        score += evaluate_proximity(ctx) * self.WEIGHT_AGGRO_PROXIMITY
        score += evaluate_surround_opportunity(ctx) * self.WEIGHT_AGGRO_SURROUND
        score += evaluate_combat(ctx) * self.WEIGHT_AGGRO_COMBAT

        if self._self_atari_without_capture(ctx):
            score = SELF_ATARI_SENTINEL
        score += evaluate_safety(ctx) * self.WEIGHT_AGGRO_SAFETY

        # Small jitter so the hunter does not always repeat the same shape.
        if self.rng.random() < self.profile.mistake_rate * 0.3:
            score *= 0.95
        return score

    def describe(self) -> dict[str, Any]:
        return {
            "player": self.player.value,
            "level": self.profile.level,
            "mode": self.mode.value,
            "max_branches": self.lookahead.max_branches,
            "max_depth": self.lookahead.max_depth,
        }
