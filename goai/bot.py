"""
Turn pipeline for the heuristic Go AI.

``GoAIBot.play_turn`` runs one AI turn end to end::

    session -> masked board -> [external engine] -> generator -> scorer
            -> mistake injector -> committer -> SessionDelta

The variant is resolved once here; the scorer and the masking are picked
from the resulting :class:`~goai.session.TurnPolicy`. The only suspension
point is the optional external engine call, bounded by its timeout.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .ai.evaluators import ScoringContext
from .ai.external_engine import ExternalEngineClient, GTPEngineClient, MoveEngine
from .ai.heuristic_ai import HeuristicAI, ScoringMode
from .ai.lookahead import LookAheadEvaluator
from .ai.mistakes import MistakeInjector
from .ai.move_generation import generate_moves
from .ai.profiles import get_skill_profile
from .committer import MoveCommitter
from .config import EngineSettings, get_settings
from .errors import AITimeoutError, ExternalEngineError
from .game_engine import GameEngine, MoveOptions
from .metrics import (
    AI_CANDIDATES_EVALUATED,
    AI_ENGINE_FALLBACKS,
    AI_MISTAKES_INJECTED,
    AI_TURN_OUTCOMES,
    level_label,
)
from .models import (
    Board,
    GameSessionView,
    GameStatus,
    MoveCandidate,
    Point,
    SessionDelta,
    SkillProfile,
    Stone,
)
from .session import (
    TurnPolicy,
    masked_board,
    resolve_variant,
    validate_session,
    visible_history,
)

logger = logging.getLogger(__name__)

__all__ = ["GoAIBot", "SelectionSource", "TurnResult", "build_engine"]


class SelectionSource(str, Enum):
    """Where the committed point came from."""
    EXTERNAL = "external"
    HEURISTIC = "heuristic"
    NONE = "none"


@dataclass
class TurnResult:
    """Outcome of :meth:`GoAIBot.play_turn`.

    ``delta`` is None only when the turn was skipped (a reveal animation is
    still playing).
    """
    delta: Optional[SessionDelta]
    selected_move: Optional[Point]
    source: SelectionSource
    level: int
    thinking_time_ms: int
    is_mistake: bool = False
    candidates: int = 0

    @property
    def skipped(self) -> bool:
        return self.delta is None


def build_engine(settings: EngineSettings) -> Optional[MoveEngine]:
    """External engine configured in ``settings``; HTTP wins over GTP."""
    if settings.external_engine_enabled:
        return ExternalEngineClient(
            settings.external_engine_url, settings.external_engine_timeout_sec
        )
    if settings.gtp_enabled:
        return GTPEngineClient(
            settings.gtp_command, settings.external_engine_timeout_sec
        )
    return None


def _now_ms() -> float:
    return time.time() * 1000


class GoAIBot:
    """Stateless per turn; one instance can serve any number of games."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        engine: Optional[MoveEngine] = None,
        committer: Optional[MoveCommitter] = None,
        clock: Callable[[], float] = _now_ms,
        use_engine: bool = True,
    ):
        self.settings = settings or get_settings()
        if engine is None and use_engine:
            engine = build_engine(self.settings)
        self.engine = engine if use_engine else None
        self.committer = committer or MoveCommitter()
        self.clock = clock

    def build_ai(
        self,
        bot: Stone,
        profile: SkillProfile,
        policy: TurnPolicy,
        seed: Optional[int] = None,
    ) -> HeuristicAI:
        if policy.aggressive_capture:
            mode = ScoringMode.AGGRESSIVE_CAPTURE
        elif profile.level <= self.settings.fast_heuristic_max_level:
            mode = ScoringMode.FAST
        else:
            mode = ScoringMode.PROFILE
        lookahead = LookAheadEvaluator(
            max_branches=self.settings.lookahead_max_branches,
            max_depth=self.settings.lookahead_max_depth,
        )
        return HeuristicAI(
            bot, profile, rng_seed=seed, lookahead=lookahead, mode=mode
        )

    @staticmethod
    def build_scoring_context(
        session: GameSessionView,
        view: Board,
        bot: Stone,
        profile: SkillProfile,
        policy: TurnPolicy,
    ) -> ScoringContext:
        return ScoringContext(
            board=view,
            player=bot,
            profile=profile,
            ko_info=session.ko_info,
            move_history_length=len(session.move_history),
            is_single_player=session.is_single_player,
            capture_mode=policy.capture_mode,
            capture_target=session.capture_target_for(bot),
            captures=session.captures.get(bot, 0),
            opponent_patterns=frozenset(session.patterns_for(bot.opponent)),
        )

    async def play_turn(
        self,
        session: GameSessionView,
        level: int,
        seed: Optional[int] = None,
    ) -> TurnResult:
        start = time.time()
        if session.status == GameStatus.HIDDEN_REVEAL_ANIMATING:
            logger.debug("Reveal animation in progress, skipping AI turn")
            return TurnResult(None, None, SelectionSource.NONE, level, 0)

        validate_session(session)
        bot = session.current_player
        profile = get_skill_profile(level)
        policy = resolve_variant(session, bot)
        view = masked_board(session, bot)
        now = self.clock()

        def finish(
            delta: SessionDelta,
            point: Optional[Point],
            source: SelectionSource,
            is_mistake: bool = False,
            candidates: int = 0,
        ) -> TurnResult:
            AI_TURN_OUTCOMES.labels(delta.outcome.value).inc()
            elapsed = int((time.time() - start) * 1000)
            return TurnResult(
                delta, point, source, profile.level, elapsed, is_mistake, candidates
            )

        if self.engine is not None:
            point = await self._engine_move(session, view, bot, profile.level)
            if point is not None:
                ranked = [MoveCandidate(point=point, score=0.0)]
                delta = self.committer.commit(session, ranked, point, bot, now)
                return finish(delta, point, SelectionSource.EXTERNAL)

        fast = profile.level <= self.settings.fast_heuristic_max_level
        moves = generate_moves(
            view, bot, session.ko_info, len(session.move_history), fast=fast
        )
        if not moves:
            logger.info("No legal moves for %s", bot.value)
            return finish(self.committer.resign(session, bot), None, SelectionSource.NONE)

        ai = self.build_ai(bot, profile, policy, seed)
        scoring = self.build_scoring_context(session, view, bot, profile, policy)
        ranked = ai.rank_moves(scoring, moves)
        AI_CANDIDATES_EVALUATED.observe(len(ranked))

        injector = MistakeInjector(ai.rng, self.settings.mistake_bottom_share)
        decision = injector.select(ranked, profile)
        if decision.is_mistake:
            AI_MISTAKES_INJECTED.labels(level_label(profile.level)).inc()

        logger.debug(
            "Level %d (%s) ranked %d candidates, best %s (%.1f), chose rank %d",
            profile.level, ai.mode.value, len(ranked),
            ranked[0].point, ranked[0].score, decision.index + 1,
        )
        delta = self.committer.commit(
            session, ranked, decision.candidate.point, bot, now
        )
        committed = delta.last_move if delta.last_move is not None else decision.candidate.point
        return finish(
            delta,
            committed,
            SelectionSource.HEURISTIC,
            decision.is_mistake,
            len(ranked),
        )

    async def _engine_move(
        self,
        session: GameSessionView,
        view: Board,
        bot: Stone,
        level: int,
    ) -> Optional[Point]:
        """Engine proposal legal on the true board, or None to fall back."""
        try:
            point = await self.engine.generate_move(
                view, bot, visible_history(session, bot), level
            )
        except AITimeoutError as e:
            AI_ENGINE_FALLBACKS.labels("timeout").inc()
            logger.warning("External engine timed out, using heuristic: %s", e)
            return None
        except ExternalEngineError as e:
            AI_ENGINE_FALLBACKS.labels("error").inc()
            logger.warning("External engine failed, using heuristic: %s", e)
            return None

        options = MoveOptions(
            is_single_player=session.is_single_player,
            opponent_player=bot.opponent if session.is_single_player else None,
        )
        result = GameEngine.process_move(
            session.board,
            point,
            bot,
            session.ko_info,
            len(session.move_history),
            options,
        )
        if not result.is_valid:
            AI_ENGINE_FALLBACKS.labels("illegal").inc()
            logger.warning(
                "External engine proposed illegal move (%d, %d): %s; "
                "using heuristic",
                point.x, point.y, result.reason,
            )
            return None
        return point
