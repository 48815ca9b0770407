"""
Move committer: turns a chosen point into a :class:`SessionDelta`.

The committer is the last line of defence between the scorer and the live
game. Scoring runs on the bot's perceived (masked) board; everything here
runs on the true board:

1. Guard against placing onto a visible opponent stone (single-player).
2. Intercept plays onto an unrevealed opponent hidden stone: reveal it
   instead of moving.
3. Re-validate through :meth:`GameEngine.process_move`, falling back down
   the ranking, and resign when nothing is legal.
4. Score captures, or withhold them behind a reveal when hidden stones are
   involved.
5. Check capture-limit wins, update the clock, trigger auto-scoring and
   switch the turn.

Times are epoch milliseconds (``now``, deadlines) and seconds (time left).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from .board_manager import BoardManager
from .game_engine import GameEngine, MoveOptions, MoveResult
from .models import (
    CapturedStone,
    DeltaOutcome,
    GameSessionView,
    GameStatus,
    GameVariant,
    MoveCandidate,
    MoveRecord,
    PendingCapture,
    Point,
    RevealAnimation,
    RevealedStone,
    SessionDelta,
    Stone,
)
from .session import hidden_stone_points, resolve_variant

logger = logging.getLogger(__name__)

__all__ = [
    "HIDDEN_CAPTURE_POINTS",
    "MoveCommitter",
    "PATTERN_CAPTURE_POINTS",
    "REVEAL_ANIMATION_MS",
    "WIN_REASON_CAPTURE_LIMIT",
    "WIN_REASON_RESIGN",
]

REVEAL_ANIMATION_MS = 2000

PATTERN_CAPTURE_POINTS = 2
HIDDEN_CAPTURE_POINTS = 5

WIN_REASON_CAPTURE_LIMIT = "capture_limit"
WIN_REASON_RESIGN = "resign"


class MoveCommitter:
    """Builds exactly one delta per AI turn. Holds no state between turns."""

    def resign(self, session: GameSessionView, bot: Stone) -> SessionDelta:
        logger.info(
            "AI (%s) resigns after %d moves", bot.value, len(session.move_history)
        )
        return SessionDelta(
            outcome=DeltaOutcome.RESIGN,
            status=GameStatus.ENDED,
            winner=bot.opponent,
            win_reason=WIN_REASON_RESIGN,
        )

    def commit(
        self,
        session: GameSessionView,
        ranked: Sequence[MoveCandidate],
        selected: Point,
        bot: Stone,
        now: float,
    ) -> SessionDelta:
        board = session.board
        opponent = bot.opponent
        policy = resolve_variant(session, bot)
        hidden_points = hidden_stone_points(session)
        revealed = set(session.permanently_revealed)

        def unrevealed_hidden_opponent(point: Point) -> bool:
            return (
                policy.mask_hidden
                and hidden_points.get(point) == opponent
                and point not in revealed
                and BoardManager.stone_at(board, point) == opponent
            )

        target = selected
        if (
            session.is_single_player
            and BoardManager.stone_at(board, target) == opponent
            and not unrevealed_hidden_opponent(target)
        ):
            logger.error(
                "AI selected (%d, %d) which holds an opponent stone",
                target.x, target.y,
            )
            replacement = next(
                (
                    c.point
                    for c in ranked
                    if BoardManager.stone_at(board, c.point) != opponent
                ),
                None,
            )
            if replacement is None:
                return self.resign(session, bot)
            target = replacement

        if unrevealed_hidden_opponent(target):
            return self._reveal_target(session, target, opponent, now)

        placed = self._place(session, ranked, target, bot)
        if placed is None:
            return self.resign(session, bot)
        point, result = placed

        history = list(session.move_history)
        history.append(MoveRecord(x=point.x, y=point.y, player=bot))
        total_turns = sum(1 for m in history if not m.is_pass)

        updates: dict[str, Any] = {
            "board": result.new_board,
            "last_move": point,
            "move_history": history,
            "ko_info": result.new_ko_info,
            "pass_count": 0,
            "total_turns": total_turns,
        }

        if result.captured_stones and policy.mask_hidden:
            reveal = self._hidden_capture_reveal(
                session, result, point, bot, hidden_points, revealed, now
            )
            if reveal is not None:
                updates.update(reveal)
                return SessionDelta(
                    outcome=DeltaOutcome.REVEAL,
                    captured_stones=result.captured_stones,
                    **updates,
                )

        captures = dict(session.captures)
        if result.captured_stones:
            updates.update(
                self._score_captures(session, result, bot, hidden_points, captures)
            )

        win = self._check_capture_win(session, bot, captures, policy.variant)
        if "white_turns_played" in win:
            updates["white_turns_played"] = win.pop("white_turns_played")
        if win:
            updates.update(win)
            logger.info(
                "Game ended by capture limit: winner=%s", win["winner"].value
            )
            return SessionDelta(
                outcome=DeltaOutcome.WIN,
                captured_stones=result.captured_stones,
                **updates,
            )

        if session.turn_deadline is not None:
            time_left = dict(session.time_left)
            time_left[bot] = max(0.0, (session.turn_deadline - now) / 1000)
            updates["time_left"] = time_left

        if (
            session.auto_scoring_turns
            and total_turns >= session.auto_scoring_turns
        ):
            logger.info(
                "Auto-scoring triggered at %d turns (limit %d)",
                total_turns, session.auto_scoring_turns,
            )
            updates["status"] = GameStatus.SCORING
            return SessionDelta(
                outcome=DeltaOutcome.MOVE,
                captured_stones=result.captured_stones,
                **updates,
            )

        updates.update(self._switch_turn(session, bot, updates, now))
        return SessionDelta(
            outcome=DeltaOutcome.MOVE,
            captured_stones=result.captured_stones,
            **updates,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _place(
        self,
        session: GameSessionView,
        ranked: Sequence[MoveCandidate],
        target: Point,
        bot: Stone,
    ) -> Optional[tuple[Point, MoveResult]]:
        """Play ``target`` on the true board, else the best re-validated candidate."""
        board = session.board
        opponent = bot.opponent
        hist = len(session.move_history)
        options = MoveOptions(
            is_single_player=session.is_single_player,
            opponent_player=opponent if session.is_single_player else None,
        )

        result = GameEngine.process_move(
            board, target, bot, session.ko_info, hist, options
        )
        if result.is_valid:
            return target, result

        logger.error(
            "Selected move (%d, %d) is illegal on the true board: %s",
            target.x, target.y, result.reason,
        )
        for candidate in ranked:
            point = candidate.point
            if session.is_single_player and BoardManager.stone_at(board, point) == opponent:
                continue
            result = GameEngine.process_move(
                board, point, bot, session.ko_info, hist, options
            )
            if result.is_valid:
                logger.info(
                    "Replaced illegal move with (%d, %d)", point.x, point.y
                )
                return point, result

        logger.warning("No legal fallback move available")
        return None

    def _reveal_target(
        self,
        session: GameSessionView,
        target: Point,
        owner: Stone,
        now: float,
    ) -> SessionDelta:
        """The bot tried to play onto a hidden stone: reveal it, place nothing."""
        logger.info(
            "AI move onto hidden %s stone at (%d, %d) revealed it",
            owner.value, target.x, target.y,
        )
        revealed = list(session.permanently_revealed)
        if target not in revealed:
            revealed.append(target)

        patterns = {
            colour: [p for p in points if p != target]
            for colour, points in session.pattern_stones.items()
        }
        patterns.setdefault(owner, [])
        patterns.setdefault(owner.opponent, [])
        patterns[owner].append(target)

        updates: dict[str, Any] = {
            "permanently_revealed": revealed,
            "pattern_stones": patterns,
            "animation": RevealAnimation(
                stones=[RevealedStone(point=target, player=owner)],
                start_time=now,
                duration=REVEAL_ANIMATION_MS,
            ),
            "reveal_animation_end_time": now + REVEAL_ANIMATION_MS,
            "status": GameStatus.HIDDEN_REVEAL_ANIMATING,
            "is_ai_turn_cancelled_after_reveal": True,
        }
        updates.update(self._pause_clock(session, now))
        return SessionDelta(outcome=DeltaOutcome.REVEAL, **updates)

    @staticmethod
    def _pause_clock(session: GameSessionView, now: float) -> dict[str, Any]:
        if session.turn_deadline is None:
            return {}
        return {
            "paused_turn_time_left": (session.turn_deadline - now) / 1000,
            "turn_deadline": None,
        }

    def _hidden_capture_reveal(
        self,
        session: GameSessionView,
        result: MoveResult,
        point: Point,
        bot: Stone,
        hidden_points: dict[Point, Stone],
        revealed: set[Point],
        now: float,
    ) -> Optional[dict[str, Any]]:
        """Withhold a capture that exposes unrevealed hidden stones.

        Contributors are the bot's own unrevealed hidden stones touching a
        captured stone; the newly placed stone never counts.
        """
        size = session.board_size
        new_board = result.new_board
        contributors: list[Point] = []
        seen: set[Point] = set()
        for stone in result.captured_stones:
            for n in BoardManager.get_neighbors(stone, size):
                if n in seen or n == point:
                    continue
                seen.add(n)
                if (
                    new_board[n.y][n.x] == bot
                    and hidden_points.get(n) == bot
                    and n not in revealed
                ):
                    contributors.append(n)

        captured_hidden = [
            stone
            for stone in result.captured_stones
            if hidden_points.get(stone) == bot.opponent and stone not in revealed
        ]
        if not contributors and not captured_hidden:
            return None

        to_reveal: list[RevealedStone] = []
        for p in contributors:
            to_reveal.append(RevealedStone(point=p, player=bot))
        for p in captured_hidden:
            if p not in contributors:
                to_reveal.append(RevealedStone(point=p, player=bot.opponent))

        revealed_list = list(session.permanently_revealed)
        for s in to_reveal:
            if s.point not in revealed_list:
                revealed_list.append(s.point)

        logger.info(
            "Capture at (%d, %d) reveals %d hidden stones",
            point.x, point.y, len(to_reveal),
        )
        updates: dict[str, Any] = {
            "status": GameStatus.HIDDEN_REVEAL_ANIMATING,
            "animation": RevealAnimation(
                stones=to_reveal,
                start_time=now,
                duration=REVEAL_ANIMATION_MS,
            ),
            "reveal_animation_end_time": now + REVEAL_ANIMATION_MS,
            "pending_capture": PendingCapture(
                stones=result.captured_stones,
                move=point,
                hidden_contributors=contributors,
                captured_hidden_stones=captured_hidden,
            ),
            "permanently_revealed": revealed_list,
        }
        updates.update(self._pause_clock(session, now))
        return updates

    def _score_captures(
        self,
        session: GameSessionView,
        result: MoveResult,
        bot: Stone,
        hidden_points: dict[Point, Stone],
        captures: dict[Stone, int],
    ) -> dict[str, Any]:
        """Pattern stones score 2, hidden stones 5, anything else 1."""
        opponent_patterns = set(session.patterns_for(bot.opponent))
        hidden_captures = dict(session.hidden_stone_captures)
        just_captured = list(session.just_captured)

        for stone in result.captured_stones:
            was_hidden = hidden_points.get(stone) == bot.opponent
            if stone in opponent_patterns:
                points = PATTERN_CAPTURE_POINTS
            elif was_hidden:
                points = HIDDEN_CAPTURE_POINTS
            else:
                points = 1
            captures[bot] = captures.get(bot, 0) + points
            if was_hidden:
                hidden_captures[bot] = hidden_captures.get(bot, 0) + 1
            just_captured.append(
                CapturedStone(point=stone, player=bot.opponent, was_hidden=was_hidden)
            )

        return {
            "captures": captures,
            "hidden_stone_captures": hidden_captures,
            "just_captured": just_captured,
        }

    @staticmethod
    def _check_capture_win(
        session: GameSessionView,
        bot: Stone,
        captures: dict[Stone, int],
        variant: GameVariant,
    ) -> dict[str, Any]:
        if variant == GameVariant.SURVIVAL and bot == Stone.WHITE:
            white_turns = session.white_turns_played + 1
            out: dict[str, Any] = {"white_turns_played": white_turns}
            if session.survival_turns > 0 and session.status == GameStatus.PLAYING:
                target = session.capture_target_for(Stone.WHITE)
                if target is not None and captures.get(Stone.WHITE, 0) >= target:
                    out.update(_win(Stone.WHITE))
                elif session.survival_turns - white_turns <= 0:
                    out.update(_win(Stone.BLACK))
            return out

        if session.is_single_player or variant == GameVariant.CAPTURE_TARGET:
            target = session.capture_target_for(bot)
            if target is not None and captures.get(bot, 0) >= target:
                return _win(bot)
        return {}

    @staticmethod
    def _switch_turn(
        session: GameSessionView,
        bot: Stone,
        updates: dict[str, Any],
        now: float,
    ) -> dict[str, Any]:
        if session.is_ai_re_turn_after_reveal:
            return {"is_ai_re_turn_after_reveal": False}

        next_player = bot.opponent
        out: dict[str, Any] = {"current_player": next_player}
        clock = session.time_control
        if clock.time_limit > 0:
            time_left = updates.get("time_left", session.time_left)
            remaining = time_left.get(next_player, clock.time_limit)
            if remaining <= 0 and clock.byoyomi_count > 0 and not clock.fischer:
                out["turn_deadline"] = now + clock.byoyomi_time * 1000
            else:
                out["turn_deadline"] = now + remaining * 1000
        else:
            out["turn_deadline"] = None
        return out


def _win(winner: Stone) -> dict[str, Any]:
    return {
        "status": GameStatus.ENDED,
        "winner": winner,
        "win_reason": WIN_REASON_CAPTURE_LIMIT,
    }
