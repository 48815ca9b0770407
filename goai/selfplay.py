"""
Self-play ladder matches between adjacent skill levels.

Level k should beat level k-1 more often than not. This module plays the
two levels against each other with alternating colours and reports the win
rate of the stronger one. It drives the same :class:`~goai.bot.GoAIBot`
pipeline as live games (with the external engine disabled) and applies
each delta with :func:`~goai.session.apply_delta`.

Games end by resignation, a capture-limit win, or after ``max_moves``
placements, at which point the board is area-scored with ``komi`` for
White.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from .board_manager import BoardManager
from .bot import GoAIBot
from .config import EngineSettings, get_settings
from .models import DeltaOutcome, GameSessionView, GameStatus, Stone
from .session import apply_delta

logger = logging.getLogger(__name__)

__all__ = ["GameRecord", "MatchResult", "play_game", "run_ladder_match"]


@dataclass
class GameRecord:
    winner: Optional[Stone]
    moves: int
    reason: str
    score: dict[Stone, float] = field(default_factory=dict)


@dataclass
class MatchResult:
    strong_level: int
    weak_level: int
    wins: int = 0
    losses: int = 0
    draws: int = 0
    total_moves: int = 0
    games: list[GameRecord] = field(default_factory=list)

    @property
    def played(self) -> int:
        return len(self.games)

    @property
    def win_rate(self) -> float:
        return self.wins / self.played if self.played > 0 else 0.0

    @property
    def avg_moves(self) -> float:
        return self.total_moves / self.played if self.played > 0 else 0.0


async def play_game(
    bot: GoAIBot,
    black_level: int,
    white_level: int,
    board_size: int = 9,
    max_moves: int = 150,
    komi: float = 6.5,
    seed: int = 0,
) -> GameRecord:
    """Play one game between two levels and return its result."""
    session = GameSessionView(board=BoardManager.empty_board(board_size))
    levels = {Stone.BLACK: black_level, Stone.WHITE: white_level}
    moves = 0

    while moves < max_moves and session.status == GameStatus.PLAYING:
        player = session.current_player
        result = await bot.play_turn(
            session, levels[player], seed=seed + moves
        )
        delta = result.delta
        if delta is None:
            break
        session = apply_delta(session, delta)
        if delta.outcome in (DeltaOutcome.RESIGN, DeltaOutcome.WIN):
            return GameRecord(
                winner=session.winner,
                moves=moves,
                reason=session.win_reason or delta.outcome.value,
            )
        moves += 1

    raw = BoardManager.area_score(session.board, session.captures)
    score = {Stone.BLACK: float(raw[Stone.BLACK]),
             Stone.WHITE: raw[Stone.WHITE] + komi}
    if score[Stone.BLACK] > score[Stone.WHITE]:
        winner: Optional[Stone] = Stone.BLACK
    elif score[Stone.WHITE] > score[Stone.BLACK]:
        winner = Stone.WHITE
    else:
        winner = None
    return GameRecord(winner=winner, moves=moves, reason="score", score=score)


async def _run_match(
    strong_level: int,
    games: int,
    board_size: int,
    max_moves: int,
    komi: float,
    seed: int,
    settings: EngineSettings,
) -> MatchResult:
    weak_level = strong_level - 1
    result = MatchResult(strong_level=strong_level, weak_level=weak_level)
    bot = GoAIBot(settings=settings, use_engine=False)

    for i in range(games):
        strong_is_black = i % 2 == 0
        black, white = (
            (strong_level, weak_level) if strong_is_black
            else (weak_level, strong_level)
        )
        record = await play_game(
            bot, black, white, board_size, max_moves, komi, seed + i * 10_000
        )
        result.games.append(record)
        result.total_moves += record.moves

        strong_colour = Stone.BLACK if strong_is_black else Stone.WHITE
        if record.winner is None:
            result.draws += 1
        elif record.winner == strong_colour:
            result.wins += 1
        else:
            result.losses += 1
        logger.info(
            "Game %d/%d: L%d (black) vs L%d (white) -> %s by %s in %d moves",
            i + 1, games, black, white,
            record.winner.value if record.winner else "draw",
            record.reason, record.moves,
        )

    return result


def run_ladder_match(
    strong_level: int,
    games: int = 10,
    board_size: int = 9,
    max_moves: int = 150,
    komi: float = 6.5,
    seed: int = 0,
    settings: Optional[EngineSettings] = None,
) -> MatchResult:
    """Play ``strong_level`` against ``strong_level - 1``."""
    if not 2 <= strong_level <= 10:
        raise ValueError("strong_level must be within 2-10")
    if games < 1:
        raise ValueError("games must be positive")
    return asyncio.run(
        _run_match(
            strong_level,
            games,
            board_size,
            max_moves,
            komi,
            seed,
            settings or get_settings(),
        )
    )
