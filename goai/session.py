"""
Session helpers around :class:`~goai.models.GameSessionView`.

The AI engine never mutates a session. It reads a snapshot, perceives it
through :func:`masked_board`, and returns a :class:`~goai.models.SessionDelta`
that :func:`apply_delta` turns into the next snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .board_manager import BoardManager
from .errors import InvalidStateError
from .models import (
    Board,
    GameSessionView,
    GameVariant,
    MoveRecord,
    Point,
    SessionDelta,
    Stone,
)

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_BOARD_SIZE",
    "TurnPolicy",
    "apply_delta",
    "hidden_stone_points",
    "is_unrevealed_hidden",
    "masked_board",
    "resolve_variant",
    "validate_session",
    "visible_history",
]

# GTP coordinates only cover 19 columns.
MAX_BOARD_SIZE = 19


@dataclass(frozen=True)
class TurnPolicy:
    """Variant-dependent choices for one AI turn."""
    variant: GameVariant
    mask_hidden: bool
    aggressive_capture: bool
    capture_mode: bool


def resolve_variant(session: GameSessionView, bot: Stone) -> TurnPolicy:
    variant = session.variant
    return TurnPolicy(
        variant=variant,
        mask_hidden=variant == GameVariant.HIDDEN and session.is_single_player,
        aggressive_capture=variant == GameVariant.SURVIVAL and bot == Stone.WHITE,
        capture_mode=variant in (GameVariant.CAPTURE_TARGET, GameVariant.SURVIVAL),
    )


def validate_session(session: GameSessionView) -> None:
    """Raise :class:`InvalidStateError` for snapshots normal play cannot produce."""
    size = session.board_size
    if size < 2 or size > MAX_BOARD_SIZE:
        raise InvalidStateError(
            "Unsupported board size", context={"size": size}
        )
    for y, row in enumerate(session.board):
        if len(row) != size:
            raise InvalidStateError(
                "Board is not square",
                context={"row": y, "length": len(row), "size": size},
            )
    if session.ko_info is not None and not BoardManager.is_on_board(
        session.ko_info.point, size
    ):
        raise InvalidStateError(
            "Ko point outside the board",
            context={"point": session.ko_info.point.to_key()},
        )


def _latest_placements(session: GameSessionView) -> dict[Point, int]:
    latest: dict[Point, int] = {}
    for index, move in enumerate(session.move_history):
        if not move.is_pass:
            latest[move.point] = index
    return latest


def hidden_stone_points(session: GameSessionView) -> dict[Point, Stone]:
    """Points whose latest placement was a hidden move, mapped to its colour.

    A hidden stone that was captured and replaced by a later move no longer
    counts.
    """
    points: dict[Point, Stone] = {}
    history = session.move_history
    latest = _latest_placements(session)
    for index, is_hidden in session.hidden_moves.items():
        if not is_hidden or not 0 <= index < len(history):
            continue
        move = history[index]
        if not move.is_pass and latest.get(move.point) == index:
            points[move.point] = move.player
    return points


def is_unrevealed_hidden(session: GameSessionView, point: Point) -> bool:
    """A hidden stone still standing at ``point`` that nobody has revealed."""
    if point in session.permanently_revealed:
        return False
    owner = hidden_stone_points(session).get(point)
    return owner is not None and BoardManager.stone_at(session.board, point) == owner


def _masked_indices(session: GameSessionView, bot: Stone) -> set[int]:
    """History indices of opponent hidden moves ``bot`` must not see."""
    if not resolve_variant(session, bot).mask_hidden:
        return set()

    opponent = bot.opponent
    revealed = set(session.permanently_revealed)
    known = session.ai_known_hidden
    history = session.move_history
    indices: set[int] = set()
    for index, is_hidden in session.hidden_moves.items():
        if not is_hidden or not 0 <= index < len(history):
            continue
        move = history[index]
        if move.player != opponent or move.is_pass:
            continue
        if known is not None and not known.get(index, True):
            continue
        if move.point in revealed:
            continue
        indices.add(index)
    return indices


def masked_board(session: GameSessionView, bot: Stone) -> Board:
    """The board as ``bot`` perceives it.

    Only the single-player hidden variant hides anything: opponent hidden
    stones the bot does not know about and nobody has revealed are blanked.
    ``ai_known_hidden`` narrows which hidden moves count; when absent every
    hidden move is assumed known to the masking.
    """
    board = BoardManager.copy_board(session.board)
    indices = _masked_indices(session, bot)
    if not indices:
        return board

    opponent = bot.opponent
    latest = _latest_placements(session)
    masked = 0
    for index in indices:
        point = session.move_history[index].point
        if latest.get(point) != index:
            continue
        if BoardManager.stone_at(board, point) == opponent:
            board[point.y][point.x] = None
            masked += 1

    if masked:
        logger.debug("Masked %d hidden %s stones", masked, opponent.value)
    return board


def visible_history(session: GameSessionView, bot: Stone) -> list[MoveRecord]:
    """Move history without the moves :func:`masked_board` hides from ``bot``."""
    indices = _masked_indices(session, bot)
    return [
        move for index, move in enumerate(session.move_history)
        if index not in indices
    ]


def apply_delta(session: GameSessionView, delta: SessionDelta) -> GameSessionView:
    """Next snapshot: ``session`` with the fields ``delta`` set replaced."""
    return session.model_copy(update=delta.session_updates(), deep=True)
