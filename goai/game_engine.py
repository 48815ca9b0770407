"""
Move legality and capture resolution for Go.

``GameEngine.process_move`` is the only place in the service that decides
whether a stone may be placed and which stones it removes. Move generation,
every evaluator, the look-ahead and the session committer all go through it,
so ko and suicide handling stays identical under recursive simulation.

The input board is never mutated; a valid result carries a fresh board.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .board_manager import BoardManager
from .errors import IllegalMoveError
from .models import Board, KoInfo, Point, Stone

logger = logging.getLogger(__name__)

__all__ = ["GameEngine", "MoveOptions", "MoveResult"]

REASON_OCCUPIED = "occupied"
REASON_KO = "ko"
REASON_SUICIDE = "suicide"


@dataclass(frozen=True)
class MoveOptions:
    """Flags for :meth:`GameEngine.process_move`.

    ``ignore_suicide`` is used by simulations that want the resulting
    position even when the mover's group would have no liberties.
    """
    ignore_suicide: bool = False
    is_single_player: bool = False
    opponent_player: Optional[Stone] = None


@dataclass
class MoveResult:
    is_valid: bool
    new_board: Board
    captured_stones: list[Point] = field(default_factory=list)
    new_ko_info: Optional[KoInfo] = None
    reason: Optional[str] = None


_DEFAULT_OPTIONS = MoveOptions()


class GameEngine:
    """Stateless rules engine."""

    @staticmethod
    def process_move(
        board: Board,
        point: Point,
        player: Stone,
        ko_info: Optional[KoInfo],
        move_history_length: int,
        options: MoveOptions = _DEFAULT_OPTIONS,
    ) -> MoveResult:
        """Try to place ``player`` at ``point``.

        Checks run in order: bounds/occupancy, ko, capture of adjacent
        opponent groups left without liberties, then suicide. A ko is
        created when exactly one stone was captured by a lone stone that is
        left with a single liberty; it forbids the recapture on the next
        move index.
        """
        size = len(board)
        if not BoardManager.is_on_board(point, size):
            return MoveResult(False, board, [], ko_info, REASON_OCCUPIED)

        occupant = board[point.y][point.x]
        if occupant is not None:
            if (
                options.is_single_player
                and options.opponent_player is not None
                and occupant == options.opponent_player
            ):
                logger.error(
                    "Rejected placement onto an opponent stone at (%d, %d) "
                    "by %s in single-player mode",
                    point.x, point.y, player.value,
                )
            return MoveResult(False, board, [], ko_info, REASON_OCCUPIED)

        if (
            ko_info is not None
            and ko_info.point == point
            and ko_info.turn == move_history_length
        ):
            return MoveResult(False, board, [], ko_info, REASON_KO)

        opponent = player.opponent
        new_board = BoardManager.copy_board(board)
        new_board[point.y][point.x] = player

        captured: list[Point] = []
        single_capture: Optional[Point] = None
        checked: set[Point] = set()
        for n in BoardManager.get_neighbors(point, size):
            if new_board[n.y][n.x] != opponent or n in checked:
                continue
            group = BoardManager.find_group(new_board, n, opponent)
            if group is None:
                continue
            checked.update(group.stones)
            if group.liberties == 0:
                captured.extend(group.stones)
                if group.size == 1:
                    single_capture = group.stones[0]

        for stone in captured:
            new_board[stone.y][stone.x] = None

        my_group = BoardManager.find_group(new_board, point, player)
        if (
            not options.ignore_suicide
            and my_group is not None
            and my_group.liberties == 0
        ):
            return MoveResult(False, board, [], ko_info, REASON_SUICIDE)

        new_ko: Optional[KoInfo] = None
        if (
            my_group is not None
            and len(captured) == 1
            and my_group.size == 1
            and my_group.liberties == 1
            and single_capture is not None
        ):
            new_ko = KoInfo(point=single_capture, turn=move_history_length + 1)

        return MoveResult(True, new_board, captured, new_ko, None)

    @staticmethod
    def is_legal(
        board: Board,
        point: Point,
        player: Stone,
        ko_info: Optional[KoInfo],
        move_history_length: int,
    ) -> bool:
        return GameEngine.process_move(
            board, point, player, ko_info, move_history_length
        ).is_valid

    @staticmethod
    def apply_move_or_raise(
        board: Board,
        point: Point,
        player: Stone,
        ko_info: Optional[KoInfo],
        move_history_length: int,
        options: MoveOptions = _DEFAULT_OPTIONS,
    ) -> MoveResult:
        """Like :meth:`process_move` but raises on an illegal move."""
        result = GameEngine.process_move(
            board, point, player, ko_info, move_history_length, options
        )
        if not result.is_valid:
            raise IllegalMoveError(
                f"Illegal move for {player.value}: {result.reason}",
                reason=result.reason,
                point=(point.x, point.y),
            )
        return result
