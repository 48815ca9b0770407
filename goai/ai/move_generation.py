"""Candidate move generation.

Two generators share the legality engine:

- :func:`generate_all_moves` checks every empty intersection (levels 4+).
- :func:`generate_fast_moves` only checks empty neighbours of existing
  stones, or a small central window on an empty board. It is used by the
  low levels and by the look-ahead for the opponent's replies. When it finds
  fewer than ``FAST_MIN_CANDIDATES`` legal points it falls back to the full
  scan, so it never misses a legal move that exists.
"""

from __future__ import annotations

from typing import Optional

from ..board_manager import BoardManager
from ..game_engine import GameEngine
from ..models import Board, KoInfo, Point, Stone

__all__ = [
    "FAST_MIN_CANDIDATES",
    "generate_all_moves",
    "generate_fast_moves",
    "generate_moves",
]

FAST_MIN_CANDIDATES = 5


def generate_all_moves(
    board: Board,
    player: Stone,
    ko_info: Optional[KoInfo],
    move_history_length: int,
) -> list[Point]:
    """Every legal point for ``player`` in row-major order."""
    return [
        p
        for p in BoardManager.empty_points(board)
        if GameEngine.is_legal(board, p, player, ko_info, move_history_length)
    ]


def generate_fast_moves(
    board: Board,
    player: Stone,
    ko_info: Optional[KoInfo],
    move_history_length: int,
) -> list[Point]:
    size = len(board)
    occupied = BoardManager.occupied_points(board)
    moves: list[Point] = []

    if occupied:
        checked: set[Point] = set()
        for stone in occupied:
            for n in BoardManager.get_neighbors(stone, size):
                if n in checked or board[n.y][n.x] is not None:
                    continue
                checked.add(n)
                if GameEngine.is_legal(
                    board, n, player, ko_info, move_history_length
                ):
                    moves.append(n)
    else:
        start = max(0, size // 2 - 2)
        end = min(size, size // 2 + 3)
        for y in range(start, end):
            for x in range(start, end):
                p = Point(x, y)
                if GameEngine.is_legal(
                    board, p, player, ko_info, move_history_length
                ):
                    moves.append(p)

    if len(moves) < FAST_MIN_CANDIDATES:
        return generate_all_moves(board, player, ko_info, move_history_length)
    return moves


def generate_moves(
    board: Board,
    player: Stone,
    ko_info: Optional[KoInfo],
    move_history_length: int,
    *,
    fast: bool,
) -> list[Point]:
    if fast:
        return generate_fast_moves(board, player, ko_info, move_history_length)
    return generate_all_moves(board, player, ko_info, move_history_length)
