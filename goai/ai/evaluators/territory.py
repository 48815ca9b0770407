"""
Territory evaluators.

Territory here is local and heuristic: how a placement guards the boundary
against the opponent, extends or blocks frameworks in the 3x3 block around
it, and whether it wastes a move inside already-enclosed space. The
``territory_strategy`` term is gated by level so that weak bots chase large
empty regions while strong bots weigh expansion against blocking.

All evaluators read the board as the bot perceives it (hidden opponent
stones masked out by the caller).
"""

from __future__ import annotations

import math
from collections import deque

from ...board_manager import BoardManager
from ...models import Board, Point, Stone
from .context import MoveContext, match_group
from .positional import evaluate_combat

__all__ = [
    "evaluate_defensive_direction",
    "evaluate_endgame",
    "evaluate_large_territory",
    "evaluate_opponent_territory_block",
    "evaluate_territory",
    "evaluate_territory_and_combat",
    "evaluate_territory_expansion",
    "evaluate_territory_strategy",
]


def _edge_line(point: Point, size: int) -> int:
    """1 for the edge row, 2 for the next one in, and so on."""
    return min(point.x, point.y, size - 1 - point.x, size - 1 - point.y) + 1


def evaluate_defensive_direction(ctx: MoveContext) -> float:
    """Which line a defensive move should be played on, by level.

    Up to level 3 the line does not matter; mid levels prefer the 2nd-3rd
    line; level 7+ prefers the 3rd-4th line and central points.
    """
    size = ctx.size
    level = ctx.scoring.level
    line = _edge_line(ctx.point, size)

    if level <= 3:
        return 0.0
    if level <= 6:
        if line == 1:
            return -1.0
        if 2 <= line <= 3:
            return 1.0
        return 0.5

    half = size / 2
    distance = math.hypot(ctx.point.x - half, ctx.point.y - half)
    centrality = 1.0 - distance / math.sqrt(half * half * 2)
    if line == 1:
        score = -3.0
    elif line == 2:
        score = -1.0
    elif line <= 4:
        score = 3.0
    else:
        score = 1.0
    return score + centrality * 2.0


def evaluate_territory(ctx: MoveContext) -> float:
    """Boundary defence versus filling own territory.

    A move is defensive when it touches an opponent stone or an empty point
    that does. Defensive moves score 5 and up; filling an enclosed own area
    is penalised.
    """
    board = ctx.board
    size = ctx.size
    point = ctx.point
    player, opponent = ctx.player, ctx.opponent

    own_orth = empty_orth = opp_orth = 0
    defensive = False
    for n in ctx.neighbors():
        cell = board[n.y][n.x]
        if cell is None:
            empty_orth += 1
            if any(
                board[m.y][m.x] == opponent
                for m in BoardManager.get_neighbors(n, size)
            ):
                defensive = True
        elif cell == player:
            own_orth += 1
        else:
            opp_orth += 1
            defensive = True

    own_around = empty_around = opp_around = 0
    for n in BoardManager.get_surrounding(point, size):
        cell = board[n.y][n.x]
        if cell == player:
            own_around += 1
        elif cell is None:
            empty_around += 1
        else:
            opp_around += 1
    filling = own_around >= 4 and empty_around == 0 and opp_around == 0

    score = 0.0
    if defensive:
        score += 5.0 + opp_orth * 2.0
        for group in ctx.scoring.opponent_groups:
            if any(
                abs(point.x - s.x) + abs(point.y - s.y) <= 2
                for s in group.stones
            ):
                score += 1.0
    elif filling:
        score -= 15.0
    elif own_orth >= 3 and empty_orth == 0:
        score -= 10.0
    elif own_orth >= 2:
        score += 0.5
    else:
        score += 1.0

    if not defensive:
        on_x_edge = point.x in (0, size - 1)
        on_y_edge = point.y in (0, size - 1)
        if on_x_edge and on_y_edge:
            score += 2.0
        elif on_x_edge or on_y_edge:
            score += 1.0
    return score


def evaluate_territory_expansion(board: Board, point: Point, player: Stone) -> float:
    size = len(board)
    own = empty = 0
    for n in BoardManager.get_surrounding(point, size):
        cell = board[n.y][n.x]
        if cell == player:
            own += 1
        elif cell is None:
            empty += 1
    if own >= 2 and empty >= 3:
        return 5.0
    if own >= 1 and empty >= 2:
        return 2.0
    return 0.0


def evaluate_opponent_territory_block(
    board: Board, point: Point, player: Stone
) -> float:
    size = len(board)
    opponent = player.opponent
    opp = 0
    empty = 0.0
    for n in BoardManager.get_surrounding(point, size):
        cell = board[n.y][n.x]
        if cell == opponent:
            opp += 1
        elif cell is None:
            empty += 1
            # Empty points the opponent could grow into weigh more.
            if any(
                board[m.y][m.x] == opponent
                for m in BoardManager.get_neighbors(n, size)
            ):
                empty += 0.5
    if opp >= 1 and empty >= 2:
        return 5.0
    if opp >= 1 and empty >= 1:
        return 2.0
    return 0.0


def evaluate_large_territory(board: Board, point: Point, player: Stone) -> float:
    """Size of the own-plus-uncontested area reachable from ``point``."""
    size = len(board)
    visited = {point}
    queue = deque([point])
    area = 0
    while queue:
        current = queue.popleft()
        for n in BoardManager.get_neighbors(current, size):
            if n in visited:
                continue
            visited.add(n)
            cell = board[n.y][n.x]
            if cell == player:
                area += 1
                queue.append(n)
            elif cell is None:
                area += 1
                if all(
                    board[m.y][m.x] in (None, player)
                    for m in BoardManager.get_neighbors(n, size)
                ):
                    queue.append(n)
    if area >= 10:
        return 10.0
    if area >= 5:
        return 5.0
    return 0.0


def evaluate_territory_strategy(ctx: MoveContext) -> float:
    """Level-gated framework play, already weighted."""
    board = BoardManager.copy_board(ctx.board)
    board[ctx.point.y][ctx.point.x] = ctx.player
    level = ctx.scoring.level

    if level >= 7:
        expansion = evaluate_territory_expansion(board, ctx.point, ctx.player)
        block = evaluate_opponent_territory_block(board, ctx.point, ctx.player)
        if block > 0 and expansion > 0:
            return (block + expansion) * 300
        if block > 0:
            return block * 200
        return expansion * 150
    if level >= 4:
        expansion = evaluate_territory_expansion(board, ctx.point, ctx.player)
        block = evaluate_opponent_territory_block(board, ctx.point, ctx.player)
        return expansion * 200 + block * 200
    if level >= 2:
        return evaluate_large_territory(board, ctx.point, ctx.player) * 150
    return 0.0


def evaluate_territory_and_combat(ctx: MoveContext) -> float:
    territory = evaluate_territory(ctx)
    combat = evaluate_combat(ctx)
    score = territory * 0.6 + combat * 0.4
    if combat > 0:
        score += 1.0
    return score


def _empty_neighbours(board: Board, stones) -> int:
    size = len(board)
    empties = set()
    for s in stones:
        for n in BoardManager.get_neighbors(s, size):
            if board[n.y][n.x] is None:
                empties.add(n)
    return len(empties)


def evaluate_endgame(ctx: MoveContext) -> float:
    """Boundary play: keep own liberties open and shrink opponent space."""
    if not ctx.valid:
        return 0.0
    score = 0.0
    board_after = ctx.sim.new_board
    own = ctx.own_group
    if own is not None:
        score += _empty_neighbours(board_after, own.stones) * 0.5

    for after in ctx.opponent_groups_after:
        before = match_group(after, ctx.scoring.opponent_groups)
        if before is None:
            continue
        lost = (
            _empty_neighbours(ctx.board, before.stones)
            - _empty_neighbours(board_after, after.stones)
        )
        if lost > 0:
            score += lost * 0.8
    return score
