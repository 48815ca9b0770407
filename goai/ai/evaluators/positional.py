"""
Positional evaluators: shape, opening lines and where the fight is.

These terms are small compared to the tactical ones and mostly decide
between otherwise quiet moves. ``fuseki`` and ``joseki`` only look at the
coordinates; ``combat``, ``movement`` and ``proximity`` look at the stones
around the point on the bot's view of the board.
"""

from __future__ import annotations

from ...models import Point
from .context import MoveContext

__all__ = [
    "evaluate_combat",
    "evaluate_directional_attack",
    "evaluate_fuseki",
    "evaluate_joseki",
    "evaluate_life_death",
    "evaluate_life_death_advanced",
    "evaluate_movement",
    "evaluate_movement_advanced",
    "evaluate_proximity",
    "evaluate_win_focus",
    "is_joseki_point",
]

# Minimum Manhattan distance to an opponent stone -> score
_PROXIMITY_SCORES = {1: 2.0, 2: 1.5, 3: 1.0, 4: 0.5}

FUSEKI_MOVE_LIMIT = 50


def _star_lines(size: int) -> set[int]:
    return {2, 3, size - 3, size - 4}


def is_joseki_point(point: Point, size: int) -> bool:
    """3-3, 3-4 and 4-4 points of each corner."""
    lines = _star_lines(size)
    return point.x in lines and point.y in lines


def _is_edge_approach(point: Point, size: int) -> bool:
    lines = _star_lines(size)
    edges = (0, size - 1)
    return (point.x in lines and point.y in edges) or (
        point.y in lines and point.x in edges
    )


def _line(point: Point, size: int) -> int:
    return min(point.x, point.y, size - 1 - point.x, size - 1 - point.y) + 1


def _is_edge(point: Point, size: int) -> bool:
    return point.x in (0, size - 1) or point.y in (0, size - 1)


def _is_corner(point: Point, size: int) -> bool:
    return point.x in (0, size - 1) and point.y in (0, size - 1)


def evaluate_combat(ctx: MoveContext) -> float:
    score = 0.0
    for n in ctx.neighbors():
        cell = ctx.board[n.y][n.x]
        if cell == ctx.opponent:
            score += 2.0
        elif cell == ctx.player:
            score += 1.0
    return score


def evaluate_joseki(ctx: MoveContext) -> float:
    if is_joseki_point(ctx.point, ctx.size):
        return 1.0
    if _is_edge_approach(ctx.point, ctx.size):
        return 0.7
    return 0.3


def evaluate_life_death(ctx: MoveContext) -> float:
    if not ctx.valid:
        return -2.0
    if ctx.captured:
        return 1.5
    group = ctx.own_group
    if group is not None and group.liberties >= 2:
        return 0.8
    return 0.4


def evaluate_movement(ctx: MoveContext) -> float:
    score = 0.0
    connected = 0
    for n in ctx.neighbors():
        cell = ctx.board[n.y][n.x]
        if cell == ctx.player:
            connected += 1
            score += 0.8
        elif cell is None:
            score += 0.3
    if connected >= 2:
        score += 1.0
    return score


def evaluate_win_focus(ctx: MoveContext) -> float:
    """Progress toward the bot's capture target; 10 for a winning capture."""
    target = ctx.scoring.capture_target
    if not target or target <= 0:
        return 0.0
    current = ctx.scoring.captures
    remaining = target - current
    if remaining <= 0:
        return 0.0
    if not ctx.valid or not ctx.captured:
        return 0.0
    points = ctx.capture_points(pattern_value=2.0)
    if current + points >= target:
        return 10.0
    if remaining <= 3:
        return points * 2
    return points


def evaluate_proximity(ctx: MoveContext) -> float:
    stones = ctx.scoring.opponent_stones
    if not stones:
        return 0.0
    nearest = min(
        abs(ctx.point.x - s.x) + abs(ctx.point.y - s.y) for s in stones
    )
    return _PROXIMITY_SCORES.get(nearest, 0.1)


def evaluate_directional_attack(ctx: MoveContext) -> float:
    """Drive opponent stones toward the edge or toward own strength."""
    size = ctx.size
    point = ctx.point
    score = 0.0
    edge = _is_edge(point, size)

    if edge:
        for n in ctx.neighbors():
            if ctx.board[n.y][n.x] == ctx.opponent:
                score += 1.5

    my_groups = ctx.scoring.my_groups
    if my_groups:
        nearest = my_groups[0]
        best = float("inf")
        for group in my_groups:
            cx, cy = group.center()
            dist = abs(point.x - cx) + abs(point.y - cy)
            if dist < best:
                best = dist
                nearest = group
        mx, my = nearest.center()
        to_mine = (mx - point.x, my - point.y)
        for opp in ctx.scoring.opponent_groups:
            ox, oy = opp.center()
            dot = to_mine[0] * (ox - point.x) + to_mine[1] * (oy - point.y)
            if dot > 0:
                score += 2.0

    if edge:
        score += 2.5 if _is_corner(point, size) else 1.5
    return score


def evaluate_fuseki(ctx: MoveContext) -> float:
    """Opening line preference, sharper at higher levels."""
    if ctx.scoring.move_history_length > FUSEKI_MOVE_LIMIT:
        return 0.0
    line = _line(ctx.point, ctx.size)
    level = ctx.scoring.level
    score = 0.0

    if level >= 7:
        if line in (3, 4):
            score += 5.0
        elif line in (2, 5):
            score += 0.5
        elif line == 1:
            score -= 10.0
        else:
            score -= 8.0
    elif level >= 4:
        if line in (3, 4):
            score += 3.0
        elif line in (2, 5):
            score -= 1.0
        elif line == 1:
            score -= 3.0
        else:
            score -= 2.0
    else:
        if line in (3, 4):
            score += 2.0
        elif line == 1:
            score -= 1.5
        elif line == 2:
            score -= 1.0
        else:
            score -= 0.5

    if is_joseki_point(ctx.point, ctx.size):
        score += 3.0
    return score


def evaluate_life_death_advanced(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    own = ctx.own_group
    if own is not None and own.liberties >= 4 and own.size >= 3:
        score += 2.0
    for group in ctx.opponent_groups_after:
        if group.liberties <= 2 and group.size >= 2:
            score += 2.5
    return score


def evaluate_movement_advanced(ctx: MoveContext) -> float:
    """One-point and knight's-move extensions from existing groups."""
    point = ctx.point
    score = 0.0
    my_groups = ctx.scoring.my_groups

    if my_groups:
        farthest = 0.0
        for group in my_groups:
            cx, cy = group.center()
            farthest = max(farthest, abs(point.x - cx) + abs(point.y - cy))
        if 2 <= farthest <= 4:
            score += 1.5

    if ctx.valid and ctx.own_group is not None:
        board_after = ctx.sim.new_board
        own_neighbors = sum(
            1 for n in ctx.neighbors() if board_after[n.y][n.x] == ctx.player
        )
        if own_neighbors == 2:
            score += 1.0
        if my_groups:
            cx, cy = my_groups[0].center()
            if abs(point.x - cx) + abs(point.y - cy) == 2:
                score += 1.0
        if ctx.own_group.size >= 2:
            score += 0.5
    return score
