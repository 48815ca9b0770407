"""
Tactical evaluators: captures, atari, rescue and local fighting.

Every function takes a :class:`~goai.ai.evaluators.context.MoveContext` for
one candidate point and returns an unweighted scalar. The scorers in
:mod:`goai.ai.heuristic_ai` decide which ones apply at which level and how
much they weigh.

Features computed:
- capture_opportunity: stones removed by the move (pattern stones x2)
- atari_opportunity: opponent groups pushed to one or two liberties
- attack_opportunity / surround_opportunity: pressure on opponent groups
- safety / self_atari: liberties left to the placed stone's group
- escape_from_surround: liberty gain for own short-of-liberty groups
- group_value: worth of an own group, used to size rescue bonuses
- sacrifice_and_counter: throw-in and snapback shapes
- atari_judgment: atari given versus own atari group rescued
- advanced_techniques: double atari, ladder pressure, nets
- connection_and_cut: own groups joined, opponent groups split
"""

from __future__ import annotations

from ...board_manager import BoardManager
from ...game_engine import GameEngine
from ...models import Group
from .context import SIMULATION_OPTIONS, MoveContext, ScoringContext, match_group

__all__ = [
    "captured_group_value",
    "evaluate_advanced_techniques",
    "evaluate_atari_judgment",
    "evaluate_atari_opportunity",
    "evaluate_attack_opportunity",
    "evaluate_capture_opportunity",
    "evaluate_connection_and_cut",
    "evaluate_escape_from_surround",
    "evaluate_group_value",
    "evaluate_safety",
    "evaluate_sacrifice_and_counter",
    "evaluate_self_atari",
    "evaluate_surround_opportunity",
]

_ATTACK_BY_LIBERTIES = {1: 5.0, 2: 3.5, 3: 2.0, 4: 1.0}
_SURROUND_BY_LIBERTIES = {1: 4.0, 2: 3.0, 3: 2.0, 4: 1.0}


def evaluate_capture_opportunity(ctx: MoveContext) -> float:
    if not ctx.valid or not ctx.captured:
        return 0.0
    return ctx.capture_points(pattern_value=2.0)


def evaluate_atari_opportunity(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    before_groups = ctx.scoring.opponent_groups
    for after in ctx.opponent_groups_after:
        libs_after = after.liberties
        if libs_after > 2:
            continue
        before = match_group(after, before_groups)
        if before is None:
            continue
        libs_before = before.liberties
        if libs_after == 1 and libs_before > libs_after:
            score += 5.0
        elif libs_after == 2 and libs_before - libs_after >= 2:
            score += 3.0
        elif libs_after < libs_before:
            score += 1.5
    return score


def evaluate_attack_opportunity(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    before_groups = ctx.scoring.opponent_groups
    for group in ctx.opponent_groups_after:
        score += _ATTACK_BY_LIBERTIES.get(group.liberties, 0.0)
        before = match_group(group, before_groups)
        if before is not None and group.liberties < before.liberties:
            score += 2.5
    return score


def _adjacent_opponent_groups_after(ctx: MoveContext) -> list[Group]:
    # One entry per adjacent opponent stone, so a group touching the point
    # twice counts twice.
    board = ctx.sim.new_board
    groups = []
    for n in ctx.neighbors():
        if board[n.y][n.x] != ctx.opponent:
            continue
        for group in ctx.opponent_groups_after:
            if group.contains(n):
                groups.append(group)
                break
    return groups


def evaluate_surround_opportunity(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    return sum(
        _SURROUND_BY_LIBERTIES.get(g.liberties, 0.0)
        for g in _adjacent_opponent_groups_after(ctx)
    )


def evaluate_safety(ctx: MoveContext) -> float:
    if not ctx.valid:
        return -1.0
    group = ctx.own_group
    if group is None:
        return 0.5
    libs = group.liberties
    if libs >= 3:
        return 1.0
    if libs >= 2:
        return 0.7
    if libs >= 1:
        return 0.3
    return 0.0


def evaluate_self_atari(ctx: MoveContext) -> float:
    """1.0 when the move puts its own stone in atari without capturing."""
    if not ctx.valid:
        return 1.0
    group = ctx.own_group
    if group is not None and group.liberties == 1:
        return 0.0 if ctx.captured else 1.0
    return 0.0


def evaluate_escape_from_surround(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    board_after = ctx.sim.new_board
    for group in ctx.scoring.my_groups:
        libs = group.liberties
        if libs > 3:
            continue
        connected = match_group(group, ctx.my_groups_after)
        if connected is None or connected.liberties <= libs:
            continue

        score += 3.0 + (connected.liberties - libs) * 2.0
        open_sides = sum(
            1 for n in ctx.neighbors() if board_after[n.y][n.x] is None
        )
        if open_sides >= 2:
            score += 2.0
        for opp in ctx.scoring.opponent_groups:
            if any(
                abs(ctx.point.x - s.x) + abs(ctx.point.y - s.y) <= 2
                for s in opp.stones
            ):
                score += 1.5
    return score


def evaluate_group_value(group: Group, scoring: ScoringContext) -> float:
    """How much an own group is worth keeping alive.

    Larger, more central and freer groups are worth more, late-game size
    counts extra, and weaker life-and-death judgment discounts the value.
    """
    size = scoring.size
    n = group.size
    value = n * 2.0

    avg_x, avg_y = group.center()
    half = size / 2
    centrality = 1.0 - (abs(avg_x - half) + abs(avg_y - half)) / size
    value += centrality * 5.0
    value += group.liberties * 1.5

    progress = min(1.0, scoring.move_history_length / (size * size * 0.7))
    if progress > 0.6:
        value += n * progress * 1.5

    value *= 0.7 + scoring.profile.life_death_skill * 0.3
    return value


def evaluate_sacrifice_and_counter(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    group = ctx.own_group
    if group is not None and group.liberties == 1 and ctx.captured:
        score += 3.0
    if ctx.captured:
        for opp in ctx.scoring.opponent_groups:
            if opp.liberties == 1 and ctx.point in opp.liberty_points:
                score += 4.0
    return score


def evaluate_atari_judgment(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    before_groups = ctx.scoring.opponent_groups
    for after in ctx.opponent_groups_after:
        if after.liberties != 1:
            continue
        before = match_group(after, before_groups)
        if before is not None and before.liberties > 1:
            score += 2.0
    for before, _after in ctx.rescued_groups:
        score += 15.0 + before.size * 2.0
    return score


def evaluate_advanced_techniques(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    board_after = ctx.sim.new_board
    next_index = ctx.scoring.move_history_length + 1

    # Follow-up capture of an atari group leaving another group in atari.
    for group in ctx.opponent_groups_after:
        if group.liberties != 1:
            continue
        liberty = next(iter(group.liberty_points))
        follow_up = GameEngine.process_move(
            board_after, liberty, ctx.player, None, next_index, SIMULATION_OPTIONS
        )
        if not follow_up.is_valid:
            continue
        for nxt in BoardManager.get_all_groups(follow_up.new_board, ctx.opponent):
            if nxt.liberties == 1:
                score += 3.0

    for group in _adjacent_opponent_groups_after(ctx):
        if group.liberties <= 2:
            score += 2.0

    own = ctx.own_group
    if own is not None and own.size >= 3:
        score += 1.5

    score += evaluate_sacrifice_and_counter(ctx) * 0.5
    return score


def evaluate_connection_and_cut(ctx: MoveContext) -> float:
    if not ctx.valid:
        return 0.0
    score = 0.0
    if len(ctx.my_groups_after) < len(ctx.scoring.my_groups):
        score += 2.0
    if len(ctx.opponent_groups_after) > len(ctx.scoring.opponent_groups):
        score += 3.0
    return score


def captured_group_value(ctx: MoveContext) -> float:
    """Capture worth used by atari judgment.

    Pattern stones count 3, others 1, plus half the size of the group each
    captured stone belonged to.
    """
    if not ctx.captured:
        return 0.0
    value = ctx.capture_points(pattern_value=3.0)
    before_groups = ctx.scoring.opponent_groups
    for stone in ctx.captured:
        for group in before_groups:
            if group.contains(stone):
                value += group.size * 0.5
                break
    return value
