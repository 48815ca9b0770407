"""
Bounded look-ahead for the heuristic Go AI.

After a candidate placement the evaluator lets the opponent answer with its
first ``max_branches`` fast candidates and scores each reply from the bot's
point of view: stones lost or newly put in atari count against the move,
opponent groups in atari count for it. The atari term is measured against
the position before the reply, so a group that was already in atari is not
credited to every move that leaves it there. Deeper levels recurse on the
opponent's replies with half weight and average the results.

Cost grows as ``max_branches ** depth``, so the requested depth is clamped
to ``max_depth`` (``GOAI_LOOKAHEAD_MAX_DEPTH``). Every simulated reply is
counted in ``simulations`` so callers can verify the bound.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..board_manager import BoardManager
from ..game_engine import GameEngine, MoveOptions
from ..models import Board, Group, KoInfo, Point, Stone
from .evaluators.context import match_group
from .move_generation import generate_fast_moves

logger = logging.getLogger(__name__)

__all__ = ["LookAheadEvaluator", "NO_REPLY_BONUS"]

# Score when the opponent has no legal reply at all.
NO_REPLY_BONUS = 100.0

_SIM = MoveOptions(ignore_suicide=True)


class LookAheadEvaluator:
    """Recursive reply simulation with explicit branch and depth bounds."""

    def __init__(self, max_branches: int = 5, max_depth: int = 2):
        if max_branches < 1:
            raise ValueError("max_branches must be at least 1")
        if max_depth < 0:
            raise ValueError("max_depth must not be negative")
        self.max_branches = max_branches
        self.max_depth = max_depth
        self.simulations = 0

    def reset_counters(self) -> None:
        self.simulations = 0

    def max_simulations(self, depth: int) -> int:
        """Upper bound on replies simulated by one :meth:`look_ahead` call."""
        depth = min(depth, self.max_depth)
        return sum(self.max_branches ** d for d in range(1, depth + 1))

    def evaluate_move(
        self,
        board: Board,
        point: Point,
        player: Stone,
        ko_info: Optional[KoInfo],
        move_history_length: int,
        depth: int,
    ) -> float:
        """Play ``point`` for ``player`` and look ahead from the result."""
        result = GameEngine.process_move(
            board, point, player, ko_info, move_history_length, _SIM
        )
        if not result.is_valid:
            return 0.0
        return self.look_ahead(
            result.new_board,
            result.new_ko_info,
            player,
            move_history_length,
            depth,
        )

    def look_ahead(
        self,
        board: Board,
        ko_info: Optional[KoInfo],
        player: Stone,
        move_history_length: int,
        depth: int,
    ) -> float:
        """Average value for ``player`` of the opponent's best replies.

        ``board`` is the position right after ``player`` moved.
        """
        depth = min(depth, self.max_depth)
        if depth <= 0:
            return 0.0

        opponent = player.opponent
        reply_index = move_history_length + 1
        replies = generate_fast_moves(board, opponent, ko_info, reply_index)
        if not replies:
            return NO_REPLY_BONUS

        my_groups_before = BoardManager.get_all_groups(board, player)
        baseline = self._atari_value(board, opponent)
        total = 0.0
        valid = 0
        for reply in replies[: self.max_branches]:
            self.simulations += 1
            result = GameEngine.process_move(
                board, reply, opponent, ko_info, reply_index, _SIM
            )
            if not result.is_valid:
                continue

            score = 0.0
            my_groups_after = BoardManager.get_all_groups(result.new_board, player)
            for before in my_groups_before:
                after = match_group(before, my_groups_after)
                if after is None:
                    score -= before.size * 100
                elif before.liberties > 1 and after.liberties == 1:
                    score -= 50

            score += self._atari_value(result.new_board, opponent) - baseline

            if depth > 1:
                score += 0.5 * self.look_ahead(
                    result.new_board,
                    result.new_ko_info,
                    player,
                    reply_index,
                    depth - 1,
                )
            total += score
            valid += 1

        return total / valid if valid else 0.0

    @staticmethod
    def _atari_value(board: Board, player: Stone) -> float:
        return sum(
            g.size * 50.0
            for g in BoardManager.get_all_groups(board, player)
            if g.liberties == 1
        )

    def can_group_be_saved(
        self,
        board: Board,
        ko_info: Optional[KoInfo],
        group: Group,
        player: Stone,
        move_history_length: int,
        calculation_depth: int,
    ) -> bool:
        """Whether a just-rescued ``group`` survives the opponent's chase.

        ``board`` is the position right after the rescue, which was move
        ``move_history_length``. The opponent tries each liberty of a group
        with at most two; a reply that captures it, or leaves it in atari
        with no extension reaching two liberties, dooms it. Each extension
        is read again one level shallower, so ladders are followed up to
        ``calculation_depth``. Shallow calculators (depth 1) always assume
        the group lives.
        """
        if calculation_depth <= 1:
            return True
        if group.liberties == 0:
            return False
        if group.liberties > 2:
            return True

        opponent = player.opponent
        reply_index = move_history_length + 1
        for liberty in sorted(group.liberty_points)[: self.max_branches]:
            self.simulations += 1
            reply = GameEngine.process_move(
                board, liberty, opponent, ko_info, reply_index
            )
            if not reply.is_valid:
                continue
            chased = match_group(
                group, BoardManager.get_all_groups(reply.new_board, player)
            )
            if chased is None:
                return False
            if chased.liberties >= 2:
                continue
            if not self._escape(
                reply.new_board,
                reply.new_ko_info,
                chased,
                player,
                reply_index + 1,
                calculation_depth - 1,
            ):
                logger.debug(
                    "Group of %d stones cannot escape at depth %d",
                    group.size, calculation_depth,
                )
                return False
        return True

    def _escape(
        self,
        board: Board,
        ko_info: Optional[KoInfo],
        group: Group,
        player: Stone,
        move_index: int,
        calculation_depth: int,
    ) -> bool:
        """Extend ``group`` out of atari on its last liberty and keep reading."""
        escape = next(iter(group.liberty_points))
        self.simulations += 1
        result = GameEngine.process_move(board, escape, player, ko_info, move_index)
        if not result.is_valid:
            return False
        after = match_group(
            group, BoardManager.get_all_groups(result.new_board, player)
        )
        if after is None or after.liberties < 2:
            return False
        return self.can_group_be_saved(
            result.new_board,
            result.new_ko_info,
            after,
            player,
            move_index,
            calculation_depth,
        )
