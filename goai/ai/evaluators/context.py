"""
Shared inputs for the move evaluators.

``ScoringContext`` holds what is fixed for one AI turn (the board as the bot
sees it, the bot's colour, the profile, capture targets). ``MoveContext``
wraps it for a single candidate point and lazily caches the simulated
placement and the group lists before and after it, since most evaluators
look at the same derived data.

Evaluators never inspect the game variant; everything variant-specific is
resolved into explicit fields here by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Optional

from ...board_manager import BoardManager
from ...game_engine import GameEngine, MoveOptions, MoveResult
from ...models import Board, Group, KoInfo, Point, SkillProfile, Stone

__all__ = ["MoveContext", "ScoringContext", "match_group"]

SIMULATION_OPTIONS = MoveOptions(ignore_suicide=True)


def match_group(group: Group, candidates: list[Group]) -> Optional[Group]:
    """First group in ``candidates`` sharing at least one stone with ``group``."""
    for other in candidates:
        if group.shares_stone_with(other):
            return other
    return None


@dataclass
class ScoringContext:
    board: Board
    player: Stone
    profile: SkillProfile
    ko_info: Optional[KoInfo] = None
    move_history_length: int = 0
    is_single_player: bool = False
    capture_mode: bool = False
    capture_target: Optional[int] = None
    captures: int = 0
    opponent_patterns: frozenset[Point] = field(default_factory=frozenset)

    @property
    def opponent(self) -> Stone:
        return self.player.opponent

    @property
    def size(self) -> int:
        return len(self.board)

    @property
    def level(self) -> int:
        return self.profile.level

    @cached_property
    def my_groups(self) -> list[Group]:
        return BoardManager.get_all_groups(self.board, self.player)

    @cached_property
    def opponent_groups(self) -> list[Group]:
        return BoardManager.get_all_groups(self.board, self.opponent)

    @cached_property
    def opponent_stones(self) -> list[Point]:
        return BoardManager.occupied_points(self.board, self.opponent)

    @cached_property
    def occupancy(self) -> float:
        return BoardManager.occupancy_ratio(self.board)

    def for_point(self, point: Point) -> "MoveContext":
        return MoveContext(self, point)


class MoveContext:
    """One candidate placement evaluated against a :class:`ScoringContext`."""

    def __init__(self, scoring: ScoringContext, point: Point):
        self.scoring = scoring
        self.point = point

    # Convenience passthroughs
    @property
    def board(self) -> Board:
        return self.scoring.board

    @property
    def player(self) -> Stone:
        return self.scoring.player

    @property
    def opponent(self) -> Stone:
        return self.scoring.opponent

    @property
    def size(self) -> int:
        return self.scoring.size

    @property
    def profile(self) -> SkillProfile:
        return self.scoring.profile

    @cached_property
    def sim(self) -> MoveResult:
        """The placement with suicide allowed, as the evaluators see it."""
        s = self.scoring
        return GameEngine.process_move(
            s.board,
            self.point,
            s.player,
            s.ko_info,
            s.move_history_length,
            SIMULATION_OPTIONS,
        )

    @property
    def valid(self) -> bool:
        return self.sim.is_valid

    @property
    def captured(self) -> list[Point]:
        return self.sim.captured_stones if self.sim.is_valid else []

    @cached_property
    def my_groups_after(self) -> list[Group]:
        if not self.sim.is_valid:
            return []
        return BoardManager.get_all_groups(self.sim.new_board, self.player)

    @cached_property
    def opponent_groups_after(self) -> list[Group]:
        if not self.sim.is_valid:
            return []
        return BoardManager.get_all_groups(self.sim.new_board, self.opponent)

    @cached_property
    def own_group(self) -> Optional[Group]:
        """The mover's group containing the placed stone after the move."""
        if not self.sim.is_valid:
            return None
        return BoardManager.find_group(self.sim.new_board, self.point, self.player)

    @cached_property
    def rescued_groups(self) -> list[tuple[Group, Group]]:
        """``(before, after)`` pairs of own atari groups lifted to 2+ liberties."""
        rescued = []
        if not self.sim.is_valid:
            return rescued
        for before in self.scoring.my_groups:
            if before.liberties != 1:
                continue
            after = match_group(before, self.my_groups_after)
            if after is not None and after.liberties > 1:
                rescued.append((before, after))
        return rescued

    @property
    def is_rescue(self) -> bool:
        return bool(self.rescued_groups)

    def capture_points(self, pattern_value: float = 2.0) -> float:
        """Captured stones, counting opponent pattern stones as ``pattern_value``."""
        patterns = self.scoring.opponent_patterns
        return sum(pattern_value if p in patterns else 1 for p in self.captured)

    def neighbors(self) -> list[Point]:
        return BoardManager.get_neighbors(self.point, self.size)
