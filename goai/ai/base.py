"""
Base AI Player class for the Go AI service
Abstract base class that all AI implementations inherit from
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import random

from ..models import MoveCandidate, Point, SkillProfile, Stone
from .evaluators.context import ScoringContext


def derive_training_seed(level: int, player: Stone) -> int:
    """
    Derive a deterministic RNG seed when the caller supplies none.

    Online play (the FastAPI ``/ai/move`` endpoint) forwards the seed chosen
    by the session host; self-play and tests that omit it still get
    reproducible behaviour by mixing the level and colour into a 32-bit
    value.
    """
    player_number = 1 if player == Stone.BLACK else 2
    base = (level * 1_000_003) ^ (player_number * 97_911)
    return int(base & 0xFFFFFFFF)


class BaseAI(ABC):
    """Abstract base class for all AI implementations"""

    def __init__(
        self,
        player: Stone,
        profile: SkillProfile,
        rng_seed: Optional[int] = None,
    ):
        """
        Initialize AI player

        Args:
            player: The colour this AI plays
            profile: Skill profile for the level being played
            rng_seed: Explicit seed; derived from level and colour when None
        """
        self.player = player
        self.profile = profile

        # All stochastic behaviour (mistakes, tie noise) goes through this
        # per-instance RNG so a fixed seed replays the same game.
        if rng_seed is not None:
            self.rng_seed: int = int(rng_seed)
        else:
            self.rng_seed = derive_training_seed(profile.level, player)
        self.rng: random.Random = random.Random(self.rng_seed)

    @abstractmethod
    def rank_moves(
        self, scoring: ScoringContext, moves: List[Point]
    ) -> List[MoveCandidate]:
        """
        Score candidate moves and return them best first

        Args:
            scoring: Position as this AI perceives it
            moves: Legal candidate points

        Returns:
            Candidates sorted by descending score (stable for ties)
        """
        pass

    @abstractmethod
    def evaluate_move(self, scoring: ScoringContext, point: Point) -> float:
        """
        Score a single candidate from this AI's perspective
        """
        pass

    def get_evaluation_breakdown(
        self, scoring: ScoringContext, point: Point
    ) -> Dict[str, float]:
        return {"total": self.evaluate_move(scoring, point)}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(player={self.player.value}, "
            f"level={self.profile.level})"
        )
