"""Deliberate mistakes for human-like play at lower levels.

With probability ``profile.mistake_rate`` the injector swaps the best move
for a worse one. Most mistakes come from the bottom 30% of the ranking;
the rest come from the middle band (30%-70%), or from anywhere when that
band is empty. Every pick is still re-validated by the committer.

Profiles that know to avoid self-atari never pick a ``suppressed``
candidate: the bands are drawn over the remaining ones only.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from ..models import MoveCandidate, SkillProfile

logger = logging.getLogger(__name__)

__all__ = ["MistakeInjector", "MistakeDecision"]

BOTTOM_BAND = 0.3
MIDDLE_BAND = (0.3, 0.7)


@dataclass(frozen=True)
class MistakeDecision:
    candidate: MoveCandidate
    index: int
    is_mistake: bool


class MistakeInjector:
    def __init__(self, rng: random.Random, bottom_share: float = 0.7):
        self.rng = rng
        self.bottom_share = bottom_share

    def select(
        self, ranked: list[MoveCandidate], profile: SkillProfile
    ) -> MistakeDecision:
        """Pick from ``ranked`` (best first); ``ranked`` must not be empty."""
        if not ranked:
            raise ValueError("cannot select from an empty candidate list")

        if profile.knowledge.avoids_self_atari:
            pool = [i for i, c in enumerate(ranked) if not c.suppressed]
        else:
            pool = list(range(len(ranked)))

        n = len(pool)
        if n <= 1 or self.rng.random() >= profile.mistake_rate:
            return MistakeDecision(ranked[0], 0, False)

        if self.rng.random() < self.bottom_share:
            start = n - math.ceil(n * BOTTOM_BAND)
            pick = self.rng.randrange(start, n)
        else:
            lo = math.floor(n * MIDDLE_BAND[0])
            hi = math.floor(n * MIDDLE_BAND[1])
            if hi > lo:
                pick = self.rng.randrange(lo, hi)
            else:
                pick = self.rng.randrange(n)

        index = pool[pick]
        logger.debug(
            "Level %d mistake: picked rank %d of %d (score %.1f)",
            profile.level, index + 1, len(ranked), ranked[index].score,
        )
        return MistakeDecision(ranked[index], index, True)
