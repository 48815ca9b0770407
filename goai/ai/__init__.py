"""AI implementations for the Go AI service.

Most callers go through :class:`goai.bot.GoAIBot`. For direct access:

    from goai.ai import HeuristicAI, get_skill_profile

    ai = HeuristicAI(Stone.WHITE, get_skill_profile(6))

Architecture:
- base.py: BaseAI abstract base class
- heuristic_ai.py: profile, fast and aggressive-capture scorers
- evaluators/: pure per-point feature evaluators
- lookahead.py: bounded reply simulation
- mistakes.py: deliberate mistakes for lower levels
- profiles.py: the ten skill profiles
- external_engine.py: HTTP and GTP engine adapters
"""

from goai.ai.base import BaseAI
from goai.ai.heuristic_ai import HeuristicAI, ScoringMode
from goai.ai.lookahead import LookAheadEvaluator
from goai.ai.mistakes import MistakeInjector
from goai.ai.profiles import SKILL_PROFILES, get_skill_profile, list_skill_profiles

__all__ = [
    "BaseAI",
    "HeuristicAI",
    "LookAheadEvaluator",
    "MistakeInjector",
    "SKILL_PROFILES",
    "ScoringMode",
    "get_skill_profile",
    "list_skill_profiles",
]
