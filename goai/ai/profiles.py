"""Skill ladder for the heuristic Go AI.

This module is the single source of truth for how AI levels 1-10 behave.
Each level is a frozen :class:`~goai.models.SkillProfile` combining six
tendencies in [0, 1], a mistake rate, a win focus, a calculation depth and
ten cumulative technique flags (level k knows everything level k-1 knows
plus one more technique).

Usage:
    from goai.ai.profiles import get_skill_profile

    profile = get_skill_profile(7)
    if profile.knowledge.fuseki:
        ...
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

from ..models import SkillKnowledge, SkillProfile

logger = logging.getLogger(__name__)

__all__ = [
    "KNOWLEDGE_UNLOCK_ORDER",
    "SKILL_PROFILES",
    "get_skill_profile",
    "list_skill_profiles",
]

# Technique flags in unlock order; flag i is learned at level i + 1.
KNOWLEDGE_UNLOCK_ORDER: tuple[str, ...] = (
    "basic_rules",
    "avoids_self_atari",
    "sacrifice_and_counter",
    "atari_judgment",
    "directional_attack",
    "fuseki",
    "territory_and_combat",
    "advanced_techniques",
    "connection_life_death_movement",
    "endgame",
)


def _knowledge_for_level(level: int) -> SkillKnowledge:
    flags = {name: i < level for i, name in enumerate(KNOWLEDGE_UNLOCK_ORDER)}
    return SkillKnowledge(**flags)


# Level 1-3 play the fast path and hunt captures; from level 7 the tendencies
# lean into attack rather than territory.
_RAW_PROFILES: dict[int, dict[str, Any]] = {
    1: {
        "name": "Beginner AI (18 kyu)",
        "description": "Beginner 18 kyu. Focused on capturing stones to win.",
        "capture_tendency": 0.95,
        "territory_tendency": 0.2,
        "combat_tendency": 0.8,
        "joseki_usage": 0.1,
        "life_death_skill": 0.2,
        "movement_skill": 0.2,
        "mistake_rate": 0.4,
        "win_focus": 0.95,
        "calculation_depth": 1,
    },
    2: {
        "name": "Beginner AI (15 kyu)",
        "description": (
            "Beginner 15 kyu. Prefers captures but understands basic "
            "territory."
        ),
        "capture_tendency": 0.85,
        "territory_tendency": 0.3,
        "combat_tendency": 0.7,
        "joseki_usage": 0.15,
        "life_death_skill": 0.3,
        "movement_skill": 0.3,
        "mistake_rate": 0.35,
        "win_focus": 0.9,
        "calculation_depth": 2,
    },
    3: {
        "name": "Beginner AI (12 kyu)",
        "description": (
            "Beginner 12 kyu. Starts balancing captures against territory."
        ),
        "capture_tendency": 0.72,
        "territory_tendency": 0.4,
        "combat_tendency": 0.6,
        "joseki_usage": 0.2,
        "life_death_skill": 0.4,
        "movement_skill": 0.4,
        "mistake_rate": 0.3,
        "win_focus": 0.85,
        "calculation_depth": 3,
    },
    4: {
        "name": "Intermediate AI (9 kyu)",
        "description": (
            "Intermediate 9 kyu. Understands basic joseki and fuseki."
        ),
        "capture_tendency": 0.62,
        "territory_tendency": 0.5,
        "combat_tendency": 0.5,
        "joseki_usage": 0.3,
        "life_death_skill": 0.5,
        "movement_skill": 0.5,
        "mistake_rate": 0.25,
        "win_focus": 0.8,
        "calculation_depth": 4,
    },
    5: {
        "name": "Intermediate AI (6 kyu)",
        "description": (
            "Intermediate 6 kyu. Uses joseki and fuseki with stronger "
            "fighting."
        ),
        "capture_tendency": 0.7,
        "territory_tendency": 0.5,
        "combat_tendency": 0.65,
        "joseki_usage": 0.4,
        "life_death_skill": 0.6,
        "movement_skill": 0.6,
        "mistake_rate": 0.18,
        "win_focus": 0.78,
        "calculation_depth": 5,
    },
    6: {
        "name": "Intermediate AI (3 kyu)",
        "description": (
            "Intermediate 3 kyu. Balanced play between territory and "
            "fighting."
        ),
        "capture_tendency": 0.72,
        "territory_tendency": 0.58,
        "combat_tendency": 0.7,
        "joseki_usage": 0.5,
        "life_death_skill": 0.7,
        "movement_skill": 0.7,
        "mistake_rate": 0.12,
        "win_focus": 0.75,
        "calculation_depth": 6,
    },
    7: {
        "name": "Advanced AI (1 dan)",
        "description": (
            "Advanced 1 dan. Good joseki and fuseki with sharper life and "
            "death reading."
        ),
        "capture_tendency": 0.8,
        "territory_tendency": 0.55,
        "combat_tendency": 0.8,
        "joseki_usage": 0.55,
        "life_death_skill": 0.75,
        "movement_skill": 0.75,
        "mistake_rate": 0.04,
        "win_focus": 0.7,
        "calculation_depth": 7,
    },
    8: {
        "name": "Advanced AI (2 dan)",
        "description": "Advanced 2 dan. Strong shape and joseki.",
        "capture_tendency": 0.85,
        "territory_tendency": 0.6,
        "combat_tendency": 0.85,
        "joseki_usage": 0.65,
        "life_death_skill": 0.8,
        "movement_skill": 0.8,
        "mistake_rate": 0.03,
        "win_focus": 0.75,
        "calculation_depth": 8,
    },
    9: {
        "name": "Dan AI (1 dan)",
        "description": (
            "Dan-level play. Strong all-round technique and accurate "
            "judgment."
        ),
        "capture_tendency": 0.9,
        "territory_tendency": 0.6,
        "combat_tendency": 0.9,
        "joseki_usage": 0.7,
        "life_death_skill": 0.85,
        "movement_skill": 0.85,
        "mistake_rate": 0.015,
        "win_focus": 0.8,
        "calculation_depth": 9,
    },
    10: {
        "name": "Dan AI (4 dan)",
        "description": (
            "Dan-level 4 dan. Excellent territory, fighting, shape, joseki, "
            "fuseki and life-and-death."
        ),
        "capture_tendency": 0.95,
        "territory_tendency": 0.6,
        "combat_tendency": 0.95,
        "joseki_usage": 0.7,
        "life_death_skill": 0.9,
        "movement_skill": 0.9,
        "mistake_rate": 0.01,
        "win_focus": 0.85,
        "calculation_depth": 10,
    },
}


def _build_registry() -> Mapping[int, SkillProfile]:
    profiles = {
        level: SkillProfile(
            level=level,
            knowledge=_knowledge_for_level(level),
            **raw,
        )
        for level, raw in _RAW_PROFILES.items()
    }
    return MappingProxyType(profiles)


SKILL_PROFILES: Mapping[int, SkillProfile] = _build_registry()

MIN_LEVEL = min(SKILL_PROFILES)
MAX_LEVEL = max(SKILL_PROFILES)


def get_skill_profile(level: int) -> SkillProfile:
    """Return the profile for ``level``.

    Unknown levels fall back to level 1 with a warning rather than raising,
    so a misconfigured caller still gets a playable (weak) bot.
    """
    profile = SKILL_PROFILES.get(level)
    if profile is None:
        logger.warning("Unknown AI level %s, using level 1 profile", level)
        return SKILL_PROFILES[MIN_LEVEL]
    return profile


def list_skill_profiles() -> list[SkillProfile]:
    return [SKILL_PROFILES[level] for level in sorted(SKILL_PROFILES)]
