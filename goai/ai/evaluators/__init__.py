"""
Feature evaluators for the heuristic Go AI.

Each evaluator is a pure function of one candidate placement
(:class:`MoveContext`) returning an unweighted scalar. The scorers in
``goai.ai.heuristic_ai`` combine them with profile-dependent weights.

Available groups:
- tactical: captures, atari, rescue, sacrifice, advanced techniques
- territory: boundary defence, framework expansion and blocking, endgame
- positional: combat, joseki and fuseki lines, shape, win focus
"""

from .context import MoveContext, ScoringContext, match_group
from .positional import (
    evaluate_combat,
    evaluate_directional_attack,
    evaluate_fuseki,
    evaluate_joseki,
    evaluate_life_death,
    evaluate_life_death_advanced,
    evaluate_movement,
    evaluate_movement_advanced,
    evaluate_proximity,
    evaluate_win_focus,
)
from .tactical import (
    captured_group_value,
    evaluate_advanced_techniques,
    evaluate_atari_judgment,
    evaluate_atari_opportunity,
    evaluate_attack_opportunity,
    evaluate_capture_opportunity,
    evaluate_connection_and_cut,
    evaluate_escape_from_surround,
    evaluate_group_value,
    evaluate_safety,
    evaluate_sacrifice_and_counter,
    evaluate_self_atari,
    evaluate_surround_opportunity,
)
from .territory import (
    evaluate_defensive_direction,
    evaluate_endgame,
    evaluate_territory,
    evaluate_territory_and_combat,
    evaluate_territory_strategy,
)

__all__ = [
    "MoveContext",
    "ScoringContext",
    "captured_group_value",
    "evaluate_advanced_techniques",
    "evaluate_atari_judgment",
    "evaluate_atari_opportunity",
    "evaluate_attack_opportunity",
    "evaluate_capture_opportunity",
    "evaluate_combat",
    "evaluate_connection_and_cut",
    "evaluate_defensive_direction",
    "evaluate_directional_attack",
    "evaluate_endgame",
    "evaluate_escape_from_surround",
    "evaluate_fuseki",
    "evaluate_group_value",
    "evaluate_joseki",
    "evaluate_life_death",
    "evaluate_life_death_advanced",
    "evaluate_movement",
    "evaluate_movement_advanced",
    "evaluate_proximity",
    "evaluate_safety",
    "evaluate_sacrifice_and_counter",
    "evaluate_self_atari",
    "evaluate_surround_opportunity",
    "evaluate_territory",
    "evaluate_territory_and_combat",
    "evaluate_territory_strategy",
    "evaluate_win_focus",
    "match_group",
]
