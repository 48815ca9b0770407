"""Tests for the ten-level skill ladder."""

import logging

import pytest
from pydantic import ValidationError

from goai.ai.profiles import (
    KNOWLEDGE_UNLOCK_ORDER,
    MAX_LEVEL,
    MIN_LEVEL,
    SKILL_PROFILES,
    get_skill_profile,
    list_skill_profiles,
)


def test_ten_levels_are_defined():
    assert (MIN_LEVEL, MAX_LEVEL) == (1, 10)
    assert [p.level for p in list_skill_profiles()] == list(range(1, 11))


@pytest.mark.parametrize("level", range(1, 11))
def test_knowledge_flags_are_cumulative(level):
    flags = get_skill_profile(level).knowledge.as_ordered_flags()
    assert len(flags) == len(KNOWLEDGE_UNLOCK_ORDER) == 10
    assert flags == [i < level for i in range(10)]


def test_each_level_learns_exactly_one_technique():
    for level in range(2, 11):
        before = get_skill_profile(level - 1).knowledge.as_ordered_flags()
        after = get_skill_profile(level).knowledge.as_ordered_flags()
        assert sum(after) - sum(before) == 1
        assert all(a or not b for a, b in zip(after, before))


def test_tendencies_are_in_unit_range():
    for profile in list_skill_profiles():
        for value in (
            profile.capture_tendency,
            profile.territory_tendency,
            profile.combat_tendency,
            profile.joseki_usage,
            profile.life_death_skill,
            profile.movement_skill,
            profile.mistake_rate,
            profile.win_focus,
        ):
            assert 0.0 <= value <= 1.0


def test_mistakes_shrink_and_depth_grows_with_level():
    profiles = list_skill_profiles()
    for weaker, stronger in zip(profiles, profiles[1:]):
        assert stronger.mistake_rate < weaker.mistake_rate
        assert stronger.calculation_depth >= weaker.calculation_depth


def test_level_ten_is_near_perfect():
    top = get_skill_profile(10)
    assert top.mistake_rate == 0.01
    assert top.calculation_depth == 10
    assert top.knowledge.endgame


def test_profiles_are_immutable():
    profile = get_skill_profile(5)
    with pytest.raises(ValidationError):
        profile.mistake_rate = 0.0
    with pytest.raises(TypeError):
        SKILL_PROFILES[5] = get_skill_profile(1)


@pytest.mark.parametrize("level", [0, 11, -3])
def test_unknown_level_falls_back_to_level_one(level, caplog):
    with caplog.at_level(logging.WARNING, logger="goai.ai.profiles"):
        profile = get_skill_profile(level)
    assert profile.level == 1
    assert "Unknown AI level" in caplog.text


def test_profiles_serialize_with_camel_case_aliases():
    data = get_skill_profile(3).model_dump(by_alias=True)
    assert data["captureTendency"] == 0.72
    assert data["knowledge"]["avoidsSelfAtari"] is True
    assert data["knowledge"]["sacrificeAndCounter"] is True
    assert data["knowledge"]["atariJudgment"] is False
