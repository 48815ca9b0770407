"""Tests for deliberate mistake injection."""

import random
import unittest

from goai.ai.mistakes import MistakeInjector
from goai.ai.profiles import get_skill_profile
from goai.models import MoveCandidate, Point


def _ranked(n):
    return [MoveCandidate(point=Point(i, 0), score=float(n - i)) for i in range(n)]


def _with_rate(rate):
    return get_skill_profile(5).model_copy(update={"mistake_rate": rate})


class TestMistakeInjector(unittest.TestCase):
    def setUp(self):
        self.ranked = _ranked(10)

    def test_zero_rate_always_plays_best(self):
        injector = MistakeInjector(random.Random(7))
        for _ in range(200):
            decision = injector.select(self.ranked, _with_rate(0.0))
            self.assertFalse(decision.is_mistake)
            self.assertEqual(decision.index, 0)

    def test_single_candidate_is_never_a_mistake(self):
        injector = MistakeInjector(random.Random(7))
        decision = injector.select(_ranked(1), _with_rate(1.0))
        self.assertFalse(decision.is_mistake)

    def test_empty_ranking_is_rejected(self):
        with self.assertRaises(ValueError):
            MistakeInjector(random.Random(0)).select([], _with_rate(0.5))

    def test_bottom_band(self):
        injector = MistakeInjector(random.Random(3), bottom_share=1.0)
        for _ in range(200):
            decision = injector.select(self.ranked, _with_rate(1.0))
            self.assertTrue(decision.is_mistake)
            self.assertIn(decision.index, (7, 8, 9))
            self.assertEqual(decision.candidate, self.ranked[decision.index])

    def test_middle_band(self):
        injector = MistakeInjector(random.Random(3), bottom_share=0.0)
        seen = set()
        for _ in range(200):
            seen.add(injector.select(self.ranked, _with_rate(1.0)).index)
        self.assertEqual(seen, {3, 4, 5, 6})

    def test_observed_rate_follows_profile(self):
        injector = MistakeInjector(random.Random(11))
        profile = get_skill_profile(1)
        trials = 4000
        mistakes = sum(
            injector.select(_ranked(20), profile).is_mistake for _ in range(trials)
        )
        self.assertAlmostEqual(mistakes / trials, profile.mistake_rate, delta=0.05)

    def test_same_seed_same_choices(self):
        a = MistakeInjector(random.Random(42))
        b = MistakeInjector(random.Random(42))
        profile = _with_rate(0.5)
        picks_a = [a.select(_ranked(15), profile).index for _ in range(50)]
        picks_b = [b.select(_ranked(15), profile).index for _ in range(50)]
        self.assertEqual(picks_a, picks_b)

    def test_suppressed_candidates_are_never_picked(self):
        ranked = [
            MoveCandidate(c.point, c.score, suppressed=i >= 7)
            for i, c in enumerate(self.ranked)
        ]
        injector = MistakeInjector(random.Random(5), bottom_share=1.0)
        for _ in range(200):
            decision = injector.select(ranked, _with_rate(1.0))
            self.assertTrue(decision.is_mistake)
            self.assertIn(decision.index, (4, 5, 6))
            self.assertFalse(decision.candidate.suppressed)

    def test_only_suppressed_alternatives_keeps_best(self):
        ranked = [
            MoveCandidate(Point(0, 0), 10.0),
            MoveCandidate(Point(1, 0), -100000.0, suppressed=True),
            MoveCandidate(Point(2, 0), -100000.0, suppressed=True),
        ]
        injector = MistakeInjector(random.Random(5))
        for _ in range(50):
            decision = injector.select(ranked, _with_rate(1.0))
            self.assertFalse(decision.is_mistake)
            self.assertEqual(decision.index, 0)

    def test_beginner_may_still_pick_suppressed(self):
        ranked = [
            MoveCandidate(c.point, c.score, suppressed=i >= 7)
            for i, c in enumerate(self.ranked)
        ]
        profile = get_skill_profile(1).model_copy(update={"mistake_rate": 1.0})
        injector = MistakeInjector(random.Random(5), bottom_share=1.0)
        for _ in range(50):
            self.assertIn(injector.select(ranked, profile).index, (7, 8, 9))


if __name__ == '__main__':
    unittest.main()
