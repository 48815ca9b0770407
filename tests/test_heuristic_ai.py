"""
Scenario tests for the heuristic scorers.

Mistake injection is not involved here: the tests read the ranking the
scorer produces, best first.
"""

import pytest

from goai.ai.base import derive_training_seed
from goai.ai.heuristic_ai import SELF_ATARI_SENTINEL, HeuristicAI, ScoringMode
from goai.ai.lookahead import LookAheadEvaluator
from goai.ai.move_generation import generate_fast_moves, generate_moves
from goai.ai.profiles import get_skill_profile
from goai.bot import GoAIBot
from goai.board_manager import BoardManager
from goai.config import EngineSettings
from goai.models import GameSessionView, GameVariant, Point, Stone
from goai.session import resolve_variant

from conftest import board_with


SETTINGS = EngineSettings()


def _rank(board, level, player=Stone.BLACK, variant=GameVariant.STANDARD,
          is_single_player=False):
    """Rank the candidates exactly as one bot turn would."""
    session = GameSessionView(
        board=board,
        current_player=player,
        variant=variant,
        is_single_player=is_single_player,
    )
    bot = GoAIBot(settings=SETTINGS, use_engine=False)
    profile = get_skill_profile(level)
    policy = resolve_variant(session, player)
    ai = bot.build_ai(player, profile, policy, seed=1)
    scoring = bot.build_scoring_context(session, board, player, profile, policy)
    fast = level <= SETTINGS.fast_heuristic_max_level
    moves = generate_moves(board, player, None, 0, fast=fast)
    return ai, scoring, ai.rank_moves(scoring, moves)


@pytest.fixture
def rescue_board():
    # Black (0,0)-(0,1) is in atari with its last liberty at (1,0); playing
    # there also captures the white stone at (1,1).
    return board_with(
        9,
        black=[Point(0, 0), Point(0, 1), Point(2, 1), Point(1, 2)],
        white=[Point(1, 1), Point(0, 2), Point(0, 3)],
    )


@pytest.fixture
def capture_board():
    return board_with(
        9,
        black=[Point(4, 2), Point(3, 3), Point(5, 3)],
        white=[Point(4, 3)],
    )


@pytest.mark.parametrize("level", range(3, 11))
def test_group_in_atari_is_rescued(rescue_board, level):
    _, _, ranked = _rank(rescue_board, level)
    assert ranked[0].point == Point(1, 0)


@pytest.mark.parametrize("level", range(1, 11))
def test_capturable_stone_is_captured(capture_board, level):
    _, _, ranked = _rank(capture_board, level)
    assert ranked[0].point == Point(4, 4)


@pytest.mark.parametrize("level", [2, 4, 7, 10])
def test_self_atari_is_suppressed(level):
    board = board_with(9, black=[Point(6, 6)], white=[Point(2, 0), Point(1, 1)])
    ai, scoring, ranked = _rank(board, level)
    if ai.mode == ScoringMode.PROFILE:
        assert ai.evaluate_move(scoring, Point(1, 0)) == SELF_ATARI_SENTINEL
    else:
        assert ai.evaluate_move(scoring, Point(1, 0)) < 0
    assert ranked[0].point != Point(1, 0)
    assert next(c for c in ranked if c.point == Point(1, 0)).suppressed


def test_level_one_profile_does_not_know_self_atari():
    board = board_with(9, black=[Point(6, 6)], white=[Point(2, 0), Point(1, 1)])
    ai = HeuristicAI(Stone.BLACK, get_skill_profile(1), mode=ScoringMode.PROFILE)
    scoring = GoAIBot.build_scoring_context(
        GameSessionView(board=board), board, Stone.BLACK, ai.profile,
        resolve_variant(GameSessionView(board=board), Stone.BLACK),
    )
    assert ai.evaluate_move(scoring, Point(1, 0)) > SELF_ATARI_SENTINEL


def test_ties_keep_generation_order():
    board = BoardManager.empty_board(9)
    ai = HeuristicAI(Stone.BLACK, get_skill_profile(1), mode=ScoringMode.FAST)
    scoring = GoAIBot.build_scoring_context(
        GameSessionView(board=board), board, Stone.BLACK, ai.profile,
        resolve_variant(GameSessionView(board=board), Stone.BLACK),
    )
    moves = generate_fast_moves(board, Stone.BLACK, None, 0)
    ranked = ai.rank_moves(scoring, moves)
    assert len({c.score for c in ranked}) == 1
    assert [c.point for c in ranked] == moves


def test_ranking_is_sorted_best_first(capture_board):
    _, _, ranked = _rank(capture_board, 5)
    scores = [c.score for c in ranked]
    assert scores == sorted(scores, reverse=True)


def test_survival_hunter_uses_aggressive_scoring():
    board = board_with(
        9,
        white=[Point(4, 2), Point(3, 3), Point(5, 3)],
        black=[Point(4, 3)],
    )
    ai, _, ranked = _rank(board, 5, player=Stone.WHITE, variant=GameVariant.SURVIVAL)
    assert ai.mode == ScoringMode.AGGRESSIVE_CAPTURE
    assert ranked[0].point == Point(4, 4)


def test_survival_black_plays_normally():
    board = board_with(9, black=[Point(4, 4)])
    ai, _, _ = _rank(board, 5, variant=GameVariant.SURVIVAL)
    assert ai.mode == ScoringMode.PROFILE


class TestWeights:
    def test_override_shadows_class_constant(self):
        ai = HeuristicAI(
            Stone.BLACK,
            get_skill_profile(5),
            weight_overrides={"WEIGHT_CAPTURE_BASE": 1.0},
        )
        assert ai.WEIGHT_CAPTURE_BASE == 1.0
        assert HeuristicAI.WEIGHT_CAPTURE_BASE == 5000.0
        assert ai.get_weights()["WEIGHT_CAPTURE_BASE"] == 1.0

    def test_unknown_weight_is_rejected(self):
        with pytest.raises(ValueError):
            HeuristicAI(
                Stone.BLACK,
                get_skill_profile(5),
                weight_overrides={"WEIGHT_NOPE": 1.0},
            )

    def test_capture_outweighs_atari_and_territory(self):
        ai = HeuristicAI(Stone.BLACK, get_skill_profile(5))
        assert ai.WEIGHT_SAVE_BASE >= ai.WEIGHT_CAPTURE_BASE > ai.WEIGHT_ATARI_BASE
        assert ai.WEIGHT_ATARI_BASE > ai.WEIGHT_TERRITORY_DEFENSIVE
        assert ai.WEIGHT_ATARI_BASE > ai.WEIGHT_TERRITORY_STRATEGY_CAP


def test_breakdown_reports_raw_features(capture_board):
    ai = HeuristicAI(Stone.BLACK, get_skill_profile(4))
    scoring = GoAIBot.build_scoring_context(
        GameSessionView(board=capture_board), capture_board, Stone.BLACK,
        ai.profile,
        resolve_variant(GameSessionView(board=capture_board), Stone.BLACK),
    )
    breakdown = ai.get_evaluation_breakdown(scoring, Point(4, 4))
    assert breakdown["capture"] == 1.0
    assert breakdown["self_atari"] == 0.0
    assert breakdown["total"] == ai.evaluate_move(scoring, Point(4, 4))


def test_lookahead_stays_within_bounds(capture_board):
    lookahead = LookAheadEvaluator(max_branches=3, max_depth=2)
    ai = HeuristicAI(Stone.BLACK, get_skill_profile(10), lookahead=lookahead)
    scoring = GoAIBot.build_scoring_context(
        GameSessionView(board=capture_board), capture_board, Stone.BLACK,
        ai.profile,
        resolve_variant(GameSessionView(board=capture_board), Stone.BLACK),
    )
    lookahead.reset_counters()
    ai.evaluate_move(scoring, Point(0, 0))
    assert 0 < lookahead.simulations <= lookahead.max_simulations(9)
    assert ai.describe()["max_depth"] == 2


def _scoring_for(ai, board):
    session = GameSessionView(board=board)
    return GoAIBot.build_scoring_context(
        session, board, Stone.BLACK, ai.profile, resolve_variant(session, Stone.BLACK)
    )


def test_territory_strategy_term_is_capped(monkeypatch, capture_board):
    ai = HeuristicAI(Stone.BLACK, get_skill_profile(8))
    scoring = _scoring_for(ai, capture_board)

    monkeypatch.setattr(
        "goai.ai.heuristic_ai.evaluate_territory_strategy", lambda ctx: 0.0
    )
    quiet = ai.evaluate_move(scoring, Point(7, 7))
    monkeypatch.setattr(
        "goai.ai.heuristic_ai.evaluate_territory_strategy", lambda ctx: 5000.0
    )
    boosted = ai.evaluate_move(scoring, Point(7, 7))

    assert boosted - quiet == pytest.approx(ai.WEIGHT_TERRITORY_STRATEGY_CAP)


class TestRescueReading:
    def test_rescue_that_escapes_the_chase(self, rescue_board):
        ai = HeuristicAI(Stone.BLACK, get_skill_profile(10))
        ctx = _scoring_for(ai, rescue_board).for_point(Point(1, 0))
        assert ctx.is_rescue
        assert ai._rescue_score(ctx) >= ai.WEIGHT_SAVE_BASE

    def test_rescue_into_a_dead_end_is_doomed(self):
        # (1,0) lifts the corner stone to two liberties, but White at (1,1)
        # leaves only (2,0), where the stones have no liberty at all.
        board = board_with(
            9,
            black=[Point(0, 0)],
            white=[Point(0, 1), Point(3, 0), Point(2, 1)],
        )
        ai = HeuristicAI(Stone.BLACK, get_skill_profile(10))
        ctx = _scoring_for(ai, board).for_point(Point(1, 0))
        assert ctx.is_rescue
        assert 0 < ai._rescue_score(ctx) < ai.WEIGHT_SAVE_BASE

    def test_shallow_profile_trusts_the_rescue(self):
        board = board_with(
            9,
            black=[Point(0, 0)],
            white=[Point(0, 1), Point(3, 0), Point(2, 1)],
        )
        ai = HeuristicAI(Stone.BLACK, get_skill_profile(1), mode=ScoringMode.PROFILE)
        ctx = _scoring_for(ai, board).for_point(Point(1, 0))
        assert ai._rescue_score(ctx) >= ai.WEIGHT_SAVE_BASE


def test_seed_is_derived_from_level_and_colour():
    black = HeuristicAI(Stone.BLACK, get_skill_profile(5))
    assert black.rng_seed == derive_training_seed(5, Stone.BLACK)
    assert HeuristicAI(Stone.WHITE, get_skill_profile(5)).rng_seed != black.rng_seed
    assert HeuristicAI(Stone.BLACK, get_skill_profile(5), rng_seed=7).rng_seed == 7
    assert repr(black) == "HeuristicAI(player=black, level=5)"
