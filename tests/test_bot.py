"""Tests for the end-to-end AI turn pipeline."""

from unittest.mock import AsyncMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from goai.ai.external_engine import ExternalEngineClient, GTPEngineClient
from goai.ai.profiles import get_skill_profile
from goai.bot import GoAIBot, SelectionSource
from goai.board_manager import BoardManager
from goai.config import EngineSettings
from goai.errors import AITimeoutError, ExternalEngineError
from goai.metrics import AI_ENGINE_FALLBACKS, AI_TURN_OUTCOMES
from goai.models import (
    PASS_POINT,
    DeltaOutcome,
    GameStatus,
    GameVariant,
    Point,
    Stone,
)

from conftest import board_with, counter_value

SETTINGS = EngineSettings()


@pytest.fixture
def no_mistakes(monkeypatch):
    """Profiles with mistake injection turned off."""
    def _profile(level):
        return get_skill_profile(level).model_copy(update={"mistake_rate": 0.0})

    monkeypatch.setattr("goai.bot.get_skill_profile", _profile)


@pytest.fixture
def capture_board():
    return board_with(
        9,
        black=[Point(4, 2), Point(3, 3), Point(5, 3)],
        white=[Point(4, 3)],
    )


def _engine(**kwargs):
    engine = AsyncMock()
    engine.name = "mock"
    engine.generate_move = AsyncMock(**kwargs)
    return engine


@pytest.mark.timeout(60)
class TestHeuristicTurn:
    @pytest.mark.asyncio
    async def test_skips_while_reveal_is_animating(self, session_factory):
        bot = GoAIBot(settings=SETTINGS, use_engine=False)
        session = session_factory(status=GameStatus.HIDDEN_REVEAL_ANIMATING)
        result = await bot.play_turn(session, 5)
        assert result.skipped
        assert result.source == SelectionSource.NONE
        assert result.selected_move is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("level", [2, 6, 10])
    async def test_captures_the_hanging_stone(
        self, no_mistakes, session_factory, capture_board, level
    ):
        bot = GoAIBot(settings=SETTINGS, use_engine=False)
        session = session_factory(board=capture_board)
        result = await bot.play_turn(session, level, seed=3)

        assert result.source == SelectionSource.HEURISTIC
        assert result.selected_move == Point(4, 4)
        assert result.delta.captured_stones == [Point(4, 3)]
        assert result.delta.captures[Stone.BLACK] == 1
        assert not result.is_mistake
        assert result.candidates > 0
        assert result.level == level

    @pytest.mark.asyncio
    async def test_same_seed_same_turn(self, session_factory):
        bot = GoAIBot(settings=SETTINGS, use_engine=False)
        session = session_factory(board=board_with(9, black=[Point(4, 4)]),
                                  current_player=Stone.WHITE)
        first = await bot.play_turn(session, 1, seed=99)
        second = await bot.play_turn(session, 1, seed=99)
        assert first.selected_move == second.selected_move
        assert first.is_mistake == second.is_mistake

    @pytest.mark.asyncio
    async def test_resigns_without_legal_moves(self, session_factory):
        board = board_with(2, white=[Point(0, 0), Point(1, 1)])
        bot = GoAIBot(settings=SETTINGS, use_engine=False)
        before = counter_value(AI_TURN_OUTCOMES, {"outcome": "resign"})

        result = await bot.play_turn(session_factory(board=board), 4)

        assert result.delta.outcome == DeltaOutcome.RESIGN
        assert result.delta.winner == Stone.WHITE
        assert result.source == SelectionSource.NONE
        assert counter_value(AI_TURN_OUTCOMES, {"outcome": "resign"}) == before + 1

    @pytest.mark.asyncio
    async def test_never_plays_onto_a_hidden_stone_it_cannot_see(
        self, no_mistakes, session_factory
    ):
        # Black's hidden stone sits on the only capturing point; the masked
        # board shows it empty, so the commit turns into a reveal.
        board = board_with(
            9,
            white=[Point(4, 2), Point(3, 3), Point(5, 3), Point(0, 0)],
            black=[Point(4, 3), Point(4, 4)],
        )
        session = session_factory(
            board=board,
            current_player=Stone.WHITE,
            moves=[(4, 3, Stone.BLACK), (0, 0, Stone.WHITE), (4, 4, Stone.BLACK)],
            variant=GameVariant.HIDDEN,
            is_single_player=True,
            hidden_moves={2: True},
        )
        bot = GoAIBot(settings=SETTINGS, use_engine=False)
        result = await bot.play_turn(session, 6, seed=1)

        assert result.delta.outcome == DeltaOutcome.REVEAL
        assert result.delta.permanently_revealed == [Point(4, 4)]
        assert result.delta.board is None

    @pytest.mark.asyncio
    @pytest.mark.timeout(120)
    async def test_mistakes_never_play_self_atari(self, session_factory):
        # Every first-line point except (1,0) and (5,0) is a self-atari.
        board = board_with(
            7, white=[Point(x, 1) for x in range(7)] + [Point(3, 0)]
        )
        session = session_factory(board=board)
        bot = GoAIBot(
            settings=EngineSettings(lookahead_max_depth=1), use_engine=False
        )
        mistakes = 0
        for seed in range(40):
            result = await bot.play_turn(session, 4, seed=seed)
            mistakes += result.is_mistake
            group = BoardManager.find_group(
                result.delta.board, result.selected_move, Stone.BLACK
            )
            assert group.liberties > 1 or result.delta.captured_stones, seed
        assert mistakes > 0


@pytest.mark.timeout(60)
class TestExternalEngine:
    @pytest.mark.asyncio
    async def test_engine_move_is_committed(self, session_factory):
        engine = _engine(return_value=Point(2, 2))
        bot = GoAIBot(settings=SETTINGS, engine=engine)
        result = await bot.play_turn(session_factory(), 7)

        assert result.source == SelectionSource.EXTERNAL
        assert result.selected_move == Point(2, 2)
        assert result.delta.board[2][2] == Stone.BLACK
        engine.generate_move.assert_awaited_once()
        assert engine.generate_move.await_args.args[3] == 7

    @pytest.mark.asyncio
    async def test_engine_sees_the_masked_board(self, session_factory):
        board = board_with(9, black=[Point(3, 3)])
        session = session_factory(
            board=board,
            current_player=Stone.WHITE,
            moves=[(3, 3, Stone.BLACK)],
            variant=GameVariant.HIDDEN,
            is_single_player=True,
            hidden_moves={0: True},
        )
        engine = _engine(return_value=Point(6, 6))
        bot = GoAIBot(settings=SETTINGS, engine=engine)
        await bot.play_turn(session, 7)

        view = engine.generate_move.await_args.args[0]
        assert view[3][3] is None
        assert session.board[3][3] == Stone.BLACK

    @pytest.mark.asyncio
    async def test_engine_does_not_see_hidden_history(self, session_factory):
        board = board_with(9, black=[Point(3, 3), Point(6, 6)], white=[Point(2, 2)])
        session = session_factory(
            board=board,
            current_player=Stone.WHITE,
            moves=[(3, 3, Stone.BLACK), (2, 2, Stone.WHITE), (6, 6, Stone.BLACK)],
            variant=GameVariant.HIDDEN,
            is_single_player=True,
            hidden_moves={0: True},
        )
        engine = _engine(return_value=Point(5, 5))
        bot = GoAIBot(settings=SETTINGS, engine=engine)
        await bot.play_turn(session, 7)

        history = engine.generate_move.await_args.args[2]
        assert [m.point for m in history] == [Point(2, 2), Point(6, 6)]
        commands = GTPEngineClient(["gnugo"]).build_commands(9, Stone.WHITE, history)
        assert "play black D6" not in commands
        assert "play black G3" in commands

    @pytest.mark.asyncio
    async def test_invalid_engine_json_falls_back(
        self, no_mistakes, session_factory, capture_board
    ):
        async def move(request):
            return web.Response(text="<html>busy</html>", content_type="application/json")

        app = web.Application()
        app.router.add_post("/api/move", move)
        before = counter_value(AI_ENGINE_FALLBACKS, {"reason": "error"})
        async with TestServer(app) as server:
            engine = ExternalEngineClient(str(server.make_url("/api/move")))
            bot = GoAIBot(settings=SETTINGS, engine=engine)
            result = await bot.play_turn(session_factory(board=capture_board), 5, seed=2)

        assert result.source == SelectionSource.HEURISTIC
        assert result.selected_move == Point(4, 4)
        assert counter_value(AI_ENGINE_FALLBACKS, {"reason": "error"}) == before + 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kwargs,reason", [
        ({"side_effect": ExternalEngineError("down")}, "error"),
        ({"side_effect": AITimeoutError("slow")}, "timeout"),
        ({"return_value": PASS_POINT}, "illegal"),
        ({"return_value": Point(4, 2)}, "illegal"),
    ])
    async def test_falls_back_to_heuristic(
        self, no_mistakes, session_factory, capture_board, kwargs, reason
    ):
        bot = GoAIBot(settings=SETTINGS, engine=_engine(**kwargs))
        before = counter_value(AI_ENGINE_FALLBACKS, {"reason": reason})

        result = await bot.play_turn(session_factory(board=capture_board), 5, seed=2)

        assert result.source == SelectionSource.HEURISTIC
        assert result.selected_move == Point(4, 4)
        assert counter_value(AI_ENGINE_FALLBACKS, {"reason": reason}) == before + 1

    def test_use_engine_false_ignores_engine(self):
        bot = GoAIBot(settings=SETTINGS, engine=_engine(), use_engine=False)
        assert bot.engine is None
