"""
Rules engine tests: occupancy, capture, ko and suicide.

Every generated move must be legal, and no legal move may leave a group
(of either colour) without liberties.
"""

import pytest

from goai.ai.move_generation import generate_all_moves
from goai.board_manager import BoardManager
from goai.errors import IllegalMoveError
from goai.game_engine import GameEngine, MoveOptions
from goai.models import KoInfo, Point, Stone

from conftest import parse_board


KO_SHAPE = """
    . X O . .
    X O . O .
    . X O . .
    . . . . .
    . . . . .
"""


class TestPlacement:
    def test_empty_point_is_legal_and_board_not_mutated(self, board_factory):
        board = board_factory(size=5)
        result = GameEngine.process_move(board, Point(2, 2), Stone.BLACK, None, 0)
        assert result.is_valid
        assert result.new_board[2][2] == Stone.BLACK
        assert board[2][2] is None
        assert result.captured_stones == []
        assert result.new_ko_info is None

    def test_occupied_point_is_rejected(self, board_factory):
        board = board_factory(size=5, white=[Point(1, 1)])
        result = GameEngine.process_move(board, Point(1, 1), Stone.BLACK, None, 0)
        assert not result.is_valid
        assert result.reason == "occupied"
        assert result.new_board is board

    def test_off_board_point_is_rejected(self, board_factory):
        board = board_factory(size=5)
        result = GameEngine.process_move(board, Point(5, 0), Stone.BLACK, None, 0)
        assert not result.is_valid
        assert result.reason == "occupied"

    def test_single_player_opponent_stone_is_rejected(self, board_factory):
        board = board_factory(size=5, white=[Point(1, 1)])
        options = MoveOptions(is_single_player=True, opponent_player=Stone.WHITE)
        result = GameEngine.process_move(
            board, Point(1, 1), Stone.BLACK, None, 0, options
        )
        assert not result.is_valid
        assert result.reason == "occupied"


class TestCapture:
    def test_corner_capture(self):
        board = parse_board("""
            O X .
            . . .
            . . .
        """)
        result = GameEngine.process_move(board, Point(0, 1), Stone.BLACK, None, 0)
        assert result.is_valid
        assert result.captured_stones == [Point(0, 0)]
        assert result.new_board[0][0] is None

    def test_multi_stone_capture(self):
        board = parse_board("""
            O O . .
            X X X .
            . . . .
            . . . .
        """)
        result = GameEngine.process_move(board, Point(2, 0), Stone.BLACK, None, 0)
        assert result.is_valid
        assert sorted(result.captured_stones) == [Point(0, 0), Point(1, 0)]
        assert result.new_ko_info is None

    def test_capture_takes_priority_over_suicide(self):
        board = parse_board(KO_SHAPE)
        result = GameEngine.process_move(board, Point(2, 1), Stone.BLACK, None, 0)
        assert result.is_valid
        assert result.captured_stones == [Point(1, 1)]


class TestKo:
    def test_single_stone_recapture_creates_ko(self):
        board = parse_board(KO_SHAPE)
        result = GameEngine.process_move(board, Point(2, 1), Stone.BLACK, None, 4)
        assert result.new_ko_info == KoInfo(point=Point(1, 1), turn=5)

    def test_immediate_recapture_is_illegal(self):
        board = parse_board(KO_SHAPE)
        first = GameEngine.process_move(board, Point(2, 1), Stone.BLACK, None, 4)
        retake = GameEngine.process_move(
            first.new_board, Point(1, 1), Stone.WHITE, first.new_ko_info, 5
        )
        assert not retake.is_valid
        assert retake.reason == "ko"

    def test_ko_expires_after_one_move(self):
        board = parse_board(KO_SHAPE)
        first = GameEngine.process_move(board, Point(2, 1), Stone.BLACK, None, 4)
        later = GameEngine.process_move(
            first.new_board, Point(1, 1), Stone.WHITE, first.new_ko_info, 6
        )
        assert later.is_valid
        assert later.captured_stones == [Point(2, 1)]


class TestSuicide:
    BOARD = """
        . X .
        X . .
        . . .
    """

    def test_suicide_is_rejected(self):
        board = parse_board(self.BOARD)
        result = GameEngine.process_move(board, Point(0, 0), Stone.WHITE, None, 0)
        assert not result.is_valid
        assert result.reason == "suicide"

    def test_ignore_suicide_keeps_the_stone(self):
        board = parse_board(self.BOARD)
        result = GameEngine.process_move(
            board, Point(0, 0), Stone.WHITE, None, 0,
            MoveOptions(ignore_suicide=True),
        )
        assert result.is_valid
        assert result.new_board[0][0] == Stone.WHITE

    def test_apply_move_or_raise(self):
        board = parse_board(self.BOARD)
        with pytest.raises(IllegalMoveError) as excinfo:
            GameEngine.apply_move_or_raise(board, Point(0, 0), Stone.WHITE, None, 0)
        assert excinfo.value.reason == "suicide"
        assert excinfo.value.to_dict()["context"]["point"] == "0,0"


@pytest.mark.parametrize("diagram", [
    KO_SHAPE,
    """
        X X O . . . .
        . X O . X . .
        . O X X O O .
        . . O X . X .
        . X . O O . .
        . . X . . X O
        O . . X . O .
    """,
])
@pytest.mark.parametrize("player", [Stone.BLACK, Stone.WHITE])
def test_generated_moves_never_leave_groups_without_liberties(diagram, player):
    board = parse_board(diagram)
    moves = generate_all_moves(board, player, None, 0)
    assert moves
    for point in moves:
        result = GameEngine.process_move(board, point, player, None, 0)
        assert result.is_valid
        for colour in (Stone.BLACK, Stone.WHITE):
            for group in BoardManager.get_all_groups(result.new_board, colour):
                assert group.liberties >= 1
