"""Board-level helpers for the Go AI service.

Everything here is a pure function of the board it is given: flood-fill
grouping, liberty counting, occupancy statistics and area scoring. The
legality of moves lives in :mod:`goai.game_engine`; nothing in this module
places or removes stones on a caller's board.
"""
from __future__ import annotations

from collections import deque

from .models import Board, Group, Point, Stone

__all__ = ["BoardManager"]

_ORTHOGONAL = ((0, -1), (0, 1), (-1, 0), (1, 0))


class BoardManager:
    """Helper for board-level queries used by the engine and evaluators.

    It is side-effect-free; callers pass a ``Board`` (``board[y][x]``) and
    receive derived views or new value objects.
    """

    @staticmethod
    def is_on_board(point: Point, size: int) -> bool:
        return 0 <= point.x < size and 0 <= point.y < size

    @staticmethod
    def get_neighbors(point: Point, size: int) -> list[Point]:
        """Orthogonal neighbours of ``point`` that lie on the board."""
        result = []
        for dx, dy in _ORTHOGONAL:
            nx, ny = point.x + dx, point.y + dy
            if 0 <= nx < size and 0 <= ny < size:
                result.append(Point(nx, ny))
        return result

    @staticmethod
    def get_surrounding(point: Point, size: int) -> list[Point]:
        """The up to eight points of the 3x3 block around ``point``."""
        result = []
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                nx, ny = point.x + dx, point.y + dy
                if 0 <= nx < size and 0 <= ny < size:
                    result.append(Point(nx, ny))
        return result

    @staticmethod
    def stone_at(board: Board, point: Point) -> Stone | None:
        return board[point.y][point.x]

    @staticmethod
    def find_group(
        board: Board, point: Point, player: Stone
    ) -> Group | None:
        """Flood-fill the group containing ``point``.

        Returns ``None`` when ``point`` is off the board or does not hold a
        stone of ``player``.
        """
        size = len(board)
        if not BoardManager.is_on_board(point, size):
            return None
        if board[point.y][point.x] != player:
            return None

        stones: list[Point] = []
        liberties: set[Point] = set()
        visited = {point}
        queue = deque([point])
        while queue:
            current = queue.popleft()
            stones.append(current)
            for n in BoardManager.get_neighbors(current, size):
                occupant = board[n.y][n.x]
                if occupant is None:
                    liberties.add(n)
                elif occupant == player and n not in visited:
                    visited.add(n)
                    queue.append(n)

        return Group(
            stones=tuple(stones),
            liberty_points=frozenset(liberties),
            player=player,
        )

    @staticmethod
    def get_all_groups(board: Board, player: Stone) -> list[Group]:
        """Every group of ``player`` in row-major discovery order."""
        size = len(board)
        seen: set[Point] = set()
        groups: list[Group] = []
        for y in range(size):
            for x in range(size):
                p = Point(x, y)
                if board[y][x] != player or p in seen:
                    continue
                group = BoardManager.find_group(board, p, player)
                if group is not None:
                    seen.update(group.stones)
                    groups.append(group)
        return groups

    @staticmethod
    def get_all_liberties(board: Board, player: Stone) -> set[Point]:
        libs: set[Point] = set()
        for group in BoardManager.get_all_groups(board, player):
            libs |= group.liberty_points
        return libs

    @staticmethod
    def empty_points(board: Board) -> list[Point]:
        size = len(board)
        return [
            Point(x, y)
            for y in range(size)
            for x in range(size)
            if board[y][x] is None
        ]

    @staticmethod
    def occupied_points(
        board: Board, player: Stone | None = None
    ) -> list[Point]:
        """Points holding a stone (of ``player`` when given)."""
        size = len(board)
        result = []
        for y in range(size):
            for x in range(size):
                occupant = board[y][x]
                if occupant is None:
                    continue
                if player is None or occupant == player:
                    result.append(Point(x, y))
        return result

    @staticmethod
    def count_stones(board: Board, player: Stone) -> int:
        return sum(row.count(player) for row in board)

    @staticmethod
    def occupancy_ratio(board: Board) -> float:
        size = len(board)
        if size == 0:
            return 0.0
        filled = sum(1 for row in board for cell in row if cell is not None)
        return filled / (size * size)

    @staticmethod
    def copy_board(board: Board) -> Board:
        return [list(row) for row in board]

    @staticmethod
    def empty_board(size: int) -> Board:
        return [[None] * size for _ in range(size)]

    @staticmethod
    def area_score(
        board: Board, captures: dict[Stone, int] | None = None
    ) -> dict[Stone, int]:
        """Area score: stones + single-colour empty regions + captures.

        An empty region bordered by both colours (or by none) is neutral.
        """
        size = len(board)
        score = {
            Stone.BLACK: BoardManager.count_stones(board, Stone.BLACK),
            Stone.WHITE: BoardManager.count_stones(board, Stone.WHITE),
        }

        visited: set[Point] = set()
        for start in BoardManager.empty_points(board):
            if start in visited:
                continue
            region = []
            borders: set[Stone] = set()
            visited.add(start)
            queue = deque([start])
            while queue:
                current = queue.popleft()
                region.append(current)
                for n in BoardManager.get_neighbors(current, size):
                    occupant = board[n.y][n.x]
                    if occupant is not None:
                        borders.add(occupant)
                    elif n not in visited:
                        visited.add(n)
                        queue.append(n)
            if len(borders) == 1:
                owner = next(iter(borders))
                score[owner] += len(region)

        if captures:
            for player in (Stone.BLACK, Stone.WHITE):
                score[player] += captures.get(player, 0)
        return score
