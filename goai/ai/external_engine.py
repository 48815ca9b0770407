"""
Adapters for full-strength Go engines.

Two transports are supported:

- :class:`ExternalEngineClient` POSTs the position to an HTTP move service
  (``GOAI_EXTERNAL_ENGINE_URL``) with aiohttp.
- :class:`GTPEngineClient` runs a local GTP binary such as ``gnugo --mode
  gtp`` (``GOAI_GTP_COMMAND``) for one request and reads its answers.

Both return a :class:`~goai.models.Point` (``PASS_POINT`` for a pass) and
raise :class:`~goai.errors.ExternalEngineError` (or its
:class:`~goai.errors.AITimeoutError` subclass) on any failure. Neither
validates the move; the turn pipeline re-checks it against the true board.

Wire format on the HTTP side::

    POST {url}
    {"boardState": [[0|1|2, ...], ...], "boardSize": 19,
     "player": "black", "moveHistory": [{"x": 3, "y": 3, "player": 1}],
     "level": 7}

    200 {"move": {"x": 3, "y": 15}}   # or {"move": null} for a pass
    200 {"error": "..."}
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence

import aiohttp

from ..errors import AITimeoutError, ExternalEngineError
from ..models import PASS_POINT, Board, MoveRecord, Point, Stone

logger = logging.getLogger(__name__)

__all__ = [
    "ExternalEngineClient",
    "GTPEngineClient",
    "GTP_LETTERS",
    "MoveEngine",
    "board_to_wire",
    "gtp_to_point",
    "point_to_gtp",
]

# GTP column letters; "I" is skipped.
GTP_LETTERS = "ABCDEFGHJKLMNOPQRST"

_STONE_CODES = {Stone.BLACK: 1, Stone.WHITE: 2}


class MoveEngine(Protocol):
    """Anything that can propose a move for a position."""

    name: str

    async def generate_move(
        self,
        board: Board,
        player: Stone,
        move_history: Sequence[MoveRecord],
        level: Optional[int] = None,
    ) -> Point:
        ...


def point_to_gtp(point: Point, board_size: int) -> str:
    """``Point(3, 15)`` on 19x19 -> ``"D4"``; passes and off-board -> ``"pass"``."""
    if point.is_pass:
        return "pass"
    if not (0 <= point.x < min(board_size, len(GTP_LETTERS))
            and 0 <= point.y < board_size):
        return "pass"
    return f"{GTP_LETTERS[point.x]}{board_size - point.y}"


def gtp_to_point(coord: str, board_size: int) -> Point:
    """Inverse of :func:`point_to_gtp`.

    Unparseable coordinates are logged and read as a pass.
    """
    normalized = coord.strip().upper()
    if normalized in ("", "PASS"):
        return PASS_POINT

    x = GTP_LETTERS.find(normalized[0])
    if x < 0 or x >= board_size:
        logger.warning("Invalid GTP column letter: %s", normalized[0])
        return PASS_POINT
    try:
        row = int(normalized[1:])
    except ValueError:
        logger.warning("Invalid GTP row: %s", normalized[1:])
        return PASS_POINT
    if not 1 <= row <= board_size:
        logger.warning("GTP row out of range: %d", row)
        return PASS_POINT
    return Point(x, board_size - row)


def board_to_wire(board: Board) -> list[list[int]]:
    """Numeric board: 0 empty, 1 black, 2 white."""
    return [[_STONE_CODES.get(cell, 0) for cell in row] for row in board]


class ExternalEngineClient:
    """HTTP move service client."""

    name = "external"

    def __init__(self, url: str, timeout_sec: float = 10.0):
        self.url = url.rstrip("/")
        self.timeout_sec = timeout_sec

    def _payload(
        self,
        board: Board,
        player: Stone,
        move_history: Sequence[MoveRecord],
        level: Optional[int],
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "boardState": board_to_wire(board),
            "boardSize": len(board),
            "player": player.value,
            "moveHistory": [
                {"x": m.x, "y": m.y, "player": _STONE_CODES[m.player]}
                for m in move_history
            ],
        }
        if level is not None:
            payload["level"] = level
        return payload

    async def generate_move(
        self,
        board: Board,
        player: Stone,
        move_history: Sequence[MoveRecord],
        level: Optional[int] = None,
    ) -> Point:
        payload = self._payload(board, player, move_history, level)
        timeout = aiohttp.ClientTimeout(total=self.timeout_sec)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, json=payload) as resp:
                    if resp.status != 200:
                        text = await resp.text()
                        raise ExternalEngineError(
                            f"Engine returned HTTP {resp.status}: {text[:200]}",
                            engine=self.name,
                            status=resp.status,
                        )
                    try:
                        data = await resp.json()
                    except (ValueError, aiohttp.ContentTypeError) as e:
                        raise ExternalEngineError(
                            "Engine returned invalid JSON", engine=self.name
                        ) from e
        except asyncio.TimeoutError as e:
            raise AITimeoutError(
                "External engine timed out",
                time_limit_ms=int(self.timeout_sec * 1000),
                engine=self.name,
            ) from e
        except aiohttp.ClientError as e:
            raise ExternalEngineError(
                f"External engine unreachable: {e}", engine=self.name
            ) from e

        return self._parse_response(data, len(board))

    def _parse_response(self, data: Any, board_size: int) -> Point:
        if not isinstance(data, dict):
            raise ExternalEngineError(
                "Malformed engine response", engine=self.name
            )
        if data.get("error"):
            raise ExternalEngineError(
                f"Engine error: {data['error']}", engine=self.name
            )
        if "move" not in data:
            raise ExternalEngineError(
                "Engine response has no move", engine=self.name
            )
        move = data["move"]
        if move is None:
            return PASS_POINT
        try:
            point = Point(int(move["x"]), int(move["y"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalEngineError(
                f"Malformed engine move: {move!r}", engine=self.name
            ) from e
        logger.debug(
            "External engine proposed (%d, %d) on %dx%d",
            point.x, point.y, board_size, board_size,
        )
        return point

    async def check_health(self) -> bool:
        """True when ``{base}/api/health`` answers 200 within 5 seconds."""
        base = self.url.split("/api/", 1)[0]
        timeout = aiohttp.ClientTimeout(total=5)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(f"{base}/api/health") as resp:
                    return resp.status == 200
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("External engine health check failed: %s", e)
            return False


class GTPEngineClient:
    """One-shot GTP session against a local engine binary.

    The whole position is replayed from the move history on every request,
    so no engine state survives between turns.
    """

    name = "gtp"

    def __init__(self, command: Sequence[str], timeout_sec: float = 10.0):
        if not command:
            raise ValueError("GTP command must not be empty")
        self.command = list(command)
        self.timeout_sec = timeout_sec

    def build_commands(
        self,
        board_size: int,
        player: Stone,
        move_history: Sequence[MoveRecord],
    ) -> list[str]:
        commands = [f"boardsize {board_size}", "clear_board"]
        for move in move_history:
            commands.append(
                f"play {move.player.value} {point_to_gtp(move.point, board_size)}"
            )
        commands.append(f"genmove {player.value}")
        commands.append("quit")
        return commands

    @staticmethod
    def parse_responses(output: str) -> list[str]:
        """Split GTP output into response bodies; failures raise."""
        responses = []
        for block in output.replace("\r", "").split("\n\n"):
            block = block.strip()
            if not block:
                continue
            if block.startswith("?"):
                raise ExternalEngineError(
                    f"GTP command failed: {block[1:].strip()}", engine="gtp"
                )
            if block.startswith("="):
                # "=id body" or "= body"
                body = block[1:].lstrip("0123456789").strip()
                responses.append(body)
        return responses

    async def generate_move(
        self,
        board: Board,
        player: Stone,
        move_history: Sequence[MoveRecord],
        level: Optional[int] = None,
    ) -> Point:
        board_size = len(board)
        script = "\n".join(
            self.build_commands(board_size, player, move_history)
        ) + "\n"

        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalEngineError(
                f"Cannot start GTP engine: {e}", engine=self.name
            ) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                proc.communicate(script.encode()),
                timeout=self.timeout_sec,
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise AITimeoutError(
                "GTP engine timed out",
                time_limit_ms=int(self.timeout_sec * 1000),
                engine=self.name,
            ) from e

        if proc.returncode not in (0, None):
            raise ExternalEngineError(
                f"GTP engine exited with {proc.returncode}: "
                f"{stderr_bytes.decode(errors='replace')[:200]}",
                engine=self.name,
            )

        responses = self.parse_responses(stdout_bytes.decode(errors="replace"))
        # The last answer is the empty reply to "quit"; genmove precedes it.
        if len(responses) < 2:
            raise ExternalEngineError(
                "GTP engine produced no move", engine=self.name
            )
        vertex = responses[-2]
        if vertex.lower() == "resign":
            raise ExternalEngineError("GTP engine resigned", engine=self.name)
        return gtp_to_point(vertex, board_size)
