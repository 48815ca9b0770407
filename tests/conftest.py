"""
Shared pytest fixtures for Go AI service tests.

Boards are built from ASCII diagrams so positions read the way they look on
a real goban: one row per line, ``X`` black, ``O`` white, ``.`` empty.
"""

import os
from pathlib import Path
import sys
from typing import Callable, Dict, List, Optional

import pytest


# =============================================================================
# PROMETHEUS REGISTRY FIX
# =============================================================================
# goai/metrics.py registers its collectors at import time. Test modules that
# import the service through different paths must not trip over
# "Duplicated timeseries in CollectorRegistry".


def _patch_prometheus_registry():
    from prometheus_client.registry import CollectorRegistry

    _original_register = CollectorRegistry.register

    def _safe_register(self, collector):
        """Register collector, ignoring duplicates."""
        try:
            return _original_register(self, collector)
        except ValueError as e:
            if "Duplicated timeseries" not in str(e):
                raise

    # Only patch once
    if not getattr(CollectorRegistry, '_patched_for_tests', False):
        CollectorRegistry.register = _safe_register
        CollectorRegistry._patched_for_tests = True


_patch_prometheus_registry()

# Make `import goai` work without an editable install.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from goai.config import get_settings  # noqa: E402
from goai.models import (  # noqa: E402
    Board,
    GameSessionView,
    MoveRecord,
    Point,
    Stone,
)

_SYMBOLS = {"X": Stone.BLACK, "O": Stone.WHITE, ".": None}


def parse_board(diagram: str) -> Board:
    """Board from a diagram; whitespace inside a row is ignored."""
    rows = [
        line.replace(" ", "")
        for line in diagram.strip().splitlines()
        if line.strip()
    ]
    return [[_SYMBOLS[ch] for ch in row] for row in rows]


def board_with(
    size: int,
    black: List[Point] = (),
    white: List[Point] = (),
) -> Board:
    board: Board = [[None] * size for _ in range(size)]
    for p in black:
        board[p.y][p.x] = Stone.BLACK
    for p in white:
        board[p.y][p.x] = Stone.WHITE
    return board


def counter_value(counter, labels: Dict[str, str]) -> float:
    """Current value of a labelled Counter sample, 0.0 when never touched."""
    metric_name = counter._name  # type: ignore[attr-defined]
    candidate_names = {metric_name, f"{metric_name}_total"}

    for metric in counter.collect():
        for sample in metric.samples:
            if sample.name not in candidate_names:
                continue
            if all(sample.labels.get(k) == v for k, v in labels.items()):
                return float(sample.value)
    return 0.0


def histogram_count(histogram, labels: Dict[str, str]) -> float:
    metric_name = f"{histogram._name}_count"  # type: ignore[attr-defined]
    for metric in histogram.collect():
        for sample in metric.samples:
            if sample.name != metric_name:
                continue
            if all(sample.labels.get(k) == v for k, v in labels.items()):
                return float(sample.value)
    return 0.0


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def board_factory() -> Callable[..., Board]:
    """Factory for boards given either a diagram or explicit stone lists."""

    def _create_board(
        diagram: Optional[str] = None,
        size: int = 9,
        black: List[Point] = (),
        white: List[Point] = (),
    ) -> Board:
        if diagram is not None:
            return parse_board(diagram)
        return board_with(size, black, white)

    return _create_board


@pytest.fixture
def session_factory() -> Callable[..., GameSessionView]:
    """Factory for session snapshots with customizable defaults."""

    def _create_session(
        board: Optional[Board] = None,
        size: int = 9,
        current_player: Stone = Stone.BLACK,
        moves: Optional[List[tuple]] = None,
        **fields,
    ) -> GameSessionView:
        history = [
            MoveRecord(x=x, y=y, player=player) for x, y, player in (moves or [])
        ]
        return GameSessionView(
            board=board if board is not None else board_with(size),
            current_player=current_player,
            move_history=history,
            **fields,
        )

    return _create_session


@pytest.fixture
def clean_settings(monkeypatch):
    """Settings rebuilt from an environment without any GOAI_* variables."""
    for key in list(os.environ):
        if key.startswith("GOAI_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
