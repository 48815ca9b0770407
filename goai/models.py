"""
Pydantic Models for Go AI Game Sessions
Shapes exchanged between the session host and the AI engine
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, Field


class Stone(str, Enum):
    """Stone colour. An empty intersection is ``None`` on the board."""
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "Stone":
        return Stone.WHITE if self is Stone.BLACK else Stone.BLACK


class Point(NamedTuple):
    """Board intersection, 0-indexed. ``(-1, -1)`` encodes a pass."""
    x: int
    y: int

    @property
    def is_pass(self) -> bool:
        return self.x == -1 and self.y == -1

    def to_key(self) -> str:
        """Convert point to string key"""
        return f"{self.x},{self.y}"


PASS_POINT = Point(-1, -1)

# board[y][x]; always square
Board = List[List[Optional[Stone]]]


@dataclass(frozen=True)
class Group:
    """Maximal orthogonally connected set of same-colour stones.

    Derived from a board on demand and never mutated.
    """
    stones: Tuple[Point, ...]
    liberty_points: FrozenSet[Point]
    player: Stone

    @property
    def liberties(self) -> int:
        return len(self.liberty_points)

    @property
    def size(self) -> int:
        return len(self.stones)

    def contains(self, point: Point) -> bool:
        return point in self.stones

    def shares_stone_with(self, other: "Group") -> bool:
        if other.player != self.player:
            return False
        mine = set(self.stones)
        return any(p in mine for p in other.stones)

    def center(self) -> Tuple[float, float]:
        """Mean stone coordinate as ``(x, y)``."""
        n = len(self.stones)
        return (
            sum(p.x for p in self.stones) / n,
            sum(p.y for p in self.stones) / n,
        )


@dataclass(frozen=True)
class MoveCandidate:
    """Scored candidate produced by a move scorer."""
    point: Point
    score: float
    # Self-atari the scorer ranked at the sentinel; never offered as a mistake.
    suppressed: bool = False


class GameVariant(str, Enum):
    """Game variant enumeration"""
    STANDARD = "standard"
    HIDDEN = "hidden"
    SURVIVAL = "survival"
    CAPTURE_TARGET = "capture_target"


class GameStatus(str, Enum):
    """Game status enumeration"""
    PLAYING = "playing"
    HIDDEN_REVEAL_ANIMATING = "hidden_reveal_animating"
    SCORING = "scoring"
    ENDED = "ended"


class DeltaOutcome(str, Enum):
    """What a committed AI turn amounted to."""
    MOVE = "move"
    RESIGN = "resign"
    REVEAL = "reveal"
    WIN = "win"


class KoInfo(BaseModel):
    """Ko restriction: playing ``point`` is illegal on move index ``turn``."""
    point: Point
    turn: int

    class Config:
        frozen = True


class MoveRecord(BaseModel):
    """Move history entry. Passes are stored as ``(-1, -1)``."""
    x: int
    y: int
    player: Stone

    class Config:
        frozen = True

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    @property
    def is_pass(self) -> bool:
        return self.x == -1 and self.y == -1


class SkillKnowledge(BaseModel):
    """Cumulative technique flags; level k unlocks the k-th flag."""
    basic_rules: bool = Field(True, alias="basicRules")
    avoids_self_atari: bool = Field(False, alias="avoidsSelfAtari")
    sacrifice_and_counter: bool = Field(False, alias="sacrificeAndCounter")
    atari_judgment: bool = Field(False, alias="atariJudgment")
    directional_attack: bool = Field(False, alias="directionalAttack")
    fuseki: bool = False
    territory_and_combat: bool = Field(False, alias="territoryAndCombat")
    advanced_techniques: bool = Field(False, alias="advancedTechniques")
    connection_life_death_movement: bool = Field(
        False, alias="connectionLifeDeathMovement"
    )
    endgame: bool = False

    class Config:
        frozen = True
        populate_by_name = True

    def as_ordered_flags(self) -> List[bool]:
        """Flags in unlock order (level 1 first)."""
        return [getattr(self, name) for name in self.__class__.model_fields]


class SkillProfile(BaseModel):
    """Behavioural parameters for one AI level."""
    level: int = Field(ge=1, le=10)
    name: str
    description: str
    capture_tendency: float = Field(alias="captureTendency", ge=0.0, le=1.0)
    territory_tendency: float = Field(alias="territoryTendency", ge=0.0, le=1.0)
    combat_tendency: float = Field(alias="combatTendency", ge=0.0, le=1.0)
    joseki_usage: float = Field(alias="josekiUsage", ge=0.0, le=1.0)
    life_death_skill: float = Field(alias="lifeDeathSkill", ge=0.0, le=1.0)
    movement_skill: float = Field(alias="movementSkill", ge=0.0, le=1.0)
    mistake_rate: float = Field(alias="mistakeRate", ge=0.0, le=1.0)
    win_focus: float = Field(alias="winFocus", ge=0.0, le=1.0)
    calculation_depth: int = Field(alias="calculationDepth", ge=1, le=10)
    knowledge: SkillKnowledge

    class Config:
        frozen = True
        populate_by_name = True


class TimeControl(BaseModel):
    """Clock settings. ``time_limit`` of 0 means the game is untimed."""
    time_limit: float = Field(0, alias="timeLimit")
    byoyomi_time: float = Field(0, alias="byoyomiTime")
    byoyomi_count: int = Field(0, alias="byoyomiCount")
    fischer: bool = False

    class Config:
        populate_by_name = True


class RevealedStone(BaseModel):
    point: Point
    player: Stone


class RevealAnimation(BaseModel):
    """Hidden-stone reveal played by the client before play resumes."""
    type: str = "hidden_reveal"
    stones: List[RevealedStone]
    start_time: float = Field(alias="startTime")
    duration: int = 2000

    class Config:
        populate_by_name = True


class CapturedStone(BaseModel):
    """Entry of ``just_captured``."""
    point: Point
    player: Stone
    was_hidden: bool = Field(False, alias="wasHidden")

    class Config:
        populate_by_name = True


class PendingCapture(BaseModel):
    """Capture withheld until a hidden-stone reveal animation finishes."""
    stones: List[Point]
    move: Point
    hidden_contributors: List[Point] = Field(
        default_factory=list, alias="hiddenContributors"
    )
    captured_hidden_stones: List[Point] = Field(
        default_factory=list, alias="capturedHiddenStones"
    )

    class Config:
        populate_by_name = True


def _zero_per_colour() -> Dict[Stone, int]:
    return {Stone.BLACK: 0, Stone.WHITE: 0}


def _empty_point_lists() -> Dict[Stone, List[Point]]:
    return {Stone.BLACK: [], Stone.WHITE: []}


class GameSessionView(BaseModel):
    """The part of a live game session the AI engine reads and updates.

    ``turn_deadline`` and ``animation.start_time`` are epoch milliseconds;
    ``time_left`` and ``paused_turn_time_left`` are seconds.
    """
    board: List[List[Optional[Stone]]]
    current_player: Stone = Field(Stone.BLACK, alias="currentPlayer")
    variant: GameVariant = GameVariant.STANDARD
    status: GameStatus = GameStatus.PLAYING
    is_single_player: bool = Field(False, alias="isSinglePlayer")
    ko_info: Optional[KoInfo] = Field(None, alias="koInfo")
    move_history: List[MoveRecord] = Field(
        default_factory=list, alias="moveHistory"
    )
    last_move: Optional[Point] = Field(None, alias="lastMove")

    captures: Dict[Stone, int] = Field(default_factory=_zero_per_colour)
    hidden_stone_captures: Dict[Stone, int] = Field(
        default_factory=_zero_per_colour, alias="hiddenStoneCaptures"
    )
    capture_targets: Optional[Dict[Stone, int]] = Field(
        None, alias="captureTargets"
    )

    hidden_moves: Dict[int, bool] = Field(
        default_factory=dict, alias="hiddenMoves"
    )
    ai_known_hidden: Optional[Dict[int, bool]] = Field(
        None, alias="aiKnownHidden"
    )
    permanently_revealed: List[Point] = Field(
        default_factory=list, alias="permanentlyRevealed"
    )
    pattern_stones: Dict[Stone, List[Point]] = Field(
        default_factory=_empty_point_lists, alias="patternStones"
    )

    survival_turns: int = Field(0, alias="survivalTurns")
    white_turns_played: int = Field(0, alias="whiteTurnsPlayed")

    auto_scoring_turns: Optional[int] = Field(None, alias="autoScoringTurns")
    total_turns: int = Field(0, alias="totalTurns")
    pass_count: int = Field(0, alias="passCount")
    time_control: TimeControl = Field(
        default_factory=TimeControl, alias="timeControl"
    )
    time_left: Dict[Stone, float] = Field(
        default_factory=dict, alias="timeLeft"
    )
    turn_deadline: Optional[float] = Field(None, alias="turnDeadline")
    paused_turn_time_left: Optional[float] = Field(
        None, alias="pausedTurnTimeLeft"
    )

    is_ai_re_turn_after_reveal: bool = Field(
        False, alias="isAiReTurnAfterReveal"
    )
    is_ai_turn_cancelled_after_reveal: bool = Field(
        False, alias="isAiTurnCancelledAfterReveal"
    )
    reveal_animation_end_time: Optional[float] = Field(
        None, alias="revealAnimationEndTime"
    )
    animation: Optional[RevealAnimation] = None
    pending_capture: Optional[PendingCapture] = Field(
        None, alias="pendingCapture"
    )
    just_captured: List[CapturedStone] = Field(
        default_factory=list, alias="justCaptured"
    )
    winner: Optional[Stone] = None
    win_reason: Optional[str] = Field(None, alias="winReason")

    class Config:
        populate_by_name = True

    @property
    def board_size(self) -> int:
        return len(self.board)

    def capture_target_for(self, player: Stone) -> Optional[int]:
        if not self.capture_targets:
            return None
        return self.capture_targets.get(player)

    def patterns_for(self, player: Stone) -> List[Point]:
        return self.pattern_stones.get(player, [])


class SessionDelta(BaseModel):
    """Session fields changed by one AI turn, plus what happened.

    Only fields explicitly set on construction are applied by
    :func:`goai.session.apply_delta`.
    """
    outcome: DeltaOutcome
    captured_stones: List[Point] = Field(
        default_factory=list, alias="capturedStones"
    )

    board: Optional[List[List[Optional[Stone]]]] = None
    current_player: Optional[Stone] = Field(None, alias="currentPlayer")
    status: Optional[GameStatus] = None
    ko_info: Optional[KoInfo] = Field(None, alias="koInfo")
    move_history: Optional[List[MoveRecord]] = Field(None, alias="moveHistory")
    last_move: Optional[Point] = Field(None, alias="lastMove")
    captures: Optional[Dict[Stone, int]] = None
    hidden_stone_captures: Optional[Dict[Stone, int]] = Field(
        None, alias="hiddenStoneCaptures"
    )
    permanently_revealed: Optional[List[Point]] = Field(
        None, alias="permanentlyRevealed"
    )
    pattern_stones: Optional[Dict[Stone, List[Point]]] = Field(
        None, alias="patternStones"
    )
    white_turns_played: Optional[int] = Field(None, alias="whiteTurnsPlayed")
    total_turns: Optional[int] = Field(None, alias="totalTurns")
    pass_count: Optional[int] = Field(None, alias="passCount")
    time_left: Optional[Dict[Stone, float]] = Field(None, alias="timeLeft")
    turn_deadline: Optional[float] = Field(None, alias="turnDeadline")
    paused_turn_time_left: Optional[float] = Field(
        None, alias="pausedTurnTimeLeft"
    )
    is_ai_re_turn_after_reveal: Optional[bool] = Field(
        None, alias="isAiReTurnAfterReveal"
    )
    is_ai_turn_cancelled_after_reveal: Optional[bool] = Field(
        None, alias="isAiTurnCancelledAfterReveal"
    )
    reveal_animation_end_time: Optional[float] = Field(
        None, alias="revealAnimationEndTime"
    )
    animation: Optional[RevealAnimation] = None
    pending_capture: Optional[PendingCapture] = Field(
        None, alias="pendingCapture"
    )
    just_captured: Optional[List[CapturedStone]] = Field(
        None, alias="justCaptured"
    )
    winner: Optional[Stone] = None
    win_reason: Optional[str] = Field(None, alias="winReason")

    class Config:
        populate_by_name = True

    def session_updates(self) -> Dict[str, Any]:
        """Explicitly set session fields, keyed by attribute name."""
        skip = {"outcome", "captured_stones"}
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name not in skip
        }
