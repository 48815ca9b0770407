"""
Go AI Error Hierarchy

Unified exception hierarchy for consistent error handling across the service.
All custom exceptions inherit from GoAIError for easy catching and filtering.

Usage:
    from goai.errors import IllegalMoveError, ExternalEngineError

    try:
        GameEngine.apply_move_or_raise(board, point, Stone.BLACK, ko, 12)
    except IllegalMoveError as e:
        logger.warning(f"Illegal move: {e.message}, reason: {e.reason}")
"""

from typing import Any

__all__ = [
    # AI errors
    "AIError",
    "AIFallbackError",
    "AITimeoutError",
    "ConfigurationError",
    "ExternalEngineError",
    # Base error
    "GoAIError",
    "IllegalMoveError",
    "InvalidStateError",
    # Game rules errors
    "RulesViolationError",
    # Validation errors
    "ValidationError",
]


class GoAIError(Exception):
    """Base exception for all Go AI service errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "GOAI_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(GoAIError):
    """Move rejected by the rules of Go.

    Attributes:
        rule_ref: Short rule name (e.g., "ko", "suicide")
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        rule_ref: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rule_ref = rule_ref
        if rule_ref:
            self.context["rule_ref"] = rule_ref


class IllegalMoveError(RulesViolationError):
    """A stone cannot be placed at the requested point.

    ``reason`` is one of ``"occupied"``, ``"ko"`` or ``"suicide"``, the same
    values the legality engine reports on :class:`goai.models.MoveResult`.
    """
    code: str = "ILLEGAL_MOVE"

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        point: tuple[int, int] | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, rule_ref=reason, context=context)
        self.reason = reason
        self.point = point
        if point is not None:
            self.context["point"] = f"{point[0]},{point[1]}"


class InvalidStateError(GoAIError):
    """Corrupted or unexpected game session.

    Raised when the session snapshot is in a configuration that normal play
    cannot produce (non-square board, missing current player, ...).
    """
    code: str = "INVALID_STATE"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(GoAIError):
    """Base class for AI-related errors."""
    code: str = "AI_ERROR"


class ExternalEngineError(AIError):
    """External engine call failed or returned an unusable answer."""
    code: str = "EXTERNAL_ENGINE_ERROR"

    def __init__(
        self,
        message: str,
        engine: str | None = None,
        status: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if engine:
            self.context["engine"] = engine
        if status is not None:
            self.context["status"] = status


class AIFallbackError(AIError):
    """AI failed and used fallback move selection.

    Attributes:
        original_error: The exception that triggered the fallback
        fallback_method: Description of fallback used (e.g., "heuristic")
    """
    code: str = "AI_FALLBACK"

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        fallback_method: str = "heuristic",
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.original_error = original_error
        self.fallback_method = fallback_method
        self.context["fallback_method"] = fallback_method
        if original_error:
            self.context["original_error"] = str(original_error)


class AITimeoutError(ExternalEngineError):
    """External engine did not answer within its time limit."""
    code: str = "AI_TIMEOUT"

    def __init__(
        self,
        message: str,
        time_limit_ms: int | None = None,
        engine: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, engine=engine, context=context)
        if time_limit_ms:
            self.context["time_limit_ms"] = time_limit_ms


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(GoAIError):
    """Base class for validation errors."""
    code: str = "VALIDATION_ERROR"


class ConfigurationError(ValidationError):
    """Invalid configuration."""
    code: str = "CONFIGURATION_ERROR"
