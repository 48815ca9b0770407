"""Environment-driven settings for the Go AI service.

All knobs are read from ``GOAI_*`` environment variables once and cached.
Tests that tweak the environment call ``get_settings.cache_clear()``.

Usage:
    from goai.config import get_settings

    settings = get_settings()
    if settings.external_engine_url:
        ...

Variables:

- ``GOAI_EXTERNAL_ENGINE_URL`` (default: empty, disabled)
  HTTP endpoint of a full-strength engine consulted before the heuristic.
- ``GOAI_EXTERNAL_ENGINE_TIMEOUT_SEC`` (default: 10)
- ``GOAI_GTP_COMMAND`` (default: empty, disabled)
  Command line of a local GTP engine, e.g. ``gnugo --mode gtp``.
- ``GOAI_LOOKAHEAD_MAX_BRANCHES`` (default: 5)
- ``GOAI_LOOKAHEAD_MAX_DEPTH`` (default: 2)
  Hard bounds on recursive simulation; cost grows as branches ** depth.
- ``GOAI_FAST_HEURISTIC_MAX_LEVEL`` (default: 3)
  Highest level that uses the fast generator and scorer.
- ``GOAI_MISTAKE_BOTTOM_SHARE`` (default: 0.7)
  Share of injected mistakes drawn from the bottom of the ranking.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from functools import lru_cache
from typing import ClassVar

from .errors import ConfigurationError

__all__ = ["EngineSettings", "get_settings"]


@dataclass(frozen=True)
class EngineSettings:
    """Immutable snapshot of the service configuration."""

    _env_prefix: ClassVar[str] = "GOAI"

    external_engine_url: str = ""
    external_engine_timeout_sec: float = 10.0
    gtp_command: tuple[str, ...] = ()
    lookahead_max_branches: int = 5
    lookahead_max_depth: int = 2
    fast_heuristic_max_level: int = 3
    mistake_bottom_share: float = 0.7

    def __post_init__(self) -> None:
        if self.external_engine_timeout_sec <= 0:
            raise ConfigurationError(
                "External engine timeout must be positive",
                context={"value": self.external_engine_timeout_sec},
            )
        if self.lookahead_max_branches < 1:
            raise ConfigurationError(
                "Look-ahead branch bound must be at least 1",
                context={"value": self.lookahead_max_branches},
            )
        if self.lookahead_max_depth < 0:
            raise ConfigurationError(
                "Look-ahead depth bound must not be negative",
                context={"value": self.lookahead_max_depth},
            )
        if not 0 <= self.fast_heuristic_max_level <= 10:
            raise ConfigurationError(
                "Fast heuristic level bound must be within 0-10",
                context={"value": self.fast_heuristic_max_level},
            )
        if not 0.0 <= self.mistake_bottom_share <= 1.0:
            raise ConfigurationError(
                "Mistake bottom share must be within [0, 1]",
                context={"value": self.mistake_bottom_share},
            )

    @property
    def external_engine_enabled(self) -> bool:
        return bool(self.external_engine_url)

    @property
    def gtp_enabled(self) -> bool:
        return bool(self.gtp_command)

    # -------------------------------------------------------------------------
    # Environment Variable Helpers
    # -------------------------------------------------------------------------

    @classmethod
    def _make_env_key(cls, suffix: str) -> str:
        return f"{cls._env_prefix}_{suffix}"

    @classmethod
    def _get_env_str(cls, suffix: str, default: str) -> str:
        value = os.environ.get(cls._make_env_key(suffix))
        if value is None:
            return default
        return value.strip()

    @classmethod
    def _get_env_int(cls, suffix: str, default: int) -> int:
        key = cls._make_env_key(suffix)
        value = os.environ.get(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be an integer", context={"value": value}
            ) from e

    @classmethod
    def _get_env_float(cls, suffix: str, default: float) -> float:
        key = cls._make_env_key(suffix)
        value = os.environ.get(key)
        if value is None or not value.strip():
            return default
        try:
            return float(value)
        except ValueError as e:
            raise ConfigurationError(
                f"{key} must be a number", context={"value": value}
            ) from e

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            external_engine_url=cls._get_env_str("EXTERNAL_ENGINE_URL", ""),
            external_engine_timeout_sec=cls._get_env_float(
                "EXTERNAL_ENGINE_TIMEOUT_SEC", 10.0
            ),
            gtp_command=tuple(shlex.split(cls._get_env_str("GTP_COMMAND", ""))),
            lookahead_max_branches=cls._get_env_int("LOOKAHEAD_MAX_BRANCHES", 5),
            lookahead_max_depth=cls._get_env_int("LOOKAHEAD_MAX_DEPTH", 2),
            fast_heuristic_max_level=cls._get_env_int(
                "FAST_HEURISTIC_MAX_LEVEL", 3
            ),
            mistake_bottom_share=cls._get_env_float(
                "MISTAKE_BOTTOM_SHARE", 0.7
            ),
        )


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    return EngineSettings.from_env()
