from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = str(raw).strip().lower()
    if v in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


@dataclass(frozen=True)
class FeatureFlags:
    """Environment-driven switches for the optional location endpoints.

    Defaults keep every endpoint on; search debug logging is off.
    """

    plot_search: bool
    nearby: bool
    suggestions: bool
    search_debug: bool

    @classmethod
    def from_env(cls) -> "FeatureFlags":
        return cls(
            plot_search=_env_bool("BWLOC_FEATURE_PLOT_SEARCH", True),
            nearby=_env_bool("BWLOC_FEATURE_NEARBY", True),
            suggestions=_env_bool("BWLOC_FEATURE_SUGGESTIONS", True),
            search_debug=_env_bool("BWLOC_SEARCH_DEBUG", False),
        )


@lru_cache(maxsize=1)
def get_flags() -> FeatureFlags:
    return FeatureFlags.from_env()


def reset_flags_cache() -> None:
    """Test helper to force env re-read."""

    get_flags.cache_clear()


def require_enabled(flag: bool, *, message: Optional[str] = None) -> None:
    if flag:
        return
    raise RuntimeError(message or "Feature is disabled")
