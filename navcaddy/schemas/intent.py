"""Intent, entity and routing-target types shared by every engine component."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_INT_RE = re.compile(r"-?\d+")


def _snake(value: str) -> str:
    return _CAMEL_RE.sub("_", value.strip()).replace("-", "_").replace(" ", "_").lower()


class IntentType(str, Enum):
    CLUB_ADJUSTMENT = "club_adjustment"
    RECOVERY_CHECK = "recovery_check"
    SHOT_RECOMMENDATION = "shot_recommendation"
    SCORE_ENTRY = "score_entry"
    PATTERN_QUERY = "pattern_query"
    DRILL_REQUEST = "drill_request"
    WEATHER_CHECK = "weather_check"
    STATS_LOOKUP = "stats_lookup"
    ROUND_START = "round_start"
    ROUND_END = "round_end"
    EQUIPMENT_INFO = "equipment_info"
    COURSE_INFO = "course_info"
    SETTINGS_CHANGE = "settings_change"
    HELP_REQUEST = "help_request"
    FEEDBACK = "feedback"

    @classmethod
    def parse(cls, value: Any) -> Optional["IntentType"]:
        """Accept ``club_adjustment``, ``clubAdjustment`` or ``CLUB_ADJUSTMENT``."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            return cls(_snake(value))
        except ValueError:
            return None


class Module(str, Enum):
    CADDY = "caddy"
    COACH = "coach"
    RECOVERY = "recovery"
    SETTINGS = "settings"


class Lie(str, Enum):
    TEE = "tee"
    FAIRWAY = "fairway"
    ROUGH = "rough"
    BUNKER = "bunker"
    GREEN = "green"
    FRINGE = "fringe"
    HAZARD = "hazard"

    @classmethod
    def parse(cls, value: Any) -> Optional["Lie"]:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        raw = value.strip().lower()
        if raw in ("sand", "sand trap", "trap"):
            raw = "bunker"
        try:
            return cls(raw)
        except ValueError:
            return None


class Prerequisite(str, Enum):
    BAG_CONFIGURED = "bag_configured"
    ROUND_ACTIVE = "round_active"
    RECOVERY_DATA = "recovery_data"
    COURSE_SELECTED = "course_selected"


def _coerce_int(value: Any) -> Optional[int]:
    """Best-effort integer; anything non-finite or unparseable is ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_RE.search(value)
        if not match:
            return None
        try:
            return int(match.group())
        except ValueError:
            # exceeds the interpreter's int string conversion limit
            return None
    return None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ExtractedEntities(BaseModel):
    """Entities pulled out of an utterance.

    Invalid or out-of-range values never raise; they are dropped to ``None``.
    """

    model_config = ConfigDict(frozen=True)

    club: Optional[str] = None
    yardage: Optional[int] = None
    lie: Optional[Lie] = None
    wind: Optional[str] = None
    fatigue: Optional[int] = None
    pain: Optional[str] = None
    score_context: Optional[str] = None
    hole_number: Optional[int] = None

    @field_validator("club", "wind", "pain", "score_context", mode="before")
    @classmethod
    def _strip_text(cls, v: Any) -> Optional[str]:
        return _clean_text(v)

    @field_validator("yardage", mode="before")
    @classmethod
    def _positive_yardage(cls, v: Any) -> Optional[int]:
        n = _coerce_int(v)
        return n if n is not None and n > 0 else None

    @field_validator("lie", mode="before")
    @classmethod
    def _known_lie(cls, v: Any) -> Optional[Lie]:
        return Lie.parse(v)

    @field_validator("fatigue", mode="before")
    @classmethod
    def _clamp_fatigue(cls, v: Any) -> Optional[int]:
        n = _coerce_int(v)
        if n is None:
            return None
        return max(1, min(10, n))

    @field_validator("hole_number", mode="before")
    @classmethod
    def _valid_hole(cls, v: Any) -> Optional[int]:
        n = _coerce_int(v)
        return n if n is not None and 1 <= n <= 18 else None

    def missing(self, names: tuple[str, ...]) -> list[str]:
        return [name for name in names if getattr(self, name, None) is None]


class ParsedIntent(BaseModel):
    """Structured output of one classification call."""

    model_config = ConfigDict(frozen=True)

    intent_type: IntentType
    confidence: float
    entities: ExtractedEntities = ExtractedEntities()
    user_goal: Optional[str] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError, OverflowError):
            return 0.0
        if math.isnan(value):
            return 0.0
        return max(0.0, min(1.0, value))

    @field_validator("user_goal", mode="before")
    @classmethod
    def _strip_goal(cls, v: Any) -> Optional[str]:
        return _clean_text(v)


@dataclass(frozen=True)
class RoutingTarget:
    """Module + screen + string parameters. Parameter order is irrelevant."""

    module: Module
    screen: str
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "parameters",
            {str(k): str(v) for k, v in sorted(dict(self.parameters).items())},
        )

    def __hash__(self) -> int:
        return hash((self.module, self.screen, frozenset(self.parameters.items())))
