"""Typed navigation destinations, one variant per screen.

Each variant carries already-validated parameters. Construction from raw
routing parameters lives in ``navcaddy.services.destination_resolver``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import ClassVar, Optional, Union
from urllib.parse import urlencode

from .intent import Lie, Module


class _Destination:
    module: ClassVar[Module]
    screen: ClassVar[str]

    def route_parameters(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is None:
                continue
            params[f.name] = value.value if isinstance(value, Lie) else str(value)
        return params

    def to_route(self) -> str:
        """Deep-link route, e.g. ``caddy/score_entry?hole=5``."""
        base = f"{self.module.value}/{self.screen}"
        params = self.route_parameters()
        if not params:
            return base
        return f"{base}?{urlencode(sorted(params.items()))}"


@dataclass(frozen=True)
class ClubAdjustment(_Destination):
    module = Module.CADDY
    screen = "club_adjustment"

    club: str


@dataclass(frozen=True)
class ShotRecommendation(_Destination):
    module = Module.CADDY
    screen = "shot_recommendation"

    yardage: Optional[int] = None
    club: Optional[str] = None
    lie: Optional[Lie] = None
    wind: Optional[str] = None


@dataclass(frozen=True)
class ScoreEntry(_Destination):
    module = Module.CADDY
    screen = "score_entry"

    hole: int


@dataclass(frozen=True)
class RoundStart(_Destination):
    module = Module.CADDY
    screen = "round_start"

    course: Optional[str] = None


@dataclass(frozen=True)
class RoundEnd(_Destination):
    module = Module.CADDY
    screen = "round_end"

    round_id: Optional[str] = None


@dataclass(frozen=True)
class WeatherCheck(_Destination):
    module = Module.CADDY
    screen = "weather"


@dataclass(frozen=True)
class StatsLookup(_Destination):
    module = Module.CADDY
    screen = "stats"

    stat_type: Optional[str] = None


@dataclass(frozen=True)
class CourseInfo(_Destination):
    module = Module.CADDY
    screen = "course_info"

    course: Optional[str] = None
    hole: Optional[int] = None


@dataclass(frozen=True)
class DrillScreen(_Destination):
    module = Module.COACH
    screen = "drill"

    focus_area: Optional[str] = None


@dataclass(frozen=True)
class PatternReview(_Destination):
    module = Module.COACH
    screen = "pattern_review"

    club: Optional[str] = None


@dataclass(frozen=True)
class RecoveryOverview(_Destination):
    module = Module.RECOVERY
    screen = "recovery_overview"

    fatigue: Optional[int] = None


@dataclass(frozen=True)
class EquipmentManagement(_Destination):
    module = Module.SETTINGS
    screen = "equipment"


@dataclass(frozen=True)
class SettingsScreen(_Destination):
    module = Module.SETTINGS
    screen = "settings"

    setting_key: Optional[str] = None


@dataclass(frozen=True)
class HelpScreen(_Destination):
    module = Module.SETTINGS
    screen = "help"


@dataclass(frozen=True)
class FeedbackScreen(_Destination):
    module = Module.SETTINGS
    screen = "feedback"


NavCaddyDestination = Union[
    ClubAdjustment,
    ShotRecommendation,
    ScoreEntry,
    RoundStart,
    RoundEnd,
    WeatherCheck,
    StatsLookup,
    CourseInfo,
    DrillScreen,
    PatternReview,
    RecoveryOverview,
    EquipmentManagement,
    SettingsScreen,
    HelpScreen,
    FeedbackScreen,
]
