"""Routing target -> typed destination. Pure and total: bad input gives None."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from navcaddy.schemas.destinations import (
    ClubAdjustment,
    CourseInfo,
    DrillScreen,
    EquipmentManagement,
    FeedbackScreen,
    HelpScreen,
    NavCaddyDestination,
    PatternReview,
    RecoveryOverview,
    RoundEnd,
    RoundStart,
    ScoreEntry,
    SettingsScreen,
    ShotRecommendation,
    StatsLookup,
    WeatherCheck,
)
from navcaddy.schemas.intent import Lie, Module, RoutingTarget

logger = logging.getLogger(__name__)


class _Invalid(Exception):
    """Internal signal: a required parameter is missing or malformed."""


def _text(params: Mapping[str, str], key: str) -> Optional[str]:
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _int(params: Mapping[str, str], key: str, lo: Optional[int] = None, hi: Optional[int] = None) -> Optional[int]:
    raw = _text(params, key)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    if lo is not None and value < lo:
        return None
    if hi is not None and value > hi:
        return None
    return value


def _required(value):
    if value is None:
        raise _Invalid
    return value


def _club_adjustment(p):
    return ClubAdjustment(club=_required(_text(p, "club")))


def _shot_recommendation(p):
    return ShotRecommendation(
        yardage=_int(p, "yardage", lo=1),
        club=_text(p, "club"),
        lie=Lie.parse(_text(p, "lie")),
        wind=_text(p, "wind"),
    )


def _score_entry(p):
    return ScoreEntry(hole=_required(_int(p, "hole", 1, 18)))


def _round_start(p):
    return RoundStart(course=_text(p, "course"))


def _round_end(p):
    return RoundEnd(round_id=_text(p, "round_id"))


def _stats(p):
    return StatsLookup(stat_type=_text(p, "stat_type"))


def _course_info(p):
    return CourseInfo(course=_text(p, "course"), hole=_int(p, "hole", 1, 18))


def _drill(p):
    return DrillScreen(focus_area=_text(p, "focus_area"))


def _pattern_review(p):
    return PatternReview(club=_text(p, "club"))


def _recovery_overview(p):
    return RecoveryOverview(fatigue=_int(p, "fatigue", 1, 10))


def _settings(p):
    return SettingsScreen(setting_key=_text(p, "setting_key"))


SCREEN_BUILDERS: dict[str, tuple[Module, Callable[[Mapping[str, str]], NavCaddyDestination]]] = {
    "club_adjustment": (Module.CADDY, _club_adjustment),
    "shot_recommendation": (Module.CADDY, _shot_recommendation),
    "score_entry": (Module.CADDY, _score_entry),
    "round_start": (Module.CADDY, _round_start),
    "round_end": (Module.CADDY, _round_end),
    "weather": (Module.CADDY, lambda _p: WeatherCheck()),
    "stats": (Module.CADDY, _stats),
    "course_info": (Module.CADDY, _course_info),
    "drill": (Module.COACH, _drill),
    "pattern_review": (Module.COACH, _pattern_review),
    "recovery_overview": (Module.RECOVERY, _recovery_overview),
    "equipment": (Module.SETTINGS, lambda _p: EquipmentManagement()),
    "settings": (Module.SETTINGS, _settings),
    "help": (Module.SETTINGS, lambda _p: HelpScreen()),
    "feedback": (Module.SETTINGS, lambda _p: FeedbackScreen()),
}


class DestinationResolver:
    def build(self, target: RoutingTarget) -> Optional[NavCaddyDestination]:
        entry = SCREEN_BUILDERS.get(target.screen)
        if entry is None:
            logger.warning("Unknown screen %r", target.screen)
            return None
        module, builder = entry
        if target.module is not module:
            logger.warning("Screen %r does not belong to module %s", target.screen, target.module.value)
            return None
        try:
            return builder(target.parameters)
        except _Invalid:
            logger.info("Invalid parameters for screen %r", target.screen)
            return None

    def validate(self, target: RoutingTarget) -> bool:
        return self.build(target) is not None
