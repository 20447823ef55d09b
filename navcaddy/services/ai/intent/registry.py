"""Static intent registry: one row per intent, the single source for targets,
required entities, prerequisites and user-facing labels."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from navcaddy.schemas.intent import (
    IntentType,
    Module,
    ParsedIntent,
    Prerequisite,
    RoutingTarget,
)
from navcaddy.schemas.session import SessionContext

ParamBuilder = Callable[[ParsedIntent, Optional[SessionContext]], dict[str, Optional[str]]]


def _no_params(_intent: ParsedIntent, _context: Optional[SessionContext]) -> dict[str, Optional[str]]:
    return {}


def _str(value) -> Optional[str]:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


@dataclass(frozen=True)
class IntentSchema:
    intent_type: IntentType
    display_name: str
    description: str
    label: str
    example_phrases: tuple[str, ...]
    module: Module
    screen: str
    required_entities: tuple[str, ...] = ()
    prerequisites: tuple[Prerequisite, ...] = ()
    offline_capable: bool = False
    build_params: ParamBuilder = _no_params


def _club_params(intent, _context):
    return {"club": intent.entities.club}


def _recovery_params(intent, _context):
    return {"fatigue": _str(intent.entities.fatigue)}


def _shot_params(intent, _context):
    e = intent.entities
    return {"yardage": _str(e.yardage), "club": e.club, "lie": _str(e.lie), "wind": e.wind}


def _score_params(intent, _context):
    return {"hole": _str(intent.entities.hole_number)}


def _drill_params(intent, _context):
    return {"focus_area": intent.user_goal}


def _stats_params(intent, _context):
    return {"stat_type": intent.entities.score_context}


def _round_start_params(_intent, context):
    return {"course": context.current_course if context else None}


def _round_end_params(_intent, context):
    return {"round_id": context.current_round_id if context else None}


def _course_params(intent, context):
    return {
        "course": context.current_course if context else None,
        "hole": _str(intent.entities.hole_number),
    }


INTENT_REGISTRY: dict[IntentType, IntentSchema] = {
    schema.intent_type: schema
    for schema in (
        IntentSchema(
            IntentType.CLUB_ADJUSTMENT,
            "Club Adjustment",
            "Adjust the stored carry distance of a club",
            "Adjust Club",
            ("My 7-iron feels long today", "Driver is going shorter than usual"),
            Module.CADDY,
            "club_adjustment",
            required_entities=("club",),
            prerequisites=(Prerequisite.BAG_CONFIGURED,),
            build_params=_club_params,
        ),
        IntentSchema(
            IntentType.RECOVERY_CHECK,
            "Recovery Check",
            "Review sleep, HRV and readiness before playing",
            "Check Recovery",
            ("How's my recovery?", "Am I ready to play today?"),
            Module.RECOVERY,
            "recovery_overview",
            prerequisites=(Prerequisite.RECOVERY_DATA,),
            build_params=_recovery_params,
        ),
        IntentSchema(
            IntentType.SHOT_RECOMMENDATION,
            "Shot Recommendation",
            "Get a club and target for the next shot",
            "Get Shot Advice",
            ("What club for 150 yards?", "What should I hit from the rough?"),
            Module.CADDY,
            "shot_recommendation",
            prerequisites=(Prerequisite.BAG_CONFIGURED,),
            build_params=_shot_params,
        ),
        IntentSchema(
            IntentType.SCORE_ENTRY,
            "Score Entry",
            "Record the score for a hole",
            "Enter Score",
            ("I got a 5 on this hole", "Put me down for par"),
            Module.CADDY,
            "score_entry",
            required_entities=("hole_number",),
            prerequisites=(Prerequisite.ROUND_ACTIVE,),
            offline_capable=True,
            build_params=_score_params,
        ),
        IntentSchema(
            IntentType.PATTERN_QUERY,
            "Pattern Query",
            "Ask about miss patterns and tendencies",
            "View Patterns",
            ("Where do I usually miss with my driver?", "What are my tendencies?"),
            Module.COACH,
            "pattern_review",
            build_params=_club_params,
        ),
        IntentSchema(
            IntentType.DRILL_REQUEST,
            "Drill Request",
            "Get a practice drill",
            "Get Drill",
            ("Give me a drill for my slice", "How do I practice putting?"),
            Module.COACH,
            "drill",
            build_params=_drill_params,
        ),
        IntentSchema(
            IntentType.WEATHER_CHECK,
            "Weather Check",
            "Check wind and weather conditions",
            "Check Weather",
            ("How windy is it?", "Is it going to rain?"),
            Module.CADDY,
            "weather",
        ),
        IntentSchema(
            IntentType.STATS_LOOKUP,
            "Stats Lookup",
            "Look up scoring and performance statistics",
            "View Stats",
            ("What's my average score?", "How many fairways did I hit?"),
            Module.CADDY,
            "stats",
            offline_capable=True,
            build_params=_stats_params,
        ),
        IntentSchema(
            IntentType.ROUND_START,
            "Start Round",
            "Begin a new round",
            "Start Round",
            ("Let's start a round", "Tee it up at Pebble Beach"),
            Module.CADDY,
            "round_start",
            build_params=_round_start_params,
        ),
        IntentSchema(
            IntentType.ROUND_END,
            "End Round",
            "Finish the current round",
            "End Round",
            ("I'm done for today", "End my round"),
            Module.CADDY,
            "round_end",
            prerequisites=(Prerequisite.ROUND_ACTIVE,),
            build_params=_round_end_params,
        ),
        IntentSchema(
            IntentType.EQUIPMENT_INFO,
            "Equipment Info",
            "Review and manage the clubs in the bag",
            "View Equipment",
            ("What's in my bag?", "Show my club distances"),
            Module.SETTINGS,
            "equipment",
            offline_capable=True,
        ),
        IntentSchema(
            IntentType.COURSE_INFO,
            "Course Info",
            "Get details about the course or a hole",
            "Course Info",
            ("How long is this hole?", "Where's the water on 7?"),
            Module.CADDY,
            "course_info",
            prerequisites=(Prerequisite.COURSE_SELECTED,),
            build_params=_course_params,
        ),
        IntentSchema(
            IntentType.SETTINGS_CHANGE,
            "Settings",
            "Change app preferences",
            "Settings",
            ("Switch to meters", "Turn off voice responses"),
            Module.SETTINGS,
            "settings",
        ),
        IntentSchema(
            IntentType.HELP_REQUEST,
            "Help",
            "Learn what the caddy can do",
            "Get Help",
            ("What can you do?", "Help"),
            Module.SETTINGS,
            "help",
            offline_capable=True,
        ),
        IntentSchema(
            IntentType.FEEDBACK,
            "Feedback",
            "Send feedback about the app",
            "Send Feedback",
            ("That advice was wrong", "I love this app"),
            Module.SETTINGS,
            "feedback",
            offline_capable=True,
        ),
    )
}

ENTITY_DISPLAY_NAMES: dict[str, str] = {
    "club": "club",
    "yardage": "yardage",
    "lie": "lie",
    "wind": "wind",
    "fatigue": "fatigue level",
    "pain": "pain",
    "score_context": "score",
    "hole_number": "hole number",
}


def get_schema(intent_type: IntentType) -> IntentSchema:
    return INTENT_REGISTRY[intent_type]


def label_for(intent_type: IntentType) -> str:
    return INTENT_REGISTRY[intent_type].label


def default_target(intent: ParsedIntent, context: Optional[SessionContext] = None) -> RoutingTarget:
    """Static target for the intent, filled with whatever parameters are known."""
    schema = INTENT_REGISTRY[intent.intent_type]
    params = {k: v for k, v in schema.build_params(intent, context).items() if v is not None and v != ""}
    return RoutingTarget(module=schema.module, screen=schema.screen, parameters=params)


def missing_entities(intent: ParsedIntent) -> list[str]:
    schema = INTENT_REGISTRY[intent.intent_type]
    return intent.entities.missing(schema.required_entities)


def build_system_prompt() -> str:
    """Classifier instructions listing every intent with one example each."""
    lines = [
        "You are Bones, a golf caddy assistant. Classify the golfer's request.",
        "Valid intents:",
    ]
    for schema in INTENT_REGISTRY.values():
        lines.append(
            f'- {schema.intent_type.value}: {schema.description} (e.g. "{schema.example_phrases[0]}")'
        )
    lines.append(
        "Return ONLY a JSON object with keys: intent, confidence (0.0-1.0), "
        "entities (object with optional club, yardage, lie, wind, fatigue, pain, "
        "scoreContext, holeNumber), userGoal (string or null)."
    )
    lines.append(
        'Example: {"intent": "club_adjustment", "confidence": 0.85, '
        '"entities": {"club": "7-iron"}, "userGoal": "hits 7-iron long"}'
    )
    return "\n".join(lines)
