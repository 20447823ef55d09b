"""Fallback suggestions computed on-device, used when the classifier is
unavailable or the request needs clarification."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from navcaddy.schemas.intent import IntentType
from navcaddy.schemas.session import Role, SessionContext
from navcaddy.services.ai.intent.contracts import IntentSuggestion
from navcaddy.services.clarification import suggestion_for

MAX_LOCAL_SUGGESTIONS = 3

_CLUB_TALK_RE = re.compile(r"\b(club|iron|driver|wood|wedge|putter)s?\b", re.IGNORECASE)


class SuggestionSet(str, Enum):
    LLM_UNAVAILABLE = "llm_unavailable"
    OFFLINE = "offline"
    CLARIFICATION = "clarification"
    COMMON_TASK = "common_task"
    DEFAULT = "default"


SUGGESTION_SETS: dict[SuggestionSet, tuple[IntentType, ...]] = {
    SuggestionSet.LLM_UNAVAILABLE: (IntentType.SCORE_ENTRY, IntentType.RECOVERY_CHECK, IntentType.STATS_LOOKUP),
    SuggestionSet.OFFLINE: (IntentType.SCORE_ENTRY, IntentType.EQUIPMENT_INFO, IntentType.STATS_LOOKUP),
    SuggestionSet.CLARIFICATION: (IntentType.SHOT_RECOMMENDATION, IntentType.SCORE_ENTRY, IntentType.PATTERN_QUERY),
    SuggestionSet.COMMON_TASK: (IntentType.SHOT_RECOMMENDATION, IntentType.SCORE_ENTRY, IntentType.CLUB_ADJUSTMENT),
    SuggestionSet.DEFAULT: (IntentType.SCORE_ENTRY, IntentType.SHOT_RECOMMENDATION, IntentType.HELP_REQUEST),
}


class LocalIntentSuggestions:
    def suggestions(
        self,
        which: SuggestionSet,
        context: Optional[SessionContext] = None,
        *,
        limit: int = MAX_LOCAL_SUGGESTIONS,
    ) -> tuple[IntentSuggestion, ...]:
        intents = list(SUGGESTION_SETS[which])
        if context is not None:
            intents = self._personalize(intents, context)
        limit = max(1, min(limit, MAX_LOCAL_SUGGESTIONS))
        return tuple(suggestion_for(i) for i in intents[:limit])

    @staticmethod
    def _personalize(intents: list[IntentType], context: SessionContext) -> list[IntentType]:
        if context.is_round_active:
            if IntentType.SCORE_ENTRY in intents:
                intents.remove(IntentType.SCORE_ENTRY)
            intents.insert(0, IntentType.SCORE_ENTRY)

        recent = context.recent_turns(3)
        talked_clubs = any(t.role is Role.USER and _CLUB_TALK_RE.search(t.content) for t in recent)
        if talked_clubs and IntentType.CLUB_ADJUSTMENT not in intents:
            position = 1 if context.is_round_active else 0
            intents.insert(position, IntentType.CLUB_ADJUSTMENT)
        return intents
