"""Clarification generator for ambiguous requests.

Ranking: hint intent first, then keyword matches over the normalized input
(reordered by round state), then round-state defaults to fill up to three.
"""

from __future__ import annotations

import re
from typing import Optional

from navcaddy.schemas.intent import IntentType
from navcaddy.schemas.session import SessionContext
from navcaddy.services.ai.intent.contracts import ClarificationResponse, IntentSuggestion
from navcaddy.services.ai.intent.registry import INTENT_REGISTRY
from navcaddy.services.input_normalizer import InputNormalizer

MAX_SUGGESTIONS = 3

_WORD_RE = re.compile(r"[a-z]+")

# (keywords, intents) in priority order. Multi-word keywords match as phrases.
KEYWORD_GROUPS: tuple[tuple[frozenset[str], tuple[IntentType, ...]], ...] = (
    (
        frozenset({"what club", "which club", "yards", "yardage", "how far", "distance to"}),
        (IntentType.SHOT_RECOMMENDATION,),
    ),
    (
        frozenset({"pain", "sore", "tired", "fatigue", "fatigued", "ready", "readiness", "recovery", "sleep", "hrv", "hurt", "hurts"}),
        (IntentType.RECOVERY_CHECK,),
    ),
    (
        frozenset({"feel", "feels", "feeling"}),
        (IntentType.RECOVERY_CHECK, IntentType.CLUB_ADJUSTMENT, IntentType.PATTERN_QUERY),
    ),
    (
        frozenset({"off", "wrong", "bad", "problem", "issue", "fix"}),
        (IntentType.CLUB_ADJUSTMENT, IntentType.PATTERN_QUERY, IntentType.DRILL_REQUEST),
    ),
    (
        frozenset({"club", "clubs", "iron", "wood", "driver", "wedge", "putter", "hybrid", "long", "short"}),
        (IntentType.CLUB_ADJUSTMENT,),
    ),
    (
        frozenset({"miss", "misses", "missing", "slice", "hook", "pull", "push", "tendency", "tendencies", "pattern", "patterns"}),
        (IntentType.PATTERN_QUERY,),
    ),
    (
        frozenset({"score", "scored", "birdie", "par", "bogey", "eagle"}),
        (IntentType.SCORE_ENTRY,),
    ),
    (
        frozenset({"help", "practice", "drill", "improve", "stats", "average"}),
        (IntentType.DRILL_REQUEST, IntentType.STATS_LOOKUP),
    ),
    (
        frozenset({"wind", "windy", "rain", "weather"}),
        (IntentType.WEATHER_CHECK,),
    ),
    (
        frozenset({"round", "play", "game", "tee time"}),
        (IntentType.ROUND_START,),
    ),
)

ROUND_ACTIVE_INTENTS: tuple[IntentType, ...] = (
    IntentType.SHOT_RECOMMENDATION,
    IntentType.SCORE_ENTRY,
    IntentType.PATTERN_QUERY,
    IntentType.WEATHER_CHECK,
)
NO_ROUND_INTENTS: tuple[IntentType, ...] = (
    IntentType.ROUND_START,
    IntentType.RECOVERY_CHECK,
    IntentType.STATS_LOOKUP,
)
DEFAULT_INTENTS: tuple[IntentType, ...] = (
    IntentType.SHOT_RECOMMENDATION,
    IntentType.HELP_REQUEST,
    IntentType.STATS_LOOKUP,
)

SHORT_INPUT_MESSAGE = "I'm not quite sure what you need. Did you mean:"
FEEL_MESSAGE = "I want to make sure I help with the right thing. Are you looking to:"
DEFAULT_MESSAGE = "Could you tell me a bit more? Are you looking to:"
EMPTY_MESSAGE = "What can I help you with? Here are a few ideas:"


def suggestion_for(intent_type: IntentType) -> IntentSuggestion:
    schema = INTENT_REGISTRY[intent_type]
    return IntentSuggestion(intent_type=intent_type, label=schema.label, description=schema.description)


class ClarificationGenerator:
    def __init__(self, normalizer: Optional[InputNormalizer] = None) -> None:
        self._normalizer = normalizer or InputNormalizer()

    def generate(
        self,
        text: str,
        hint: Optional[IntentType] = None,
        context: Optional[SessionContext] = None,
    ) -> ClarificationResponse:
        normalized = self._normalizer.normalize(text or "").normalized_text.lower()
        words = _WORD_RE.findall(normalized)

        ranked: list[IntentType] = []
        if hint is not None:
            ranked.append(hint)

        matched = self._keyword_intents(words)
        if context is not None:
            preferred = ROUND_ACTIVE_INTENTS if context.is_round_active else NO_ROUND_INTENTS
            matched.sort(key=lambda intent: 0 if intent in preferred else 1)
        _extend_unique(ranked, matched)

        if len(ranked) < MAX_SUGGESTIONS:
            if context is not None:
                fill = ROUND_ACTIVE_INTENTS if context.is_round_active else NO_ROUND_INTENTS
            else:
                fill = DEFAULT_INTENTS
            _extend_unique(ranked, fill)

        suggestions = _unique_labels(ranked)[:MAX_SUGGESTIONS]
        return ClarificationResponse(
            message=self._message(words),
            suggestions=tuple(suggestions),
            original_input=text or "",
        )

    @staticmethod
    def _keyword_intents(words: list[str]) -> list[IntentType]:
        if not words:
            return []
        tokens = set(words)
        phrase = " " + " ".join(words) + " "
        found: list[IntentType] = []
        for keywords, intents in KEYWORD_GROUPS:
            hit = any((f" {kw} " in phrase) if " " in kw else (kw in tokens) for kw in keywords)
            if hit:
                _extend_unique(found, intents)
        return found

    @staticmethod
    def _message(words: list[str]) -> str:
        if not words:
            return EMPTY_MESSAGE
        if any(w.startswith("feel") for w in words):
            return FEEL_MESSAGE
        if len(words) <= 3:
            return SHORT_INPUT_MESSAGE
        return DEFAULT_MESSAGE


def _extend_unique(target: list[IntentType], items) -> None:
    for item in items:
        if item not in target:
            target.append(item)


def _unique_labels(intents: list[IntentType]) -> list[IntentSuggestion]:
    seen: set[str] = set()
    out: list[IntentSuggestion] = []
    for intent in intents:
        suggestion = suggestion_for(intent)
        if suggestion.label in seen:
            continue
        seen.add(suggestion.label)
        out.append(suggestion)
    return out
