"""Intent classifier: normalize, call the model, decode, then apply the
three-tier confidence decision.

Decision table on ``confidence``:
  - ``>= 0.75``: route, unless a required entity is missing (then confirm).
  - ``0.50 <= c < 0.75``: confirm.
  - ``< 0.50``: clarify.

Unparseable answers and unknown intents are treated as confidence 0 and
clarify. Only an exception raised by the client becomes ``Errored``.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from navcaddy.schemas.intent import ExtractedEntities, ParsedIntent
from navcaddy.schemas.session import SessionContext
from navcaddy.services.clarification import ClarificationGenerator
from navcaddy.services.input_normalizer import InputNormalizer
from navcaddy.services.session_context import build_context_summary

from .client import LLMClient
from .contracts import (
    CONFIRM_THRESHOLD,
    ROUTE_THRESHOLD,
    Clarify,
    ClassificationResult,
    Confirm,
    Errored,
    Route,
    decode_intent_payload,
)
from .registry import ENTITY_DISPLAY_NAMES, INTENT_REGISTRY, default_target, missing_entities

logger = logging.getLogger(__name__)


def _join_names(names: list[str]) -> str:
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]


def missing_entity_message(intent: ParsedIntent, missing: list[str]) -> str:
    display = INTENT_REGISTRY[intent.intent_type].display_name.lower()
    names = _join_names([ENTITY_DISPLAY_NAMES.get(m, m) for m in missing])
    return f"It sounds like you want {display}. Which {names} do you mean?"


def confirmation_message(intent: ParsedIntent) -> str:
    action = INTENT_REGISTRY[intent.intent_type].label.lower()
    return f"Did you want to {action}?"


def enrich_entities(intent: ParsedIntent, context: Optional[SessionContext]) -> ParsedIntent:
    """Fill entities the golfer left implicit from the session context."""
    if context is None:
        return intent
    entities = intent.entities
    updates = {}
    if entities.hole_number is None and context.current_hole is not None:
        updates["hole_number"] = context.current_hole
    if not updates:
        return intent
    enriched = ExtractedEntities.model_validate({**entities.model_dump(), **updates})
    return intent.model_copy(update={"entities": enriched})


class IntentClassifier:
    def __init__(
        self,
        client: LLMClient,
        *,
        normalizer: Optional[InputNormalizer] = None,
        clarifier: Optional[ClarificationGenerator] = None,
    ) -> None:
        self._client = client
        self._normalizer = normalizer or InputNormalizer()
        self._clarifier = clarifier or ClarificationGenerator(self._normalizer)

    async def classify(self, text: str, context: Optional[SessionContext] = None) -> ClassificationResult:
        normalized = self._normalizer.normalize(text or "")
        if not normalized.normalized_text:
            return Clarify(self._clarifier.generate(text or "", None, context))

        t0 = time.monotonic()
        try:
            response = await self._client.classify(normalized.normalized_text, context)
        except Exception as exc:
            logger.warning("Classification call failed: %s (%s)", type(exc).__name__, build_context_summary(context))
            return Errored(exc)

        decoded = decode_intent_payload(response.raw_text)
        if not decoded.ok:
            logger.warning("Unusable classifier response: %s", decoded.fault)
            return Clarify(self._clarifier.generate(text, None, context))

        intent = enrich_entities(decoded.intent, context)
        logger.info(
            "Classified intent=%s confidence=%.2f in %.1fms",
            intent.intent_type.value,
            intent.confidence,
            (time.monotonic() - t0) * 1000,
        )
        return self.decide(intent, text, context)

    def decide(
        self,
        intent: ParsedIntent,
        text: str = "",
        context: Optional[SessionContext] = None,
    ) -> ClassificationResult:
        """Pure decision step, separated so it can be replayed without a model."""
        if intent.confidence >= ROUTE_THRESHOLD:
            missing = missing_entities(intent)
            if missing:
                return Confirm(intent, missing_entity_message(intent, missing))
            return Route(intent, default_target(intent, context))
        if intent.confidence >= CONFIRM_THRESHOLD:
            return Confirm(intent, confirmation_message(intent))
        return Clarify(self._clarifier.generate(text, intent.intent_type, context))
