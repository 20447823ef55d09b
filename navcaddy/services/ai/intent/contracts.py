"""Intent scope contracts: classification outcomes and the model payload decoder."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from navcaddy.schemas.intent import ExtractedEntities, IntentType, ParsedIntent, RoutingTarget

from ..common.json_tools import extract_json_object

logger = logging.getLogger(__name__)

ROUTE_THRESHOLD = 0.75
CONFIRM_THRESHOLD = 0.50

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True)
class IntentSuggestion:
    intent_type: IntentType
    label: str
    description: str


@dataclass(frozen=True)
class ClarificationResponse:
    message: str
    suggestions: tuple[IntentSuggestion, ...]
    original_input: str


@dataclass(frozen=True)
class Route:
    intent: ParsedIntent
    target: RoutingTarget


@dataclass(frozen=True)
class Confirm:
    intent: ParsedIntent
    message: str


@dataclass(frozen=True)
class Clarify:
    response: ClarificationResponse


@dataclass(frozen=True)
class Errored:
    cause: BaseException


ClassificationResult = Union[Route, Confirm, Clarify, Errored]


class AIIntentPayload(BaseModel):
    """Raw JSON shape expected from the classifier model.

    Everything except ``intent`` is optional; ``intent`` is kept as a string
    so unknown labels can be detected without a validation error.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    intent: str
    confidence: float = 0.0
    entities: dict[str, Any] = Field(default_factory=dict)
    user_goal: Optional[str] = Field(default=None, validation_alias=AliasChoices("userGoal", "user_goal"))

    @field_validator("intent", mode="before")
    @classmethod
    def intent_must_be_text(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("intent must be a non-empty string")
        return v.strip()

    @field_validator("confidence", mode="before")
    @classmethod
    def confidence_numeric(cls, v: Any) -> float:
        try:
            return float(v)
        except (TypeError, ValueError, OverflowError):
            return 0.0

    @field_validator("entities", mode="before")
    @classmethod
    def entities_object(cls, v: Any) -> dict[str, Any]:
        return v if isinstance(v, dict) else {}

    @field_validator("user_goal", mode="before")
    @classmethod
    def goal_text(cls, v: Any) -> Optional[str]:
        return v if isinstance(v, str) else None


@dataclass(frozen=True)
class DecodeResult:
    """Either a ``ParsedIntent`` or the reason decoding failed. Never both."""

    intent: Optional[ParsedIntent] = None
    fault: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.intent is not None


def _entity_key(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _decode_entities(raw: dict[str, Any]) -> ExtractedEntities:
    known = set(ExtractedEntities.model_fields)
    data = {}
    for key, value in raw.items():
        name = _entity_key(str(key))
        if name == "hole":
            name = "hole_number"
        if name in known:
            data[name] = value
    try:
        return ExtractedEntities.model_validate(data)
    except ValidationError:
        pass
    # Keep whichever fields validate on their own.
    kept = {}
    for name, value in data.items():
        try:
            ExtractedEntities.model_validate({name: value})
        except ValidationError:
            logger.warning("Discarding malformed entity %s", name)
            continue
        kept[name] = value
    return ExtractedEntities.model_validate(kept)


def decode_intent_payload(raw_text: str) -> DecodeResult:
    """Decode model output into a ``ParsedIntent`` without raising."""
    data = extract_json_object(raw_text or "")
    if data is None:
        return DecodeResult(fault="no JSON object in response")

    try:
        payload = AIIntentPayload.model_validate(data)
    except ValidationError as exc:
        return DecodeResult(fault=f"schema mismatch: {exc.error_count()} error(s)")

    intent_type = IntentType.parse(payload.intent)
    if intent_type is None:
        return DecodeResult(fault=f"unknown intent {payload.intent!r}")

    return DecodeResult(
        intent=ParsedIntent(
            intent_type=intent_type,
            confidence=payload.confidence,
            entities=_decode_entities(payload.entities),
            user_goal=payload.user_goal,
        )
    )
