"""Routing orchestrator: classification outcome -> routing outcome.

Prerequisites for an intent are checked concurrently and every unmet one is
reported. The orchestrator itself holds no mutable state, so the same
classification against the same checker snapshot always yields an equal
result.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, Union

from navcaddy.schemas.intent import IntentType, ParsedIntent, Prerequisite, RoutingTarget
from navcaddy.services.ai.intent.contracts import (
    Clarify,
    ClassificationResult,
    Confirm,
    Errored,
    Route,
)
from navcaddy.services.ai.intent.registry import INTENT_REGISTRY
from navcaddy.services.session_context import SessionContextStore

logger = logging.getLogger(__name__)

NO_NAVIGATION_INTENTS = frozenset(
    {IntentType.PATTERN_QUERY, IntentType.HELP_REQUEST, IntentType.FEEDBACK}
)

NO_NAVIGATION_RESPONSES: dict[IntentType, str] = {
    IntentType.PATTERN_QUERY: (
        "Let me check your miss patterns. Based on your recent shots, I'll give you insights."
    ),
    IntentType.HELP_REQUEST: (
        "I'm Bones, your digital caddy. Ask me about club selection, check your recovery, "
        "enter scores, or get coaching tips. What can I help you with?"
    ),
    IntentType.FEEDBACK: "Thanks for the feedback! I'm always learning to serve you better.",
}

PREREQUISITE_MESSAGES: dict[Prerequisite, str] = {
    Prerequisite.RECOVERY_DATA: (
        "I don't have any recovery data yet. Log your sleep, HRV, or readiness score first, "
        "and I'll give you insights."
    ),
    Prerequisite.ROUND_ACTIVE: "You need to start a round first. Would you like to start a new round now?",
    Prerequisite.BAG_CONFIGURED: (
        "Your bag isn't configured yet. Set up your clubs and distances so I can give you "
        "accurate recommendations."
    ),
    Prerequisite.COURSE_SELECTED: "Which course are you playing? Select a course so I can pull up hole details.",
}

PREREQUISITE_NAMES: dict[Prerequisite, str] = {
    Prerequisite.RECOVERY_DATA: "recovery data",
    Prerequisite.ROUND_ACTIVE: "an active round",
    Prerequisite.BAG_CONFIGURED: "a configured bag",
    Prerequisite.COURSE_SELECTED: "a selected course",
}

ERROR_APOLOGY = "Sorry, I couldn't process that right now. Please try again in a moment."


# --- Prerequisite checking ---------------------------------------------------


class PrerequisiteChecker(abc.ABC):
    @abc.abstractmethod
    async def is_satisfied(self, prerequisite: Prerequisite) -> bool:
        """Must not mutate anything the orchestrator can observe."""

    async def check_all(self, prerequisites: Iterable[Prerequisite]) -> list[Prerequisite]:
        """Return unmet prerequisites, in input order.

        A check that raises counts as unmet.
        """
        items = list(prerequisites)
        if not items:
            return []
        outcomes = await asyncio.gather(
            *(self.is_satisfied(p) for p in items), return_exceptions=True
        )
        missing: list[Prerequisite] = []
        for prerequisite, outcome in zip(items, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Prerequisite check %s failed; treating as unmet",
                    prerequisite.value,
                    exc_info=outcome,
                )
                missing.append(prerequisite)
            elif not outcome:
                missing.append(prerequisite)
        return missing


class StaticPrerequisiteChecker(PrerequisiteChecker):
    """Fixed snapshot of satisfied prerequisites."""

    def __init__(self, satisfied: Iterable[Prerequisite] = ()) -> None:
        self._satisfied = frozenset(satisfied)

    async def is_satisfied(self, prerequisite: Prerequisite) -> bool:
        return prerequisite in self._satisfied


ProbeFn = Callable[[], Union[bool, Awaitable[bool]]]


class SessionPrerequisiteChecker(PrerequisiteChecker):
    """Round/course state from the session store, the rest from injected probes."""

    def __init__(self, store: SessionContextStore, probes: Optional[dict[Prerequisite, ProbeFn]] = None) -> None:
        self._store = store
        self._probes = dict(probes or {})

    async def is_satisfied(self, prerequisite: Prerequisite) -> bool:
        probe = self._probes.get(prerequisite)
        if probe is not None:
            value = probe()
            if asyncio.iscoroutine(value) or isinstance(value, asyncio.Future):
                value = await value
            return bool(value)
        snapshot = self._store.snapshot()
        if prerequisite is Prerequisite.ROUND_ACTIVE:
            return snapshot.is_round_active
        if prerequisite is Prerequisite.COURSE_SELECTED:
            return snapshot.current_course is not None
        return False


def prerequisite_message(missing: list[Prerequisite]) -> str:
    if len(missing) == 1:
        return PREREQUISITE_MESSAGES[missing[0]]
    names = [PREREQUISITE_NAMES[p] for p in missing]
    joined = ", ".join(names[:-1]) + " and " + names[-1]
    details = " ".join(PREREQUISITE_MESSAGES[p] for p in missing)
    return f"A couple of things are needed first: {joined}. {details}"


# --- Routing results ---------------------------------------------------------


@dataclass(frozen=True)
class Navigate:
    target: RoutingTarget
    intent: ParsedIntent


@dataclass(frozen=True)
class NoNavigation:
    intent: Optional[ParsedIntent]
    response: str
    clarification: Optional[Clarify] = None


@dataclass(frozen=True)
class PrerequisiteMissing:
    intent: ParsedIntent
    missing: tuple[Prerequisite, ...]
    message: str


@dataclass(frozen=True)
class ConfirmationRequired:
    intent: ParsedIntent
    message: str


RoutingResult = Union[Navigate, NoNavigation, PrerequisiteMissing, ConfirmationRequired]


class RoutingOrchestrator:
    def __init__(self, checker: PrerequisiteChecker) -> None:
        self._checker = checker

    async def route(self, classification: ClassificationResult) -> RoutingResult:
        if isinstance(classification, Route):
            return await self._route_intent(classification.intent, classification.target)
        if isinstance(classification, Confirm):
            return ConfirmationRequired(classification.intent, classification.message)
        if isinstance(classification, Clarify):
            return NoNavigation(None, classification.response.message, clarification=classification)
        if isinstance(classification, Errored):
            return NoNavigation(None, ERROR_APOLOGY)
        raise TypeError(f"Unsupported classification result: {type(classification).__name__}")

    async def _route_intent(self, intent: ParsedIntent, target: RoutingTarget) -> RoutingResult:
        if intent.intent_type in NO_NAVIGATION_INTENTS:
            return NoNavigation(intent, NO_NAVIGATION_RESPONSES[intent.intent_type])

        prerequisites = INTENT_REGISTRY[intent.intent_type].prerequisites
        missing = await self._checker.check_all(prerequisites)
        if missing:
            logger.info(
                "Routing %s blocked by prerequisites: %s",
                intent.intent_type.value,
                ",".join(p.value for p in missing),
            )
            return PrerequisiteMissing(intent, tuple(missing), prerequisite_message(missing))
        return Navigate(target, intent)
