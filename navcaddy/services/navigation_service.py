"""Navigation executor: routing outcome -> one UI-facing action, plus the
destination stack. Only ``Navigate`` results (and the explicit stack methods)
touch the stack."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from navcaddy.schemas.destinations import NavCaddyDestination
from navcaddy.schemas.intent import ParsedIntent, Prerequisite
from navcaddy.services.ai.intent.contracts import IntentSuggestion
from navcaddy.services.destination_resolver import DestinationResolver
from navcaddy.services.routing_service import (
    ConfirmationRequired,
    Navigate,
    NoNavigation,
    PrerequisiteMissing,
    RoutingResult,
)

logger = logging.getLogger(__name__)

NAVIGATION_FAILED_MESSAGE = "Sorry, I couldn't open that screen. Please try asking another way."


@dataclass(frozen=True)
class Navigated:
    destination: NavCaddyDestination
    intent: ParsedIntent


@dataclass(frozen=True)
class ShowResponse:
    text: str
    intent: Optional[ParsedIntent] = None
    suggestions: tuple[IntentSuggestion, ...] = ()


@dataclass(frozen=True)
class ShowError:
    message: str
    intent: Optional[ParsedIntent] = None


@dataclass(frozen=True)
class ShowPrerequisitePrompt:
    message: str
    missing: tuple[Prerequisite, ...]
    intent: ParsedIntent


@dataclass(frozen=True)
class RequestConfirmation:
    message: str
    intent: ParsedIntent


NavigationAction = Union[Navigated, ShowResponse, ShowError, ShowPrerequisitePrompt, RequestConfirmation]


class NavigationExecutor:
    def __init__(self, resolver: Optional[DestinationResolver] = None) -> None:
        self._resolver = resolver or DestinationResolver()
        self._stack: list[NavCaddyDestination] = []

    @property
    def stack(self) -> tuple[NavCaddyDestination, ...]:
        return tuple(self._stack)

    @property
    def current(self) -> Optional[NavCaddyDestination]:
        return self._stack[-1] if self._stack else None

    def execute(self, result: RoutingResult) -> NavigationAction:
        if isinstance(result, Navigate):
            destination = self._resolver.build(result.target)
            if destination is None:
                logger.warning(
                    "Could not resolve %s/%s for intent %s",
                    result.target.module.value,
                    result.target.screen,
                    result.intent.intent_type.value,
                )
                return ShowError(NAVIGATION_FAILED_MESSAGE, result.intent)
            self.navigate(destination)
            return Navigated(destination, result.intent)
        if isinstance(result, NoNavigation):
            suggestions = result.clarification.response.suggestions if result.clarification else ()
            return ShowResponse(result.response, result.intent, suggestions)
        if isinstance(result, PrerequisiteMissing):
            return ShowPrerequisitePrompt(result.message, result.missing, result.intent)
        if isinstance(result, ConfirmationRequired):
            return RequestConfirmation(result.message, result.intent)
        raise TypeError(f"Unsupported routing result: {type(result).__name__}")

    def navigate(self, destination: NavCaddyDestination) -> None:
        self._stack.append(destination)
        logger.debug("Navigated to %s (depth=%d)", destination.to_route(), len(self._stack))

    def navigate_back(self) -> bool:
        """Pop the top destination; False when already at the conversation root."""
        if not self._stack:
            return False
        self._stack.pop()
        return True

    def pop_to_root(self) -> None:
        self._stack.clear()

    def replace(self, destination: NavCaddyDestination) -> None:
        if self._stack:
            self._stack[-1] = destination
        else:
            self._stack.append(destination)
