"""NavCaddy engine: classify -> route -> execute, with retries, analytics and
session bookkeeping around the deterministic core."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Optional

from navcaddy.schemas.intent import ParsedIntent
from navcaddy.services.ai.intent.client import LLMClient, ProviderLLMClient
from navcaddy.services.ai.intent.contracts import Clarify, ClassificationResult, Confirm, Errored, Route
from navcaddy.services.ai.intent.registry import default_target, label_for, missing_entities
from navcaddy.services.ai.intent.service import IntentClassifier, enrich_entities, missing_entity_message
from navcaddy.services.analytics import (
    ClarificationRequested,
    ErrorOccurred,
    IntentClassified,
    LoggingAnalyticsSink,
    NavCaddyAnalytics,
    RouteExecuted,
    Stopwatch,
)
from navcaddy.services.error_handler import ErrorHandler, ErrorPattern
from navcaddy.services.navigation_service import (
    Navigated,
    NavigationAction,
    NavigationExecutor,
    RequestConfirmation,
    ShowError,
    ShowPrerequisitePrompt,
    ShowResponse,
)
from navcaddy.services.routing_service import PrerequisiteChecker, RoutingOrchestrator, SessionPrerequisiteChecker
from navcaddy.services.session_context import SessionContextStore
from navcaddy.services.session_repository import SessionRepository

logger = logging.getLogger(__name__)


def _outcome(classification: ClassificationResult) -> str:
    return {Route: "route", Confirm: "confirm", Clarify: "clarify", Errored: "error"}[type(classification)]


def _action_text(action: NavigationAction) -> str:
    if isinstance(action, Navigated):
        return f"Opening {action.destination.to_route()}"
    if isinstance(action, ShowResponse):
        return action.text
    if isinstance(action, (ShowError, ShowPrerequisitePrompt, RequestConfirmation)):
        return action.message
    return ""


class NavCaddyEngine:
    def __init__(
        self,
        classifier: IntentClassifier,
        orchestrator: RoutingOrchestrator,
        executor: NavigationExecutor,
        store: SessionContextStore,
        *,
        error_handler: Optional[ErrorHandler] = None,
        analytics: Optional[NavCaddyAnalytics] = None,
        repository: Optional[SessionRepository] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.classifier = classifier
        self.orchestrator = orchestrator
        self.executor = executor
        self.store = store
        self.error_handler = error_handler or ErrorHandler.from_settings()
        self.analytics = analytics or NavCaddyAnalytics(LoggingAnalyticsSink())
        self.repository = repository
        self.session_id = session_id or uuid.uuid4().hex

        if repository is not None:
            persisted = repository.get_session(self.session_id)
            if persisted is not None:
                store.restore(persisted)

    @classmethod
    def create(
        cls,
        *,
        client: Optional[LLMClient] = None,
        checker: Optional[PrerequisiteChecker] = None,
        repository: Optional[SessionRepository] = None,
        analytics: Optional[NavCaddyAnalytics] = None,
        session_id: Optional[str] = None,
    ) -> "NavCaddyEngine":
        """Wire an engine from settings, overriding any collaborator given."""
        store = SessionContextStore()
        return cls(
            IntentClassifier(client or ProviderLLMClient.from_settings()),
            RoutingOrchestrator(checker or SessionPrerequisiteChecker(store)),
            NavigationExecutor(),
            store,
            analytics=analytics,
            repository=repository,
            session_id=session_id,
        )

    async def handle_input(self, text: str, *, operation_id: Optional[str] = None) -> NavigationAction:
        """Run one request end to end. Never raises for collaborator failures."""
        operation_id = operation_id or f"{self.session_id}:{uuid.uuid4().hex}"
        timer = Stopwatch()
        context = self.store.snapshot()

        while True:
            classification = await self.classifier.classify(text, context)
            if not isinstance(classification, Errored):
                self.error_handler.reset_retries(operation_id)
                break

            strategy = self.error_handler.handle(classification.cause, operation_id=operation_id, context=context)
            self.analytics.log(
                ErrorOccurred(
                    session_id=self.session_id,
                    kind=strategy.fault.kind.value,
                    operation_id=operation_id,
                    recoverable=strategy.fault.is_recoverable,
                    will_retry=strategy.should_auto_retry,
                )
            )
            if not strategy.should_auto_retry:
                action = ShowResponse(strategy.user_message, None, strategy.suggestions)
                await self._remember(text, action)
                return action
            await asyncio.sleep(strategy.backoff_ms / 1000)

        self._log_classification(classification, text, timer)
        return await self._route_and_execute(classification, text, timer)

    async def confirm(self, intent: ParsedIntent) -> NavigationAction:
        """The golfer said yes to a confirmation prompt.

        A "yes" cannot supply an entity the request never named, so an intent
        still missing one gets the entity question back instead of a route.
        """
        timer = Stopwatch()
        context = self.store.snapshot()
        confirmed = enrich_entities(intent.model_copy(update={"confidence": 1.0}), context)
        text = f"Yes, {label_for(intent.intent_type)}"
        missing = missing_entities(confirmed)
        if missing:
            action = ShowResponse(missing_entity_message(confirmed, missing), confirmed)
            await self._remember(text, action)
            return action
        route = Route(confirmed, default_target(confirmed, context))
        return await self._route_and_execute(route, text, timer)

    def detect_patterns(self) -> list[ErrorPattern]:
        return self.error_handler.detect_patterns()

    async def _route_and_execute(self, classification: ClassificationResult, text: str, timer: Stopwatch) -> NavigationAction:
        routing = await self.orchestrator.route(classification)
        action = self.executor.execute(routing)

        intent = getattr(action, "intent", None)
        self.analytics.log(
            RouteExecuted(
                session_id=self.session_id,
                intent=intent.intent_type.value if intent else None,
                action=type(action).__name__,
                route=action.destination.to_route() if isinstance(action, Navigated) else None,
                latency_ms=timer.elapsed_ms(),
            )
        )
        await self._remember(text, action)
        return action

    def _log_classification(self, classification: ClassificationResult, text: str, timer: Stopwatch) -> None:
        intent = getattr(classification, "intent", None)
        self.analytics.log(
            IntentClassified(
                session_id=self.session_id,
                intent=intent.intent_type.value if intent else None,
                confidence=intent.confidence if intent else 0.0,
                outcome=_outcome(classification),
                latency_ms=timer.elapsed_ms(),
            )
        )
        if isinstance(classification, Clarify):
            self.analytics.log(
                ClarificationRequested(
                    session_id=self.session_id,
                    input_text=text,
                    suggestions=tuple(s.label for s in classification.response.suggestions),
                )
            )

    async def _remember(self, text: str, action: NavigationAction) -> None:
        self.store.add_user_turn(text)
        self.store.add_assistant_turn(_action_text(action))
        if self.repository is None:
            return
        try:
            # Repository calls are blocking I/O; keep them off the event loop.
            await asyncio.to_thread(self.repository.save_session, self.session_id, self.store.snapshot())
        except Exception:
            logger.warning("Failed to persist session %s", self.session_id, exc_info=True)
