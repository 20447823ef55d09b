"""Analytics events and sinks.

Sinks are external; ``NavCaddyAnalytics.log`` guarantees a failing sink can
never change a routing outcome.
"""

from __future__ import annotations

import abc
import json
import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from navcaddy.core.config import get_settings
from navcaddy.utils.pii import redact_pii

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsEvent:
    session_id: str

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        data = {k: (v.value if hasattr(v, "value") else v) for k, v in asdict(self).items()}
        data["event"] = self.name
        return data


@dataclass(frozen=True)
class IntentClassified(AnalyticsEvent):
    intent: Optional[str] = None
    confidence: float = 0.0
    outcome: str = ""
    latency_ms: float = 0.0


@dataclass(frozen=True)
class ClarificationRequested(AnalyticsEvent):
    input_text: str = ""
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class RouteExecuted(AnalyticsEvent):
    intent: Optional[str] = None
    action: str = ""
    route: Optional[str] = None
    latency_ms: float = 0.0


@dataclass(frozen=True)
class ErrorOccurred(AnalyticsEvent):
    kind: str = ""
    operation_id: str = ""
    recoverable: bool = True
    will_retry: bool = False


class AnalyticsSink(abc.ABC):
    @abc.abstractmethod
    def log(self, event: AnalyticsEvent) -> None:
        """Deliver one event; may raise."""


class LoggingAnalyticsSink(AnalyticsSink):
    def __init__(self, sink_logger: Optional[logging.Logger] = None) -> None:
        self._logger = sink_logger or logging.getLogger("navcaddy.analytics")

    def log(self, event: AnalyticsEvent) -> None:
        self._logger.info("analytics %s %s", event.name, json.dumps(event.to_dict(), sort_keys=True, default=str))


@dataclass
class InMemoryAnalyticsSink(AnalyticsSink):
    events: list[AnalyticsEvent] = field(default_factory=list)

    def log(self, event: AnalyticsEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[AnalyticsEvent]:
        return [e for e in self.events if isinstance(e, event_type)]


class NavCaddyAnalytics:
    def __init__(self, sink: AnalyticsSink, *, redact: Optional[bool] = None) -> None:
        self._sink = sink
        self._redact = get_settings().analytics_redact_pii if redact is None else redact

    def log(self, event: AnalyticsEvent) -> None:
        if self._redact and isinstance(event, ClarificationRequested):
            event = ClarificationRequested(
                session_id=event.session_id,
                input_text=redact_pii(event.input_text),
                suggestions=event.suggestions,
            )
        try:
            self._sink.log(event)
        except Exception:
            logger.warning("Analytics sink failed for %s", event.name, exc_info=True)


class Stopwatch:
    """Millisecond timer for latency fields."""

    def __init__(self) -> None:
        self._t0 = time.monotonic()

    def elapsed_ms(self) -> float:
        return round((time.monotonic() - self._t0) * 1000, 2)
