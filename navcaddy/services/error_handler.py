"""Error classification, retry policy and session-level failure patterns.

Faults are mapped into a closed taxonomy. Retryable kinds back off
exponentially with jitter, keyed by caller-supplied operation id; once the
attempt limit is reached the fault is surfaced with local suggestions.
Nothing here raises to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import httpx

from navcaddy.core.config import get_settings
from navcaddy.schemas.session import SessionContext
from navcaddy.services.ai.intent.client import LLMNetworkError, LLMTimeoutError
from navcaddy.services.ai.intent.contracts import IntentSuggestion
from navcaddy.services.local_suggestions import LocalIntentSuggestions, SuggestionSet

logger = logging.getLogger(__name__)

ERROR_HISTORY_SIZE = 50
PATTERN_THRESHOLD = 3


class NoSpeechDetectedError(Exception):
    pass


class VoicePermissionDeniedError(Exception):
    pass


class NetworkUnavailableError(Exception):
    pass


class ErrorKind(str, Enum):
    LLM_TIMEOUT = "llm_timeout"
    LLM_NETWORK_ERROR = "llm_network_error"
    NETWORK_UNAVAILABLE = "network_unavailable"
    CLASSIFICATION_FAILED = "classification_failed"
    NEEDS_CLARIFICATION = "needs_clarification"
    NO_SPEECH_DETECTED = "no_speech_detected"
    VOICE_PERMISSION_DENIED = "voice_permission_denied"
    UNKNOWN = "unknown"


class RecoveryAction(str, Enum):
    OPEN_SETTINGS = "open_settings"
    CHECK_NETWORK = "check_network"
    USE_OFFLINE_MODE = "use_offline_mode"
    RETRY = "retry"


USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.LLM_TIMEOUT: "The request took too long. Let me suggest some options instead.",
    ErrorKind.LLM_NETWORK_ERROR: (
        "I'm having trouble connecting right now. Here are some things I can help with offline."
    ),
    ErrorKind.NETWORK_UNAVAILABLE: "You're offline. Here are some things I can help with without a connection.",
    ErrorKind.CLASSIFICATION_FAILED: "I had trouble understanding that. Could you try saying it another way?",
    ErrorKind.NEEDS_CLARIFICATION: "I'm not sure what you meant. Could you clarify?",
    ErrorKind.NO_SPEECH_DETECTED: "I didn't catch that. Please try speaking again.",
    ErrorKind.VOICE_PERMISSION_DENIED: "Please enable Speech Recognition in Settings to use voice input.",
    ErrorKind.UNKNOWN: "Something didn't work on my end. Please try again.",
}

RETRYABLE_KINDS = frozenset({ErrorKind.LLM_TIMEOUT, ErrorKind.LLM_NETWORK_ERROR})

RECOVERY_ACTIONS: dict[ErrorKind, tuple[RecoveryAction, ...]] = {
    ErrorKind.VOICE_PERMISSION_DENIED: (RecoveryAction.OPEN_SETTINGS,),
    ErrorKind.NETWORK_UNAVAILABLE: (RecoveryAction.CHECK_NETWORK, RecoveryAction.USE_OFFLINE_MODE),
    ErrorKind.LLM_NETWORK_ERROR: (RecoveryAction.CHECK_NETWORK, RecoveryAction.USE_OFFLINE_MODE),
    ErrorKind.LLM_TIMEOUT: (RecoveryAction.RETRY,),
    ErrorKind.NO_SPEECH_DETECTED: (RecoveryAction.RETRY,),
}

FALLBACK_SETS: dict[ErrorKind, SuggestionSet] = {
    ErrorKind.LLM_TIMEOUT: SuggestionSet.LLM_UNAVAILABLE,
    ErrorKind.LLM_NETWORK_ERROR: SuggestionSet.LLM_UNAVAILABLE,
    ErrorKind.NETWORK_UNAVAILABLE: SuggestionSet.OFFLINE,
    ErrorKind.CLASSIFICATION_FAILED: SuggestionSet.CLARIFICATION,
    ErrorKind.NEEDS_CLARIFICATION: SuggestionSet.CLARIFICATION,
    ErrorKind.NO_SPEECH_DETECTED: SuggestionSet.COMMON_TASK,
    ErrorKind.VOICE_PERMISSION_DENIED: SuggestionSet.COMMON_TASK,
    ErrorKind.UNKNOWN: SuggestionSet.DEFAULT,
}


@dataclass(frozen=True)
class NavCaddyFault:
    kind: ErrorKind
    detail: Optional[str] = None

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.kind]

    @property
    def is_recoverable(self) -> bool:
        return self.kind is not ErrorKind.VOICE_PERMISSION_DENIED

    @property
    def should_auto_retry(self) -> bool:
        return self.kind in RETRYABLE_KINDS


def fault_from_exception(exc: BaseException) -> NavCaddyFault:
    if isinstance(exc, (LLMTimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return NavCaddyFault(ErrorKind.LLM_TIMEOUT)
    if isinstance(exc, LLMNetworkError):
        return NavCaddyFault(ErrorKind.LLM_NETWORK_ERROR, exc.message)
    if isinstance(exc, (NetworkUnavailableError, httpx.ConnectError)):
        return NavCaddyFault(ErrorKind.NETWORK_UNAVAILABLE)
    if isinstance(exc, httpx.HTTPError):
        return NavCaddyFault(ErrorKind.LLM_NETWORK_ERROR, type(exc).__name__)
    if isinstance(exc, NoSpeechDetectedError):
        return NavCaddyFault(ErrorKind.NO_SPEECH_DETECTED)
    if isinstance(exc, VoicePermissionDeniedError):
        return NavCaddyFault(ErrorKind.VOICE_PERMISSION_DENIED)
    if isinstance(exc, ValueError):
        return NavCaddyFault(ErrorKind.CLASSIFICATION_FAILED, str(exc) or type(exc).__name__)
    return NavCaddyFault(ErrorKind.UNKNOWN, type(exc).__name__)


@dataclass
class RetryState:
    attempts: int = 0
    last_backoff_ms: int = 0


class RetryStateStore:
    """Per-operation retry counters, evicting the least recently used id."""

    def __init__(self, capacity: int) -> None:
        self._capacity = max(1, capacity)
        self._states: OrderedDict[str, RetryState] = OrderedDict()

    def get(self, operation_id: str) -> RetryState:
        state = self._states.get(operation_id)
        if state is None:
            state = RetryState()
            self._states[operation_id] = state
            if len(self._states) > self._capacity:
                evicted, _ = self._states.popitem(last=False)
                logger.debug("Evicted retry state for %s", evicted)
        else:
            self._states.move_to_end(operation_id)
        return state

    def peek(self, operation_id: str) -> Optional[RetryState]:
        return self._states.get(operation_id)

    def clear(self, operation_id: str) -> None:
        self._states.pop(operation_id, None)

    def reset(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)


@dataclass(frozen=True)
class RecoveryStrategy:
    fault: NavCaddyFault
    user_message: str
    should_auto_retry: bool
    backoff_ms: Optional[int] = None
    attempt: int = 0
    suggestions: tuple[IntentSuggestion, ...] = ()
    recovery_actions: tuple[RecoveryAction, ...] = ()


class ErrorPatternKind(str, Enum):
    REPEATED_TIMEOUTS = "repeated_timeouts"
    NETWORK_INSTABILITY = "network_instability"
    PERMISSION_ISSUES = "permission_issues"


@dataclass(frozen=True)
class ErrorPattern:
    kind: ErrorPatternKind
    count: int
    recommendation: str


PATTERN_RECOMMENDATIONS: dict[ErrorPatternKind, str] = {
    ErrorPatternKind.REPEATED_TIMEOUTS: "Responses are slow right now. Try the quick actions below instead.",
    ErrorPatternKind.NETWORK_INSTABILITY: "Your connection keeps dropping. Switch to offline mode for now?",
    ErrorPatternKind.PERMISSION_ISSUES: "Voice input needs Speech Recognition access. Open Settings to turn it on.",
}


@dataclass
class ErrorHandler:
    """One instance per session: retry counters and error history live here."""

    base_backoff_ms: int = 250
    max_backoff_ms: int = 5000
    max_attempts: int = 3
    retry_capacity: int = 1024
    rng: random.Random = field(default_factory=random.Random)
    local_suggestions: LocalIntentSuggestions = field(default_factory=LocalIntentSuggestions)

    def __post_init__(self) -> None:
        self._retry = RetryStateStore(self.retry_capacity)
        self._history: deque[ErrorKind] = deque(maxlen=ERROR_HISTORY_SIZE)

    @classmethod
    def from_settings(cls, *, rng: Optional[random.Random] = None) -> "ErrorHandler":
        settings = get_settings()
        return cls(
            base_backoff_ms=settings.retry_base_backoff_ms,
            max_backoff_ms=settings.retry_max_backoff_ms,
            max_attempts=settings.retry_max_attempts,
            retry_capacity=settings.retry_state_capacity,
            rng=rng or random.Random(),
        )

    @property
    def retry_states(self) -> RetryStateStore:
        return self._retry

    def compute_backoff(self, attempt: int) -> int:
        """Delay for zero-based *attempt*: ``[base*2^n, 1.5*base*2^n)`` capped."""
        delay = self.base_backoff_ms * (2 ** max(0, attempt))
        jitter = self.rng.random() * delay / 2
        return int(min(self.max_backoff_ms, delay + jitter))

    def handle(
        self,
        error: Union[BaseException, NavCaddyFault],
        *,
        operation_id: str,
        context: Optional[SessionContext] = None,
    ) -> RecoveryStrategy:
        fault = error if isinstance(error, NavCaddyFault) else fault_from_exception(error)
        self._history.append(fault.kind)
        actions = RECOVERY_ACTIONS.get(fault.kind, ())

        if fault.should_auto_retry:
            state = self._retry.get(operation_id)
            if state.attempts < self.max_attempts:
                backoff = self.compute_backoff(state.attempts)
                state.attempts += 1
                state.last_backoff_ms = backoff
                logger.info(
                    "Retrying %s after %s (attempt %d/%d, backoff %dms)",
                    operation_id,
                    fault.kind.value,
                    state.attempts,
                    self.max_attempts,
                    backoff,
                )
                return RecoveryStrategy(
                    fault=fault,
                    user_message=fault.user_message,
                    should_auto_retry=True,
                    backoff_ms=backoff,
                    attempt=state.attempts,
                    recovery_actions=actions,
                )
            logger.warning("Retries exhausted for %s (%s)", operation_id, fault.kind.value)
            self._retry.clear(operation_id)

        return RecoveryStrategy(
            fault=fault,
            user_message=fault.user_message,
            should_auto_retry=False,
            suggestions=self.local_suggestions.suggestions(FALLBACK_SETS[fault.kind], context),
            recovery_actions=actions,
        )

    def reset_retries(self, operation_id: str) -> None:
        """Call once an operation concludes successfully."""
        self._retry.clear(operation_id)

    def detect_patterns(self) -> list[ErrorPattern]:
        timeouts = sum(1 for k in self._history if k is ErrorKind.LLM_TIMEOUT)
        network = sum(
            1 for k in self._history if k in (ErrorKind.LLM_NETWORK_ERROR, ErrorKind.NETWORK_UNAVAILABLE)
        )
        permission = sum(1 for k in self._history if k is ErrorKind.VOICE_PERMISSION_DENIED)

        patterns: list[ErrorPattern] = []
        if timeouts >= PATTERN_THRESHOLD:
            patterns.append(_pattern(ErrorPatternKind.REPEATED_TIMEOUTS, timeouts))
        if network >= PATTERN_THRESHOLD:
            patterns.append(_pattern(ErrorPatternKind.NETWORK_INSTABILITY, network))
        if permission >= 1:
            patterns.append(_pattern(ErrorPatternKind.PERMISSION_ISSUES, permission))
        return patterns

    def clear_history(self) -> None:
        self._history.clear()


def _pattern(kind: ErrorPatternKind, count: int) -> ErrorPattern:
    return ErrorPattern(kind=kind, count=count, recommendation=PATTERN_RECOMMENDATIONS[kind])
