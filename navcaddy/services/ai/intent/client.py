"""Classification service client.

``LLMClient`` is the narrow contract the classifier depends on. The concrete
``ProviderLLMClient`` wraps any ``BaseProvider`` and turns transport failures
into the two typed faults the error layer understands.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from navcaddy.schemas.session import SessionContext
from navcaddy.services.session_context import build_context_prompt

from ..common import router as ai_router
from ..common.providers.base import BaseProvider
from .registry import build_system_prompt

logger = logging.getLogger(__name__)


class ClassificationServiceError(Exception):
    pass


class LLMNetworkError(ClassificationServiceError):
    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class LLMTimeoutError(ClassificationServiceError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"classification timed out after {timeout_seconds:.2f}s")
        self.timeout_seconds = timeout_seconds


@dataclass(frozen=True)
class LLMResponse:
    raw_text: str
    model: str = ""
    provider: str = ""
    latency_ms: float = 0.0


class LLMClient(abc.ABC):
    @abc.abstractmethod
    async def classify(self, text: str, context: Optional[SessionContext] = None) -> LLMResponse:
        """Return the raw model answer for *text*; raise on transport failure."""


def build_user_prompt(text: str, context: Optional[SessionContext]) -> str:
    fragment = build_context_prompt(context)
    utterance = f'Golfer said: "{text}"'
    return f"{fragment}\n\n{utterance}" if fragment else utterance


class ProviderLLMClient(LLMClient):
    def __init__(
        self,
        provider: BaseProvider,
        *,
        model: str = "",
        temperature: float = 0.0,
        max_tokens: int = 512,
        timeout_seconds: float = 3.0,
        system_prompt: Optional[str] = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds
        self._system_prompt = system_prompt if system_prompt is not None else build_system_prompt()

    @classmethod
    def from_settings(
        cls,
        *,
        override_provider: Optional[str] = None,
        override_model: Optional[str] = None,
    ) -> "ProviderLLMClient":
        config = ai_router.resolve(override_provider=override_provider, override_model=override_model)
        return cls(
            config.provider,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
        )

    @property
    def provider_name(self) -> str:
        return self._provider.name

    async def classify(self, text: str, context: Optional[SessionContext] = None) -> LLMResponse:
        prompt = build_user_prompt(text, context)
        t0 = time.monotonic()
        try:
            result = await asyncio.wait_for(
                self._provider.generate(
                    prompt,
                    system=self._system_prompt,
                    model=self._model,
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                    timeout_seconds=self._timeout_seconds,
                ),
                timeout=self._timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Provider %s timed out after %.2fs", self._provider.name, self._timeout_seconds)
            raise LLMTimeoutError(self._timeout_seconds) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Provider %s returned HTTP %s", self._provider.name, status)
            raise LLMNetworkError(f"HTTP {status}", status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.warning("Provider %s transport error: %s", self._provider.name, type(exc).__name__)
            raise LLMNetworkError(type(exc).__name__) from exc

        total_ms = (time.monotonic() - t0) * 1000
        return LLMResponse(
            raw_text=result.raw_text,
            model=result.model,
            provider=result.provider,
            latency_ms=round(result.latency_ms or total_ms, 2),
        )
