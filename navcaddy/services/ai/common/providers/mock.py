"""Mock provider: scripted, deterministic responses for tests and offline fallback."""

from __future__ import annotations

import json
import time
from collections import deque
from typing import Iterable, Optional

from .base import BaseProvider, ProviderResult

# Recent prompts kept for inspection; the mock is also the production fallback.
PROMPT_LOG_SIZE = 32

# Low confidence on purpose: without a real model every request ends in clarification.
DEFAULT_MOCK_RESPONSE = json.dumps(
    {"intent": "help_request", "confidence": 0.0, "entities": {}, "userGoal": None}
)


class MockProvider(BaseProvider):
    name = "mock"

    def __init__(self, responses: Optional[Iterable[str]] = None, *, default: str = DEFAULT_MOCK_RESPONSE) -> None:
        self._script: deque[str] = deque(responses or ())
        self._default = default
        self.prompts: deque[str] = deque(maxlen=PROMPT_LOG_SIZE)

    def queue(self, *responses: str) -> None:
        self._script.extend(responses)

    async def generate(
        self,
        prompt: str,
        *,
        system: str = "",
        model: str = "",
        temperature: float = 0.0,
        max_tokens: int = 512,
        timeout_seconds: float = 3.0,
    ) -> ProviderResult:
        t0 = time.monotonic()
        self.prompts.append(prompt)
        text = self._script.popleft() if self._script else self._default
        elapsed = (time.monotonic() - t0) * 1000
        return ProviderResult(
            raw_text=text,
            model=model or "mock-v1",
            provider=self.name,
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(text.split()),
            latency_ms=round(elapsed, 2),
        )
