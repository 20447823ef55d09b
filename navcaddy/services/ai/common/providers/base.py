"""Provider contract for the intent classifier.

A provider turns one (system, prompt) pair into raw model text. Decoding and
confidence handling live in ``navcaddy.services.ai.intent``.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass


@dataclass(frozen=True)
class ProviderResult:
    """Raw model answer plus usage numbers for analytics."""

    raw_text: str
    model: str
    provider: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0


class BaseProvider(abc.ABC):
    """One classifier backend (Claude, Gemini or the mock).

    ``system`` carries the classifier instructions, ``prompt`` the per-request
    user turn (context fragment plus the normalized utterance).
    """

    name: str = "base"

    @abc.abstractmethod
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
        """Send *prompt* and return a ``ProviderResult``."""
