"""Anthropic Messages API provider."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from .base import BaseProvider, ProviderResult

logger = logging.getLogger(__name__)

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
DEFAULT_CLAUDE_MODEL = "claude-3-5-haiku-20241022"


class ClaudeProvider(BaseProvider):
    name = "claude"

    def __init__(self, api_key: str, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._api_key = api_key
        self._transport = transport

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
        model = model or DEFAULT_CLAUDE_MODEL
        payload: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            payload["system"] = system

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=timeout_seconds, transport=self._transport) as client:
            resp = await client.post(
                ANTHROPIC_MESSAGES_URL,
                headers={
                    "x-api-key": self._api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
        elapsed = (time.monotonic() - t0) * 1000

        text = "".join(
            block.get("text", "") for block in data.get("content", []) if block.get("type", "text") == "text"
        )
        if not text:
            logger.warning("Claude returned no text blocks (stop_reason=%s)", data.get("stop_reason"))
        usage = data.get("usage", {})

        return ProviderResult(
            raw_text=text,
            model=data.get("model", model),
            provider=self.name,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=round(elapsed, 2),
        )
