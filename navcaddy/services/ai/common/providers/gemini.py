"""Google Gemini provider (REST ``generateContent``)."""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from .base import BaseProvider, ProviderResult

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


class GeminiProvider(BaseProvider):
    name = "gemini"

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
        model = model or DEFAULT_GEMINI_MODEL
        payload: dict = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
                "responseMimeType": "application/json",
            },
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=timeout_seconds, transport=self._transport) as client:
            resp = await client.post(
                f"{GEMINI_API_BASE}/{model}:generateContent",
                params={"key": self._api_key},
                json=payload,
            )
            resp.raise_for_status()
            data = resp.json()
        elapsed = (time.monotonic() - t0) * 1000

        candidates = data.get("candidates") or []
        parts = candidates[0].get("content", {}).get("parts", []) if candidates else []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            logger.warning(
                "Gemini returned no text (finishReason=%s)",
                candidates[0].get("finishReason") if candidates else None,
            )
        usage = data.get("usageMetadata", {})

        return ProviderResult(
            raw_text=text,
            model=model,
            provider=self.name,
            prompt_tokens=usage.get("promptTokenCount", 0),
            completion_tokens=usage.get("candidatesTokenCount", 0),
            latency_ms=round(elapsed, 2),
        )
