"""Classifier model providers.

``get_provider`` picks the backend the intent classifier talks to. Anything
that cannot serve a real request (not allow-listed, missing key, unknown
name) degrades to ``MockProvider``, whose low-confidence answer sends every
request down the clarification path instead of failing.
"""

from __future__ import annotations

import logging
from typing import Callable

from navcaddy.core.config import Settings, get_settings

from .base import BaseProvider, ProviderResult
from .mock import MockProvider

logger = logging.getLogger(__name__)

__all__ = ["get_provider", "BaseProvider", "ProviderResult", "MockProvider"]


def _claude(api_key: str) -> BaseProvider:
    from .claude import ClaudeProvider

    return ClaudeProvider(api_key=api_key)


def _gemini(api_key: str) -> BaseProvider:
    from .gemini import GeminiProvider

    return GeminiProvider(api_key=api_key)


# name -> (env var named in logs, settings lookup for the key, constructor)
_KEYED_PROVIDERS: dict[str, tuple[str, Callable[[Settings], str], Callable[[str], BaseProvider]]] = {
    "claude": ("ANTHROPIC_API_KEY", lambda s: s.anthropic_api_key, _claude),
    "gemini": ("GEMINI_API_KEY", lambda s: s.gemini_api_key, _gemini),
}


def get_provider(provider_name: str) -> BaseProvider:
    """Return the classifier backend for *provider_name*, or the mock."""
    settings = get_settings()
    name = provider_name.lower().strip()

    if name not in settings.llm_allowed_providers:
        logger.warning("Classifier provider %r not in allowlist - using mock", name)
        return MockProvider()
    if name == "mock":
        return MockProvider()

    entry = _KEYED_PROVIDERS.get(name)
    if entry is None:
        logger.warning("Unknown classifier provider %r - using mock", name)
        return MockProvider()

    env_name, key_of, build = entry
    api_key = key_of(settings)
    if not api_key:
        logger.warning("%s not set - classifier falls back to mock", env_name)
        return MockProvider()
    return build(api_key)
