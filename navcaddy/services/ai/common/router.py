"""Provider resolution: override > settings > mock fallback, with model allowlist."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from navcaddy.core.config import get_settings

from .providers import BaseProvider, get_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedConfig:
    """Final provider + call parameters for the classifier."""

    provider: BaseProvider
    model: str
    temperature: float
    max_tokens: int
    timeout_seconds: float


def resolve(
    *,
    override_provider: Optional[str] = None,
    override_model: Optional[str] = None,
) -> ResolvedConfig:
    """Resolve the classification provider.

    Resolution chain (first non-empty wins):
      1. ``override_provider`` / ``override_model``, only when
         ``enable_llm_overrides`` is on.
      2. ``NAVCADDY_LLM_PROVIDER`` / ``NAVCADDY_LLM_MODEL``.
      3. ``"mock"`` with empty model.

    A model outside the provider's allowlist is replaced by the first
    allowed model.
    """
    settings = get_settings()

    provider_name = ""
    if settings.enable_llm_overrides and override_provider:
        provider_name = override_provider.lower().strip()
    if not provider_name:
        provider_name = settings.llm_provider or "mock"

    model = ""
    if settings.enable_llm_overrides and override_model:
        model = override_model.strip()
    if not model:
        model = settings.llm_model

    allowed_models = settings.llm_allowed_models.get(provider_name, [])
    if allowed_models and model and model not in allowed_models:
        logger.warning(
            "Model %r not in allowlist for %r - using first allowed: %r",
            model,
            provider_name,
            allowed_models[0],
        )
        model = allowed_models[0]
    if allowed_models and not model:
        model = allowed_models[0]

    provider = get_provider(provider_name)
    if provider.name == "mock" and provider_name != "mock":
        model = ""

    return ResolvedConfig(
        provider=provider,
        model=model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout_seconds=settings.llm_timeout_seconds,
    )
