import json

import pytest

from navcaddy.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_settings_cache(monkeypatch):
    # Tests mutate env vars; never leak a cached Settings instance across tests.
    for name in ("NAVCADDY_LLM_PROVIDER", "NAVCADDY_LLM_MODEL", "ANTHROPIC_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def intent_json(intent, confidence, entities=None, user_goal=None):
    """Model answer in the shape the classifier prompt asks for."""
    return json.dumps(
        {
            "intent": intent,
            "confidence": confidence,
            "entities": entities or {},
            "userGoal": user_goal,
        }
    )
