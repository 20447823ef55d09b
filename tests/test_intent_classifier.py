"""Tests for the intent classifier decision table.

Covers:
- Confidence bands and their inclusive lower bounds
- Required-entity downgrade to confirm
- Unknown intents / malformed responses -> clarify
- Client exceptions -> Errored
- Context enrichment and default target parameters
"""

import asyncio
import unittest
from unittest.mock import AsyncMock

import pytest

from conftest import intent_json
from navcaddy.schemas.intent import IntentType, Module, RoutingTarget
from navcaddy.schemas.session import SessionContext
from navcaddy.services.ai.intent.client import LLMClient, LLMResponse, LLMTimeoutError
from navcaddy.services.ai.intent.contracts import Clarify, Confirm, Errored, Route
from navcaddy.services.ai.intent.service import IntentClassifier


def _client(raw_text):
    client = AsyncMock(spec=LLMClient)
    client.classify.return_value = LLMResponse(raw_text=raw_text, model="test-model", provider="mock")
    return client


def _classify(raw_text, text="what should I do", context=None):
    classifier = IntentClassifier(_client(raw_text))
    return asyncio.run(classifier.classify(text, context))


@pytest.mark.parametrize(
    "confidence, expected",
    [
        (1.0, Route),
        (0.75, Route),
        (0.74, Confirm),
        (0.50, Confirm),
        (0.49, Clarify),
        (0.0, Clarify),
    ],
)
def test_confidence_bands(confidence, expected):
    result = _classify(intent_json("weather_check", confidence))
    assert isinstance(result, expected)


class IntentClassifierTests(unittest.TestCase):
    def test_route_with_target(self):
        result = _classify(intent_json("club_adjustment", 0.85, {"club": "7-iron"}), "My 7i feels long today")
        self.assertIsInstance(result, Route)
        self.assertEqual(result.intent.intent_type, IntentType.CLUB_ADJUSTMENT)
        self.assertEqual(result.target, RoutingTarget(Module.CADDY, "club_adjustment", {"club": "7-iron"}))

    def test_missing_required_entity_downgrades_to_confirm(self):
        result = _classify(intent_json("club_adjustment", 0.85), "it feels long")
        self.assertIsInstance(result, Confirm)
        self.assertIn("club", result.message)

    def test_mid_confidence_confirm_message(self):
        result = _classify(intent_json("recovery_check", 0.6))
        self.assertIsInstance(result, Confirm)
        self.assertTrue(result.message.startswith("Did you want to"))
        self.assertTrue(result.message.endswith("?"))

    def test_unknown_intent_clarifies(self):
        result = _classify(intent_json("book_tee_time", 0.95))
        self.assertIsInstance(result, Clarify)
        self.assertGreaterEqual(len(result.response.suggestions), 1)

    def test_malformed_response_clarifies(self):
        result = _classify("Sorry, I can't help with that.")
        self.assertIsInstance(result, Clarify)

    def test_client_exception_becomes_errored(self):
        client = AsyncMock(spec=LLMClient)
        client.classify.side_effect = LLMTimeoutError(3.0)
        result = asyncio.run(IntentClassifier(client).classify("what club"))
        self.assertIsInstance(result, Errored)
        self.assertIsInstance(result.cause, LLMTimeoutError)

    def test_blank_input_never_calls_client(self):
        client = _client(intent_json("feedback", 0.9))
        result = asyncio.run(IntentClassifier(client).classify("   "))
        self.assertIsInstance(result, Clarify)
        client.classify.assert_not_called()

    def test_client_receives_normalized_text(self):
        client = _client(intent_json("shot_recommendation", 0.9))
        asyncio.run(IntentClassifier(client).classify("what club for one fifty"))
        sent_text = client.classify.call_args.args[0]
        self.assertEqual(sent_text, "what club for 150")

    def test_hole_number_filled_from_context(self):
        context = SessionContext(current_round_id="r1", current_hole=5)
        result = _classify(intent_json("score_entry", 0.9), "I made par", context)
        self.assertIsInstance(result, Route)
        self.assertEqual(result.target.parameters, {"hole": "5"})

    def test_score_entry_without_hole_confirms(self):
        result = _classify(intent_json("score_entry", 0.9), "I made par")
        self.assertIsInstance(result, Confirm)
        self.assertIn("hole number", result.message)

    def test_shot_recommendation_parameters(self):
        entities = {"yardage": 150, "club": "7-iron", "lie": "rough", "wind": "into"}
        result = _classify(intent_json("shot_recommendation", 0.9, entities))
        self.assertEqual(
            result.target.parameters,
            {"yardage": "150", "club": "7-iron", "lie": "rough", "wind": "into"},
        )

    def test_low_confidence_hint_is_first_suggestion(self):
        result = _classify(intent_json("drill_request", 0.3), "hmm")
        self.assertEqual(result.response.suggestions[0].intent_type, IntentType.DRILL_REQUEST)

    def test_decide_is_pure(self):
        classifier = IntentClassifier(_client("{}"))
        from navcaddy.schemas.intent import ParsedIntent

        intent = ParsedIntent(intent_type=IntentType.WEATHER_CHECK, confidence=0.8)
        self.assertEqual(classifier.decide(intent), classifier.decide(intent))


class MalformedModelAnswerTests(unittest.TestCase):
    def test_infinite_yardage_still_routes(self):
        raw = '{"intent": "shot_recommendation", "confidence": 0.9, "entities": {"yardage": Infinity}}'
        result = _classify(raw)
        self.assertIsInstance(result, Route)
        self.assertNotIn("yardage", result.target.parameters)

    def test_deeply_nested_answer_clarifies(self):
        depth = 20000
        raw = '{"intent": "score_entry", "confidence": 0.9, "entities": ' + "[" * depth + "]" * depth + "}"
        self.assertIsInstance(_classify(raw), Clarify)
