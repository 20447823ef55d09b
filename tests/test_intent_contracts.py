"""Tests for the model payload decoder, entity sanitizing and json_tools."""

import json
import unittest

from navcaddy.schemas.intent import ExtractedEntities, IntentType, Lie, ParsedIntent, RoutingTarget, Module
from navcaddy.services.ai.common.json_tools import extract_json, extract_json_object
from navcaddy.services.ai.intent.contracts import decode_intent_payload


class JsonToolsTests(unittest.TestCase):
    def test_valid_json_object(self):
        result = extract_json('{"intent": "score_entry", "confidence": 0.9}')
        self.assertEqual(result["intent"], "score_entry")

    def test_json_with_prefix(self):
        result = extract_json('Sure! Here it is: {"intent": "feedback", "confidence": 0.8} hope that helps')
        self.assertEqual(result["intent"], "feedback")

    def test_fenced_json(self):
        result = extract_json('```json\n{"intent": "weather_check", "confidence": 0.7}\n```')
        self.assertEqual(result["intent"], "weather_check")

    def test_nested_braces_and_escaped_quotes(self):
        result = extract_json('x {"a": {"b": "say \\"hi\\" {not a brace}"}} y')
        self.assertIn("hi", result["a"]["b"])

    def test_nothing_parseable(self):
        self.assertIsNone(extract_json(""))
        self.assertIsNone(extract_json("no json here"))
        self.assertIsNone(extract_json("{broken"))

    def test_object_only(self):
        self.assertIsNone(extract_json_object("[1, 2]"))
        self.assertEqual(extract_json_object('[{"intent": "help_request"}]'), {"intent": "help_request"})


class EntitySanitizingTests(unittest.TestCase):
    def test_out_of_range_values_are_dropped(self):
        e = ExtractedEntities.model_validate({"hole_number": 25, "yardage": -10, "lie": "moon"})
        self.assertIsNone(e.hole_number)
        self.assertIsNone(e.yardage)
        self.assertIsNone(e.lie)

    def test_fatigue_is_clamped(self):
        self.assertEqual(ExtractedEntities(fatigue=14).fatigue, 10)
        self.assertEqual(ExtractedEntities(fatigue=0).fatigue, 1)

    def test_strings_are_coerced(self):
        e = ExtractedEntities.model_validate({"yardage": "150 yards", "hole_number": "7", "lie": "Sand"})
        self.assertEqual(e.yardage, 150)
        self.assertEqual(e.hole_number, 7)
        self.assertEqual(e.lie, Lie.BUNKER)

    def test_blank_club_is_absent(self):
        self.assertIsNone(ExtractedEntities(club="  ").club)

    def test_confidence_clamped(self):
        self.assertEqual(ParsedIntent(intent_type=IntentType.FEEDBACK, confidence=1.7).confidence, 1.0)
        self.assertEqual(ParsedIntent(intent_type=IntentType.FEEDBACK, confidence=-3).confidence, 0.0)
        self.assertEqual(ParsedIntent(intent_type=IntentType.FEEDBACK, confidence="n/a").confidence, 0.0)


class DecodeIntentPayloadTests(unittest.TestCase):
    def test_full_payload(self):
        raw = json.dumps(
            {
                "intent": "shotRecommendation",
                "confidence": 0.82,
                "entities": {"yardage": 150, "club": "7-iron", "lie": "rough", "holeNumber": 4, "scoreContext": "par"},
                "userGoal": "pick a club",
            }
        )
        result = decode_intent_payload(raw)
        self.assertTrue(result.ok)
        parsed = result.intent
        self.assertEqual(parsed.intent_type, IntentType.SHOT_RECOMMENDATION)
        self.assertAlmostEqual(parsed.confidence, 0.82)
        self.assertEqual(parsed.entities.yardage, 150)
        self.assertEqual(parsed.entities.lie, Lie.ROUGH)
        self.assertEqual(parsed.entities.hole_number, 4)
        self.assertEqual(parsed.entities.score_context, "par")
        self.assertEqual(parsed.user_goal, "pick a club")

    def test_upper_case_intent(self):
        result = decode_intent_payload('{"intent": "CLUB_ADJUSTMENT", "confidence": 0.9}')
        self.assertEqual(result.intent.intent_type, IntentType.CLUB_ADJUSTMENT)

    def test_unknown_intent_is_a_fault_not_an_exception(self):
        result = decode_intent_payload('{"intent": "order_pizza", "confidence": 0.99}')
        self.assertFalse(result.ok)
        self.assertIn("unknown intent", result.fault)

    def test_missing_intent(self):
        result = decode_intent_payload('{"confidence": 0.9}')
        self.assertFalse(result.ok)

    def test_malformed_json(self):
        result = decode_intent_payload("I think they want a club adjustment")
        self.assertFalse(result.ok)
        self.assertIsNone(result.intent)

    def test_bad_entities_are_ignored(self):
        result = decode_intent_payload('{"intent": "score_entry", "confidence": 0.9, "entities": "hole 3"}')
        self.assertTrue(result.ok)
        self.assertEqual(result.intent.entities, ExtractedEntities())


class RoutingTargetTests(unittest.TestCase):
    def test_parameter_order_does_not_matter(self):
        a = RoutingTarget(Module.CADDY, "shot_recommendation", {"club": "7-iron", "yardage": "150"})
        b = RoutingTarget(Module.CADDY, "shot_recommendation", {"yardage": "150", "club": "7-iron"})
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))


class HostileModelOutputTests(unittest.TestCase):
    def test_non_finite_numbers_drop_only_that_entity(self):
        raw = (
            '{"intent": "shot_recommendation", "confidence": 0.9, '
            '"entities": {"yardage": Infinity, "fatigue": NaN, "holeNumber": -Infinity, "club": "7-iron"}}'
        )
        result = decode_intent_payload(raw)
        self.assertTrue(result.ok)
        entities = result.intent.entities
        self.assertIsNone(entities.yardage)
        self.assertIsNone(entities.fatigue)
        self.assertIsNone(entities.hole_number)
        self.assertEqual(entities.club, "7-iron")

    def test_non_finite_confidence(self):
        result = decode_intent_payload('{"intent": "feedback", "confidence": NaN}')
        self.assertEqual(result.intent.confidence, 0.0)
        huge = decode_intent_payload('{"intent": "feedback", "confidence": 1' + "0" * 400 + "}")
        self.assertEqual(huge.intent.confidence, 0.0)

    def test_oversized_digit_string_keeps_other_entities(self):
        raw = json.dumps(
            {"intent": "club_adjustment", "confidence": 0.9, "entities": {"club": "7-iron", "yardage": "9" * 5000}}
        )
        entities = decode_intent_payload(raw).intent.entities
        self.assertEqual(entities.club, "7-iron")
        self.assertIsNone(entities.yardage)

    def test_deeply_nested_json_is_a_fault(self):
        depth = 20000
        raw = '{"intent": "score_entry", "confidence": 0.9, "entities": ' + "[" * depth + "]" * depth + "}"
        self.assertIsNone(extract_json(raw))
        result = decode_intent_payload(raw)
        self.assertFalse(result.ok)
