"""Tests for destination building and the navigation executor."""

import unittest

import pytest

from navcaddy.schemas.destinations import (
    ClubAdjustment,
    CourseInfo,
    EquipmentManagement,
    RecoveryOverview,
    ScoreEntry,
    ShotRecommendation,
    WeatherCheck,
)
from navcaddy.schemas.intent import IntentType, Lie, Module, ParsedIntent, Prerequisite, RoutingTarget
from navcaddy.services.ai.intent.contracts import ClarificationResponse, Clarify, IntentSuggestion
from navcaddy.services.ai.intent.registry import INTENT_REGISTRY
from navcaddy.services.destination_resolver import DestinationResolver
from navcaddy.services.navigation_service import (
    NAVIGATION_FAILED_MESSAGE,
    Navigated,
    NavigationExecutor,
    RequestConfirmation,
    ShowError,
    ShowPrerequisitePrompt,
    ShowResponse,
)
from navcaddy.services.routing_service import (
    ConfirmationRequired,
    Navigate,
    NoNavigation,
    PrerequisiteMissing,
)

INTENT = ParsedIntent(intent_type=IntentType.SCORE_ENTRY, confidence=0.9)


@pytest.fixture
def resolver():
    return DestinationResolver()


@pytest.mark.parametrize(
    "hole, expected",
    [
        ("5", ScoreEntry(hole=5)),
        ("18", ScoreEntry(hole=18)),
        ("0", None),
        ("25", None),
        ("fifth", None),
    ],
)
def test_score_entry_hole_range(resolver, hole, expected):
    target = RoutingTarget(Module.CADDY, "score_entry", {"hole": hole})
    assert resolver.build(target) == expected


def test_missing_required_parameter(resolver):
    assert resolver.build(RoutingTarget(Module.CADDY, "club_adjustment", {})) is None
    assert resolver.build(RoutingTarget(Module.CADDY, "club_adjustment", {"club": "  "})) is None
    assert resolver.build(RoutingTarget(Module.CADDY, "club_adjustment", {"club": "7-iron"})) == ClubAdjustment(
        "7-iron"
    )


def test_unknown_screen_and_module_mismatch(resolver):
    assert resolver.build(RoutingTarget(Module.CADDY, "tee_times", {})) is None
    assert resolver.build(RoutingTarget(Module.COACH, "weather", {})) is None
    assert resolver.validate(RoutingTarget(Module.CADDY, "weather", {}))


def test_parameter_order_does_not_change_destination(resolver):
    a = RoutingTarget(Module.CADDY, "course_info", {"course": "Pebble Beach", "hole": "7"})
    b = RoutingTarget(Module.CADDY, "course_info", {"hole": "7", "course": "Pebble Beach"})
    assert resolver.build(a) == resolver.build(b) == CourseInfo(course="Pebble Beach", hole=7)


def test_shot_recommendation_optional_parameters(resolver):
    assert resolver.build(RoutingTarget(Module.CADDY, "shot_recommendation", {})) == ShotRecommendation()
    full = resolver.build(
        RoutingTarget(
            Module.CADDY,
            "shot_recommendation",
            {"yardage": "150", "club": "7-iron", "lie": "rough", "wind": "into"},
        )
    )
    assert full == ShotRecommendation(yardage=150, club="7-iron", lie=Lie.ROUGH, wind="into")
    # malformed optional values are dropped, not fatal
    partial = resolver.build(RoutingTarget(Module.CADDY, "shot_recommendation", {"yardage": "far", "lie": "moon"}))
    assert partial == ShotRecommendation()


def test_recovery_fatigue_range(resolver):
    target = RoutingTarget(Module.RECOVERY, "recovery_overview", {"fatigue": "12"})
    assert resolver.build(target) == RecoveryOverview()


def test_every_registry_screen_resolves(resolver):
    for schema in INTENT_REGISTRY.values():
        if schema.required_entities:
            continue
        target = RoutingTarget(schema.module, schema.screen, {})
        assert resolver.build(target) is not None, schema.intent_type


def test_to_route():
    assert ScoreEntry(hole=5).to_route() == "caddy/score_entry?hole=5"
    assert WeatherCheck().to_route() == "caddy/weather"
    assert EquipmentManagement().to_route() == "settings/equipment"
    assert (
        ShotRecommendation(yardage=150, club="7-iron", lie=Lie.BUNKER).to_route()
        == "caddy/shot_recommendation?club=7-iron&lie=bunker&yardage=150"
    )


class NavigationExecutorTests(unittest.TestCase):
    def setUp(self):
        self.executor = NavigationExecutor()

    def test_navigate_pushes_destination(self):
        target = RoutingTarget(Module.CADDY, "score_entry", {"hole": "5"})
        action = self.executor.execute(Navigate(target, INTENT))
        self.assertEqual(action, Navigated(ScoreEntry(5), INTENT))
        self.assertEqual(self.executor.stack, (ScoreEntry(5),))
        self.assertEqual(self.executor.current, ScoreEntry(5))

    def test_unbuildable_target_shows_error_and_keeps_stack(self):
        self.executor.navigate(WeatherCheck())
        target = RoutingTarget(Module.CADDY, "score_entry", {"hole": "25"})
        action = self.executor.execute(Navigate(target, INTENT))
        self.assertEqual(action, ShowError(NAVIGATION_FAILED_MESSAGE, INTENT))
        self.assertEqual(self.executor.stack, (WeatherCheck(),))

    def test_non_navigation_results_leave_stack_alone(self):
        self.executor.navigate(WeatherCheck())
        suggestion = IntentSuggestion(IntentType.WEATHER_CHECK, "Check Weather", "Current conditions")
        clarify = Clarify(ClarificationResponse("Are you looking to:", (suggestion,), "hmm"))

        response = self.executor.execute(NoNavigation(None, "Are you looking to:", clarification=clarify))
        self.assertEqual(response, ShowResponse("Are you looking to:", None, (suggestion,)))

        prompt = self.executor.execute(
            PrerequisiteMissing(INTENT, (Prerequisite.ROUND_ACTIVE,), "Start a round first.")
        )
        self.assertEqual(prompt, ShowPrerequisitePrompt("Start a round first.", (Prerequisite.ROUND_ACTIVE,), INTENT))

        confirm = self.executor.execute(ConfirmationRequired(INTENT, "Did you want to enter score?"))
        self.assertEqual(confirm, RequestConfirmation("Did you want to enter score?", INTENT))

        self.assertEqual(self.executor.stack, (WeatherCheck(),))

    def test_back_and_root(self):
        self.assertFalse(self.executor.navigate_back())
        self.executor.navigate(WeatherCheck())
        self.executor.navigate(ScoreEntry(3))
        self.assertTrue(self.executor.navigate_back())
        self.assertEqual(self.executor.current, WeatherCheck())
        self.executor.navigate(ScoreEntry(4))
        self.executor.pop_to_root()
        self.assertEqual(self.executor.stack, ())
        self.assertIsNone(self.executor.current)

    def test_replace(self):
        self.executor.replace(WeatherCheck())
        self.executor.replace(ScoreEntry(2))
        self.assertEqual(self.executor.stack, (ScoreEntry(2),))
