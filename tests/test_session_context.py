import unittest

from navcaddy.schemas.intent import Lie
from navcaddy.schemas.session import ConversationTurn, Role, Shot
from navcaddy.services.session_context import (
    SessionContextStore,
    build_context_prompt,
    build_context_summary,
)


class SessionContextStoreTests(unittest.TestCase):
    def test_starts_empty(self):
        ctx = SessionContextStore(history_size=10).snapshot()
        self.assertIsNone(ctx.current_round_id)
        self.assertIsNone(ctx.current_hole)
        self.assertEqual(ctx.conversation_history, ())
        self.assertFalse(ctx.is_round_active)

    def test_history_keeps_last_ten_oldest_first(self):
        store = SessionContextStore(history_size=10)
        for i in range(15):
            store.add_turn(ConversationTurn(role=Role.USER, content=f"turn {i}"))
        history = store.snapshot().conversation_history
        self.assertEqual(len(history), 10)
        self.assertEqual([t.content for t in history], [f"turn {i}" for i in range(5, 15)])

    def test_history_size_from_settings(self):
        store = SessionContextStore()
        self.assertEqual(store.history_size, 10)

    def test_round_lifecycle(self):
        store = SessionContextStore()
        store.update_round("round-1", course="Pebble Beach", hole=1)
        store.update_hole(7)
        ctx = store.snapshot()
        self.assertEqual(ctx.current_round_id, "round-1")
        self.assertEqual(ctx.current_course, "Pebble Beach")
        self.assertEqual(ctx.current_hole, 7)
        self.assertTrue(ctx.is_round_active)

        store.update_round(None)
        ctx = store.snapshot()
        self.assertIsNone(ctx.current_round_id)
        self.assertIsNone(ctx.current_hole)

    def test_out_of_range_hole_ignored(self):
        store = SessionContextStore()
        store.update_round("r", hole=3)
        store.update_hole(19)
        self.assertEqual(store.snapshot().current_hole, 3)

    def test_snapshot_is_immutable_copy(self):
        store = SessionContextStore()
        store.add_user_turn("hello")
        before = store.snapshot()
        store.add_assistant_turn("hi")
        self.assertEqual(len(before.conversation_history), 1)
        self.assertEqual(len(store.snapshot().conversation_history), 2)

    def test_clear_resets_everything(self):
        store = SessionContextStore()
        store.update_round("r", hole=2)
        store.record_shot(Shot(club="7-iron", distance=150))
        store.record_recommendation("Hit 8-iron")
        store.add_user_turn("hello")
        store.clear()
        ctx = store.snapshot()
        self.assertIsNone(ctx.current_round_id)
        self.assertIsNone(ctx.last_shot)
        self.assertIsNone(ctx.last_recommendation)
        self.assertEqual(ctx.conversation_history, ())


class ContextPromptTests(unittest.TestCase):
    def _store(self):
        store = SessionContextStore()
        store.update_round("round-9", course="Torrey Pines", hole=4)
        store.record_shot(Shot(club="7-iron", distance=152, lie=Lie.FAIRWAY, miss_direction="right"))
        store.record_recommendation("Take one more club")
        store.add_user_turn("what club for 160")
        store.add_assistant_turn("Hit your 6-iron")
        return store

    def test_prompt_contains_state(self):
        prompt = build_context_prompt(self._store().snapshot())
        self.assertIn("Current round: round-9 at Torrey Pines", prompt)
        self.assertIn("Current hole: 4", prompt)
        self.assertIn("Last shot: 7-iron, 152 yards, from the fairway, missed right", prompt)
        self.assertIn("User: what club for 160", prompt)
        self.assertIn("Caddy: Hit your 6-iron", prompt)

    def test_prompt_is_deterministic(self):
        a = build_context_prompt(self._store().snapshot())
        b = build_context_prompt(self._store().snapshot())
        self.assertEqual(a, b)

    def test_empty_context_gives_empty_prompt(self):
        self.assertEqual(build_context_prompt(None), "")
        self.assertEqual(build_context_prompt(SessionContextStore().snapshot()), "")

    def test_summary(self):
        summary = build_context_summary(self._store().snapshot())
        self.assertEqual(summary, "round=round-9 hole=4 last_club=7-iron turns=2")
