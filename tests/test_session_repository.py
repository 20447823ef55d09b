import pytest

from navcaddy.core.dependencies import build_session_factory
from navcaddy.schemas.intent import Lie
from navcaddy.schemas.session import ConversationTurn, Role, SessionContext, Shot
from navcaddy.services.session_repository import SqlSessionRepository


@pytest.fixture
def repository():
    return SqlSessionRepository(build_session_factory("sqlite://"))


def test_unknown_session_is_none(repository):
    assert repository.get_session("nope") is None


def test_save_and_load_round_trip(repository):
    context = SessionContext(
        current_round_id="round-1",
        current_course="Pebble Beach",
        current_hole=7,
        last_shot=Shot(club="7-iron", distance=150, lie=Lie.ROUGH, miss_direction="right"),
        last_recommendation="Club up into the wind",
        conversation_history=(
            ConversationTurn(Role.USER, "what club from here", timestamp=1.0),
            ConversationTurn(Role.ASSISTANT, "Opening caddy/shot_recommendation", timestamp=2.0),
        ),
    )
    repository.save_session("s1", context)
    assert repository.get_session("s1") == context


def test_save_replaces_previous_history(repository):
    first = SessionContext(conversation_history=(ConversationTurn(Role.USER, "old"),))
    second = SessionContext(current_hole=2, conversation_history=(ConversationTurn(Role.USER, "new"),))
    repository.save_session("s1", first)
    repository.save_session("s1", second)
    loaded = repository.get_session("s1")
    assert loaded.current_hole == 2
    assert [t.content for t in loaded.conversation_history] == ["new"]


def test_add_turn_keeps_last_ten(repository):
    for i in range(15):
        repository.add_turn("s1", ConversationTurn(Role.USER, f"turn {i}"))
    history = repository.get_session("s1").conversation_history
    assert [t.content for t in history] == [f"turn {i}" for i in range(5, 15)]


def test_sessions_are_isolated(repository):
    repository.add_turn("a", ConversationTurn(Role.USER, "from a"))
    repository.add_turn("b", ConversationTurn(Role.USER, "from b"))
    assert [t.content for t in repository.get_session("a").conversation_history] == ["from a"]


def test_clear_session(repository):
    repository.add_turn("s1", ConversationTurn(Role.USER, "hello"))
    repository.clear_session("s1")
    assert repository.get_session("s1") is None
