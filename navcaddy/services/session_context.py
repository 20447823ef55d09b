"""Session context store: the single owner of conversational memory.

All mutation goes through the named methods below. Each one is synchronous,
so inside one event loop concurrent callers are applied in call order.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Optional

from navcaddy.core.config import get_settings
from navcaddy.schemas.session import ConversationTurn, Role, SessionContext, Shot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 10


class SessionContextStore:
    def __init__(self, *, history_size: Optional[int] = None) -> None:
        if history_size is None:
            history_size = get_settings().conversation_history_size
        self._history_size = max(1, int(history_size))
        self._round_id: Optional[str] = None
        self._course: Optional[str] = None
        self._hole: Optional[int] = None
        self._last_shot: Optional[Shot] = None
        self._last_recommendation: Optional[str] = None
        self._history: deque[ConversationTurn] = deque(maxlen=self._history_size)

    @property
    def history_size(self) -> int:
        return self._history_size

    def snapshot(self) -> SessionContext:
        return SessionContext(
            current_round_id=self._round_id,
            current_course=self._course,
            current_hole=self._hole,
            last_shot=self._last_shot,
            last_recommendation=self._last_recommendation,
            conversation_history=tuple(self._history),
        )

    def record_shot(self, shot: Shot) -> None:
        self._last_shot = shot

    def record_recommendation(self, recommendation: str) -> None:
        self._last_recommendation = recommendation

    def add_turn(self, turn: ConversationTurn) -> None:
        self._history.append(turn)

    def add_user_turn(self, content: str, *, timestamp: Optional[float] = None) -> None:
        self.add_turn(ConversationTurn(role=Role.USER, content=content, timestamp=timestamp))

    def add_assistant_turn(self, content: str, *, timestamp: Optional[float] = None) -> None:
        self.add_turn(ConversationTurn(role=Role.ASSISTANT, content=content, timestamp=timestamp))

    def update_round(
        self,
        round_id: Optional[str],
        *,
        course: Optional[str] = None,
        hole: Optional[int] = None,
    ) -> None:
        """Start (``round_id`` set) or end (``round_id`` None) a round."""
        self._round_id = round_id
        self._course = course if round_id is not None else None
        self._hole = _valid_hole(hole) if round_id is not None else None
        logger.debug("Session round updated: round_id=%s hole=%s", round_id, self._hole)

    def update_hole(self, hole: int) -> None:
        valid = _valid_hole(hole)
        if valid is None:
            logger.warning("Ignoring out-of-range hole number %r", hole)
            return
        self._hole = valid

    def restore(self, context: SessionContext) -> None:
        """Replace the whole state with a persisted snapshot."""
        self._round_id = context.current_round_id
        self._course = context.current_course
        self._hole = _valid_hole(context.current_hole)
        self._last_shot = context.last_shot
        self._last_recommendation = context.last_recommendation
        self._history = deque(context.conversation_history, maxlen=self._history_size)

    def clear(self) -> None:
        self._round_id = None
        self._course = None
        self._hole = None
        self._last_shot = None
        self._last_recommendation = None
        self._history.clear()


def _valid_hole(hole: Optional[int]) -> Optional[int]:
    if hole is None:
        return None
    try:
        value = int(hole)
    except (TypeError, ValueError):
        return None
    return value if 1 <= value <= 18 else None


def build_context_prompt(context: Optional[SessionContext], *, max_turns: int = 3) -> str:
    """Serialize *context* into a stable prompt fragment for the classifier.

    Same context in, byte-identical text out.
    """
    if context is None:
        return ""

    lines: list[str] = []
    if context.current_round_id is not None:
        round_line = f"Current round: {context.current_round_id}"
        if context.current_course:
            round_line += f" at {context.current_course}"
        lines.append(round_line)
    if context.current_hole is not None:
        lines.append(f"Current hole: {context.current_hole}")
    if context.last_shot is not None:
        shot = context.last_shot
        parts = [shot.club]
        if shot.distance is not None:
            parts.append(f"{shot.distance} yards")
        if shot.lie is not None:
            parts.append(f"from the {shot.lie.value}")
        if shot.miss_direction:
            parts.append(f"missed {shot.miss_direction}")
        lines.append("Last shot: " + ", ".join(parts))
    if context.last_recommendation:
        lines.append(f"Last recommendation: {context.last_recommendation}")

    turns = context.recent_turns(max_turns)
    if turns:
        lines.append("Recent conversation:")
        for turn in turns:
            speaker = "User" if turn.role is Role.USER else "Caddy"
            lines.append(f"{speaker}: {turn.content}")

    if not lines:
        return ""
    return "Session context:\n" + "\n".join(lines)


def build_context_summary(context: Optional[SessionContext]) -> str:
    """One-line summary for logs."""
    if context is None:
        return "no context"
    parts = []
    if context.current_round_id is not None:
        parts.append(f"round={context.current_round_id}")
    if context.current_hole is not None:
        parts.append(f"hole={context.current_hole}")
    if context.last_shot is not None:
        parts.append(f"last_club={context.last_shot.club}")
    parts.append(f"turns={len(context.conversation_history)}")
    return " ".join(parts)
