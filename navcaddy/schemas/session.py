from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .intent import Lie


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class Shot:
    """Most recent shot as reported by the shot logger."""

    club: str
    distance: Optional[int] = None
    lie: Optional[Lie] = None
    miss_direction: Optional[str] = None


@dataclass(frozen=True)
class SessionContext:
    """Immutable snapshot of the session store."""

    current_round_id: Optional[str] = None
    current_course: Optional[str] = None
    current_hole: Optional[int] = None
    last_shot: Optional[Shot] = None
    last_recommendation: Optional[str] = None
    conversation_history: tuple[ConversationTurn, ...] = ()

    @property
    def is_round_active(self) -> bool:
        return self.current_round_id is not None

    def recent_turns(self, count: int) -> tuple[ConversationTurn, ...]:
        if count <= 0:
            return ()
        return self.conversation_history[-count:]
