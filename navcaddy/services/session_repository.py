"""Persistence for session context and conversation history."""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from navcaddy.core.dependencies import build_session_factory
from navcaddy.models.session import Base, ConversationTurnRecord, SessionRecord
from navcaddy.schemas.intent import Lie
from navcaddy.schemas.session import ConversationTurn, Role, SessionContext, Shot
from navcaddy.services.session_context import DEFAULT_HISTORY_SIZE

logger = logging.getLogger(__name__)


class SessionRepository(abc.ABC):
    @abc.abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionContext]: ...

    @abc.abstractmethod
    def save_session(self, session_id: str, context: SessionContext) -> None: ...

    @abc.abstractmethod
    def add_turn(self, session_id: str, turn: ConversationTurn) -> None: ...

    @abc.abstractmethod
    def clear_session(self, session_id: str) -> None: ...


def _shot_to_json(shot: Optional[Shot]) -> Optional[dict[str, Any]]:
    if shot is None:
        return None
    return {
        "club": shot.club,
        "distance": shot.distance,
        "lie": shot.lie.value if shot.lie else None,
        "miss_direction": shot.miss_direction,
    }


def _shot_from_json(data: Any) -> Optional[Shot]:
    if not isinstance(data, dict) or not data.get("club"):
        return None
    distance = data.get("distance")
    return Shot(
        club=str(data["club"]),
        distance=int(distance) if isinstance(distance, (int, float)) else None,
        lie=Lie.parse(data.get("lie")),
        miss_direction=data.get("miss_direction"),
    )


def _turn_from_record(record: ConversationTurnRecord) -> Optional[ConversationTurn]:
    try:
        role = Role(record.role)
    except ValueError:
        logger.warning("Skipping turn %s with unknown role %r", record.id, record.role)
        return None
    return ConversationTurn(role=role, content=record.content, timestamp=record.timestamp)


class SqlSessionRepository(SessionRepository):
    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
        create_schema: bool = True,
    ) -> None:
        self._session_factory = session_factory or build_session_factory()
        self._history_size = max(1, history_size)
        if create_schema:
            Base.metadata.create_all(bind=self._session_factory.kw["bind"])

    def get_session(self, session_id: str) -> Optional[SessionContext]:
        with self._session_factory() as db:
            record = db.get(SessionRecord, session_id)
            if record is None:
                return None
            turns = [t for t in (_turn_from_record(r) for r in record.turns) if t is not None]
            return SessionContext(
                current_round_id=record.current_round_id,
                current_course=record.current_course,
                current_hole=record.current_hole,
                last_shot=_shot_from_json(record.last_shot),
                last_recommendation=record.last_recommendation,
                conversation_history=tuple(turns[-self._history_size :]),
            )

    def save_session(self, session_id: str, context: SessionContext) -> None:
        with self._session_factory() as db, db.begin():
            record = self._get_or_create(db, session_id)
            record.current_round_id = context.current_round_id
            record.current_course = context.current_course
            record.current_hole = context.current_hole
            record.last_shot = _shot_to_json(context.last_shot)
            record.last_recommendation = context.last_recommendation
            db.execute(delete(ConversationTurnRecord).where(ConversationTurnRecord.session_id == session_id))
            for turn in context.conversation_history[-self._history_size :]:
                db.add(self._turn_record(session_id, turn))

    def add_turn(self, session_id: str, turn: ConversationTurn) -> None:
        with self._session_factory() as db, db.begin():
            self._get_or_create(db, session_id)
            db.add(self._turn_record(session_id, turn))
            db.flush()
            stale_ids = db.scalars(
                select(ConversationTurnRecord.id)
                .where(ConversationTurnRecord.session_id == session_id)
                .order_by(ConversationTurnRecord.id.desc())
                .offset(self._history_size)
            ).all()
            if stale_ids:
                db.execute(delete(ConversationTurnRecord).where(ConversationTurnRecord.id.in_(stale_ids)))

    def clear_session(self, session_id: str) -> None:
        with self._session_factory() as db, db.begin():
            db.execute(delete(ConversationTurnRecord).where(ConversationTurnRecord.session_id == session_id))
            db.execute(delete(SessionRecord).where(SessionRecord.id == session_id))

    @staticmethod
    def _get_or_create(db: Session, session_id: str) -> SessionRecord:
        record = db.get(SessionRecord, session_id)
        if record is None:
            record = SessionRecord(id=session_id)
            db.add(record)
            db.flush()
        return record

    @staticmethod
    def _turn_record(session_id: str, turn: ConversationTurn) -> ConversationTurnRecord:
        return ConversationTurnRecord(
            session_id=session_id,
            role=turn.role.value,
            content=turn.content,
            timestamp=turn.timestamp,
        )
