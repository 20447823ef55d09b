from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class SessionRecord(Base):
    __tablename__ = "navcaddy_sessions"

    id = Column(String(64), primary_key=True)
    current_round_id = Column(String(64))
    current_course = Column(String(255))
    current_hole = Column(Integer)
    last_shot = Column(JSON)
    last_recommendation = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    turns = relationship(
        "ConversationTurnRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ConversationTurnRecord.id",
    )


class ConversationTurnRecord(Base):
    __tablename__ = "navcaddy_conversation_turns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        String(64),
        ForeignKey("navcaddy_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    role = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(Float)

    session = relationship("SessionRecord", back_populates="turns")

    __table_args__ = (Index("ix_navcaddy_turns_session", "session_id", "id"),)
