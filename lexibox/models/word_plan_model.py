from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexibox.db.base_class import Base
from lexibox.models.word_model import Word


class PlanMode(str, enum.Enum):
    FLASH_CARD = "flash-card"
    SPELLING = "spelling"


class PlanStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class WordPlan(Base):
    """A study plan: an ordered selection of words learnt in one answer mode."""

    __tablename__ = "word_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    mode: Mapped[PlanMode] = mapped_column(
        Enum(PlanMode, name="plan_mode", values_callable=_enum_values, native_enum=False, length=16),
        nullable=False,
        default=PlanMode.FLASH_CARD,
    )
    status: Mapped[PlanStatus] = mapped_column(
        Enum(PlanStatus, name="plan_status", values_callable=_enum_values, native_enum=False, length=16),
        nullable=False,
        default=PlanStatus.INACTIVE,
        index=True,
    )
    target_word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    daily_word_count: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    words: Mapped[List["WordPlanWord"]] = relationship(
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WordPlanWord.order_index",
    )
    records: Mapped[List["LearningRecord"]] = relationship(
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    error_words: Mapped[List["ErrorWord"]] = relationship(
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<WordPlan(id={self.id}, name='{self.name}', status={self.status.value})>"


class WordPlanWord(Base):
    __tablename__ = "word_plan_words"
    __table_args__ = (UniqueConstraint("plan_id", "word_id", name="uq_plan_word"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("word_plans.id", ondelete="CASCADE"), index=True, nullable=False
    )
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    plan: Mapped[WordPlan] = relationship(back_populates="words")
    word: Mapped[Word] = relationship()


class LearningRecord(Base):
    """One answer given for a word while studying a plan."""

    __tablename__ = "learning_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("word_plans.id", ondelete="CASCADE"), index=True, nullable=False
    )
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_answer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    learned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class ErrorWord(Base):
    """Per-plan counter of wrong answers for a word."""

    __tablename__ = "error_words"
    __table_args__ = (UniqueConstraint("plan_id", "word_id", name="uq_plan_error_word"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    plan_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("word_plans.id", ondelete="CASCADE"), index=True, nullable=False
    )
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    error_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_error_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    word: Mapped[Word] = relationship()
