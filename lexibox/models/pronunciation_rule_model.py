from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexibox.db.base_class import Base
from lexibox.models.word_model import Word


class PronunciationRule(Base):
    """How a letter combination is pronounced, e.g. ``ph`` -> ``/f/``."""

    __tablename__ = "pronunciation_rules"
    __table_args__ = (
        UniqueConstraint("letter_combination", "pronunciation", name="uq_pronunciation_rule"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    letter_combination: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    pronunciation: Mapped[str] = mapped_column(String(100), nullable=False)
    rule_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<PronunciationRule(id={self.id}, '{self.letter_combination}' -> '{self.pronunciation}')>"


class WordPronunciationRule(Base):
    __tablename__ = "word_pronunciation_rules"
    __table_args__ = (
        UniqueConstraint("word_id", "pronunciation_rule_id", name="uq_word_pronunciation_rule"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="CASCADE"), index=True, nullable=False
    )
    pronunciation_rule_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pronunciation_rules.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position_in_word: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    rule: Mapped[PronunciationRule] = relationship()
    word: Mapped[Word] = relationship()
