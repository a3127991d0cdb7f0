from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexibox.db.base_class import Base

if TYPE_CHECKING:  # pragma: no cover
    from lexibox.models.dictionary_model import DictionaryWord
    from lexibox.models.sentence_model import SentenceToken


class Difficulty:
    EASY = 0
    MEDIUM = 1
    HARD = 2

    LABELS = {"easy": EASY, "medium": MEDIUM, "hard": HARD}


class Word(Base):
    """Entry of the word catalog."""

    __tablename__ = "words"

    id: Mapped[int] = mapped_column("word_id", Integer, primary_key=True)
    word: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phonetic: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    meaning: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pronunciation1: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pronunciation2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pronunciation3: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    difficulty: Mapped[int] = mapped_column(
        Integer, nullable=False, default=Difficulty.EASY, server_default="0"
    )
    is_mastered: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    # --- Relations ---
    dictionary_links: Mapped[List["DictionaryWord"]] = relationship(
        back_populates="word",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # Tokens only reference the word; the FK nulls them out on delete.
    tokens: Mapped[List["SentenceToken"]] = relationship(
        back_populates="word",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Word(id={self.id}, word='{self.word}')>"
