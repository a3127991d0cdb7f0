from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
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


class Dictionary(Base):
    __tablename__ = "dictionaries"

    id: Mapped[int] = mapped_column("dictionary_id", Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    is_mastered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    words: Mapped[List["DictionaryWord"]] = relationship(
        back_populates="dictionary",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DictionaryWord.created_at.desc()",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Dictionary(id={self.id}, name='{self.name}')>"


class DictionaryWord(Base):
    """Membership of a word in a dictionary, with per-dictionary study data."""

    __tablename__ = "dictionary_words"
    __table_args__ = (
        UniqueConstraint("dictionary_id", "word_id", name="uq_dictionary_word"),
    )

    id: Mapped[int] = mapped_column("relation_id", Integer, primary_key=True)
    dictionary_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("dictionaries.dictionary_id", ondelete="CASCADE"), index=True
    )
    word_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="CASCADE"), index=True
    )
    difficulty: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_mastered: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    dictionary: Mapped[Dictionary] = relationship(back_populates="words")
    word: Mapped[Word] = relationship(back_populates="dictionary_links")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            "<DictionaryWord(id={0}, dictionary_id={1}, word_id={2})>".format(
                self.id,
                self.dictionary_id,
                self.word_id,
            )
        )
