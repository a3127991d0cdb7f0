from __future__ import annotations

import enum
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lexibox.db.base_class import Base
from lexibox.models.word_model import Word


class TokenType(str, enum.Enum):
    WORD = "word"
    PUNCTUATION = "punctuation"


class Sentence(Base):
    __tablename__ = "sentences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    tokens: Mapped[List["SentenceToken"]] = relationship(
        back_populates="sentence",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SentenceToken.position",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Sentence(id={self.id})>"


class SentenceToken(Base):
    """One word or punctuation run of a sentence, optionally linked to a word."""

    __tablename__ = "sentence_tokens"
    __table_args__ = (
        UniqueConstraint("sentence_id", "position", name="uq_sentence_token_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sentence_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sentences.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    token_text: Mapped[str] = mapped_column(Text, nullable=False)
    token_type: Mapped[TokenType] = mapped_column(
        Enum(
            TokenType,
            name="token_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            native_enum=False,
            length=16,
        ),
        nullable=False,
    )
    word_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("words.word_id", ondelete="SET NULL"), nullable=True, index=True
    )

    sentence: Mapped[Sentence] = relationship(back_populates="tokens")
    word: Mapped[Optional[Word]] = relationship(back_populates="tokens")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            "<SentenceToken(sentence_id={0}, position={1}, text='{2}', word_id={3})>".format(
                self.sentence_id,
                self.position,
                self.token_text,
                self.word_id,
            )
        )
