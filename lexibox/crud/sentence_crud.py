from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from lexibox.core.config import settings
from lexibox.core.errors import NotFoundError, ValidationError
from lexibox.db.base_class import INT_MAX
from lexibox.db.session import transaction
from lexibox.models.sentence_model import Sentence, SentenceToken, TokenType
from lexibox.models.word_model import Word
from lexibox.schemas.sentence_schema import TokenIn
from lexibox.services.tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SentencePage:
    items: list[dict[str, Any]]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0


def clamp_pagination(page: int | None, page_size: int | None) -> tuple[int, int]:
    """Clamp ``page`` to [1, INT_MAX] and ``page_size`` to [1, MAX_PAGE_SIZE]."""

    page_num = min(INT_MAX, max(1, int(page or 1)))
    size = settings.DEFAULT_PAGE_SIZE if page_size is None else int(page_size)
    return page_num, min(settings.MAX_PAGE_SIZE, max(1, size))


def _build_token_rows(
    sentence_id: int,
    text: str,
    client_tokens: Sequence[TokenIn] | None,
) -> list[SentenceToken]:
    if client_tokens:
        return [
            SentenceToken(
                sentence_id=sentence_id,
                position=token.position,
                token_text=token.text,
                token_type=TokenType(token.type),
                word_id=token.word_id,
            )
            for token in client_tokens
        ]

    return [
        SentenceToken(
            sentence_id=sentence_id,
            position=token.position,
            token_text=token.text,
            token_type=token.type,
        )
        for token in tokenize(text)
    ]


def _ensure_words_exist(db: Session, word_ids: Iterable[int]) -> None:
    wanted = {word_id for word_id in word_ids if word_id is not None}
    if not wanted:
        return
    found = {row.id for row in db.query(Word.id).filter(Word.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise NotFoundError(
            "The linked word does not exist.",
            "WORD_NOT_FOUND",
            details={"word_ids": missing},
        )


def create_sentence(
    db: Session,
    text: Any,
    tokens: Sequence[TokenIn] | None = None,
) -> Sentence:
    """Persist a sentence and its tokens in a single transaction.

    Client supplied tokens are stored verbatim; otherwise the text is
    tokenized server side.
    """

    if not isinstance(text, str) or not text.strip():
        raise ValidationError("text is required and must be a string.", "INVALID_TEXT")

    if tokens:
        if [token.position for token in tokens] != list(range(len(tokens))):
            raise ValidationError(
                "token positions must run 0..N-1 in list order.", "INVALID_TOKENS"
            )
        _ensure_words_exist(db, (token.word_id for token in tokens))

    with transaction(db):
        sentence = Sentence(text=text.strip())
        db.add(sentence)
        db.flush()
        db.add_all(_build_token_rows(sentence.id, text, tokens))

    logger.info("Sentence %s created", sentence.id)
    return get_sentence(db, sentence.id)


def get_sentence(db: Session, sentence_id: int) -> Sentence:
    sentence = (
        db.query(Sentence)
        .options(selectinload(Sentence.tokens).joinedload(SentenceToken.word))
        .filter(Sentence.id == sentence_id)
        .populate_existing()
        .first()
    )
    if sentence is None:
        raise NotFoundError("Sentence not found.", "NOT_FOUND")
    return sentence


def list_sentences(
    db: Session,
    page: int | None = 1,
    page_size: int | None = None,
    search: str | None = None,
) -> SentencePage:
    page_num, limit = clamp_pagination(page, page_size)

    filters = []
    if search and search.strip():
        filters.append(
            func.lower(Sentence.text).contains(search.strip().lower(), autoescape=True)
        )

    total = db.query(func.count(Sentence.id)).filter(*filters).scalar() or 0

    token_count = func.count(SentenceToken.id).label("token_count")
    rows = (
        db.query(Sentence.id, Sentence.text, Sentence.created_at, token_count)
        .outerjoin(SentenceToken, SentenceToken.sentence_id == Sentence.id)
        .filter(*filters)
        .group_by(Sentence.id, Sentence.text, Sentence.created_at)
        .order_by(Sentence.id.desc())
        .offset((page_num - 1) * limit)
        .limit(limit)
        .all()
    )

    items = [
        {
            "id": row.id,
            "text": row.text,
            "created_at": row.created_at,
            "token_count": int(row.token_count),
        }
        for row in rows
    ]
    return SentencePage(items=items, total=int(total), page=page_num, page_size=limit)


def delete_sentence(db: Session, sentence_id: int) -> None:
    sentence = db.get(Sentence, sentence_id)
    if sentence is None:
        raise NotFoundError("Sentence not found.", "NOT_FOUND")

    with transaction(db):
        db.delete(sentence)
    logger.info("Sentence %s deleted", sentence_id)


def list_sentences_for_word(db: Session, word_id: int) -> list[dict[str, Any]]:
    """Return the sentences containing tokens linked to ``word_id``."""

    if db.get(Word, word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")

    tokens = (
        db.query(SentenceToken)
        .options(selectinload(SentenceToken.sentence))
        .filter(SentenceToken.word_id == word_id)
        .order_by(SentenceToken.sentence_id.desc(), SentenceToken.position.asc())
        .all()
    )

    by_sentence: dict[int, dict[str, Any]] = {}
    for token in tokens:
        entry = by_sentence.get(token.sentence_id)
        if entry is None:
            entry = {
                "id": token.sentence.id,
                "text": token.sentence.text,
                "created_at": token.sentence.created_at,
                "tokens": [],
            }
            by_sentence[token.sentence_id] = entry
        entry["tokens"].append(
            {
                "position": token.position,
                "text": token.token_text,
                "type": token.token_type.value,
            }
        )
    return list(by_sentence.values())


# ----------------------------------------------------------------------
# Serialisation helpers
# ----------------------------------------------------------------------
def serialize_linked_word(word: Word | None) -> dict[str, Any] | None:
    if word is None:
        return None
    return {
        "word_id": word.id,
        "word": word.word,
        "meaning": word.meaning,
        "phonetic": word.phonetic,
    }


def serialize_token(token: SentenceToken, *, with_word: bool = True) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "position": token.position,
        "text": token.token_text,
        "type": token.token_type.value,
        "word_id": token.word_id,
    }
    if with_word:
        payload["word"] = serialize_linked_word(token.word) if token.word_id else None
    return payload


def serialize_sentence(sentence: Sentence, *, with_words: bool = True) -> dict[str, Any]:
    return {
        "id": sentence.id,
        "text": sentence.text,
        "created_at": sentence.created_at,
        "tokens": [serialize_token(token, with_word=with_words) for token in sentence.tokens],
    }
