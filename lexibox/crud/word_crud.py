from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lexibox.core.errors import ConflictError, NotFoundError, ValidationError
from lexibox.db.session import transaction
from lexibox.models.sentence_model import SentenceToken
from lexibox.models.word_model import Word
from lexibox.schemas.word_schema import WordCreate, WordUpdate

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "word",
    "phonetic",
    "meaning",
    "pronunciation1",
    "pronunciation2",
    "pronunciation3",
    "notes",
    "difficulty",
    "is_mastered",
    "created_at",
)


def serialize_word(word: Word) -> dict[str, Any]:
    return {
        "id": word.id,
        "word": word.word,
        "phonetic": word.phonetic,
        "meaning": word.meaning,
        "pronunciation1": word.pronunciation1,
        "pronunciation2": word.pronunciation2,
        "pronunciation3": word.pronunciation3,
        "notes": word.notes,
        "createdAt": word.created_at,
        "difficulty": word.difficulty,
        "isMastered": bool(word.is_mastered),
    }


def list_words(
    db: Session,
    *,
    page: int,
    limit: int,
    search: str | None = None,
    difficulty: int | None = None,
    is_mastered: bool | None = None,
) -> tuple[list[Word], int]:
    """Return one page of words (newest first) and the total match count."""

    query = db.query(Word)
    if search and search.strip():
        term = search.strip().lower()
        query = query.filter(
            or_(
                func.lower(Word.word).contains(term, autoescape=True),
                func.lower(Word.meaning).contains(term, autoescape=True),
                func.lower(Word.phonetic).contains(term, autoescape=True),
            )
        )
    if difficulty is not None:
        query = query.filter(Word.difficulty == difficulty)
    if is_mastered is not None:
        query = query.filter(Word.is_mastered.is_(is_mastered))

    total = query.count()
    items = (
        query.order_by(Word.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def get_word(db: Session, word_id: int) -> Word:
    word = db.get(Word, word_id)
    if word is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")
    return word


def create_word(db: Session, payload: WordCreate) -> Word:
    # Column defaults cover difficulty, mastery and creation time.
    word = Word(**payload.model_dump(exclude_none=True))
    try:
        with transaction(db):
            db.add(word)
    except IntegrityError as exc:
        raise ConflictError(
            "A word with this spelling already exists.", "WORD_ALREADY_EXISTS"
        ) from exc
    db.refresh(word)
    logger.info("Word %s created (%s)", word.id, word.word)
    return word


def update_word(db: Session, word_id: int, payload: WordUpdate) -> Word:
    word = get_word(db, word_id)
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if field in _UPDATABLE_FIELDS
    }
    for required in ("word", "phonetic", "meaning", "difficulty", "is_mastered", "created_at"):
        if required in changes and changes[required] is None:
            changes.pop(required)

    if not changes:
        raise ValidationError("No valid fields provided for update.", "INVALID_UPDATE")

    for field, value in changes.items():
        setattr(word, field, value)

    try:
        with transaction(db):
            db.add(word)
    except IntegrityError as exc:
        raise ConflictError(
            "A word with this spelling already exists.", "WORD_ALREADY_EXISTS"
        ) from exc
    db.refresh(word)
    return word


def delete_word(db: Session, word_id: int) -> None:
    """Delete a word and its dictionary memberships.

    Sentence tokens linked to the word keep their text and only lose the link.
    """

    word = get_word(db, word_id)
    with transaction(db):
        db.execute(
            update(SentenceToken)
            .where(SentenceToken.word_id == word.id)
            .values(word_id=None)
            .execution_options(synchronize_session="fetch")
        )
        db.delete(word)
    logger.info("Word %s deleted", word_id)
