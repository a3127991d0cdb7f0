"""Links sentence tokens to entries of the word catalog.

A token starts ``unlinked`` unless it was created with a ``word_id``. It can be
linked, re-targeted or cleared any number of times through
:func:`update_token_word`; nothing else changes the link.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from lexibox.core.errors import NotFoundError
from lexibox.db.session import transaction
from lexibox.models.sentence_model import Sentence, SentenceToken, TokenType
from lexibox.models.word_model import Word

logger = logging.getLogger(__name__)


def _get_token(db: Session, sentence_id: int, position: int) -> SentenceToken | None:
    return (
        db.query(SentenceToken)
        .options(joinedload(SentenceToken.word))
        .filter(
            SentenceToken.sentence_id == sentence_id,
            SentenceToken.position == position,
        )
        .populate_existing()
        .first()
    )


def update_token_word(
    db: Session,
    sentence_id: int,
    position: int,
    word_id: int | None,
) -> SentenceToken:
    """Set or clear the word linked to one token.

    Only ``word_id`` is touched; position, text and type stay as created.
    """

    if word_id is not None and db.get(Word, word_id) is None:
        raise NotFoundError("The linked word does not exist.", "WORD_NOT_FOUND")

    token = _get_token(db, sentence_id, position)
    if token is None:
        raise NotFoundError("Token not found.", "TOKEN_NOT_FOUND")

    with transaction(db):
        token.word_id = word_id

    logger.info(
        "Token %s/%s %s",
        sentence_id,
        position,
        f"linked to word {word_id}" if word_id is not None else "unlinked",
    )
    return _get_token(db, sentence_id, position)


def find_exact_match(db: Session, text: str | None) -> Word | None:
    """Return the only word spelled like ``text`` (case-insensitive), if any.

    Ambiguous or empty lookups return ``None`` so the caller falls back to
    manual selection.
    """

    if not text or not isinstance(text, str) or not text.strip():
        return None

    matches = (
        db.query(Word)
        .filter(func.lower(Word.word) == func.lower(text.strip()))
        .limit(2)
        .all()
    )
    if len(matches) != 1:
        return None
    return matches[0]


def suggest_links(db: Session, sentence_id: int) -> list[dict[str, Any]]:
    """Propose exact-match words for the unlinked word tokens of a sentence.

    Nothing is persisted; callers confirm a suggestion with
    :func:`update_token_word`.
    """

    sentence = db.get(Sentence, sentence_id)
    if sentence is None:
        raise NotFoundError("Sentence not found.", "NOT_FOUND")

    suggestions: list[dict[str, Any]] = []
    for token in sentence.tokens:
        if token.token_type != TokenType.WORD or token.word_id is not None:
            continue
        try:
            match = find_exact_match(db, token.token_text)
        except SQLAlchemyError:
            logger.warning(
                "Exact-match lookup failed for token %s/%s; leaving it unlinked.",
                sentence_id,
                token.position,
                exc_info=True,
            )
            continue
        if match is not None:
            suggestions.append(
                {"position": token.position, "text": token.token_text, "word_id": match.id}
            )
    return suggestions
