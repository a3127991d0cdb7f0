from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexibox.core.errors import ConflictError, NotFoundError, ValidationError
from lexibox.db.session import transaction
from lexibox.models.pronunciation_rule_model import PronunciationRule, WordPronunciationRule
from lexibox.models.word_model import Word
from lexibox.schemas.pronunciation_rule_schema import (
    PronunciationRuleCreate,
    PronunciationRuleUpdate,
    WordRulesAttach,
)

logger = logging.getLogger(__name__)


def _word_count_column():
    return (
        select(func.count(WordPronunciationRule.id))
        .where(WordPronunciationRule.pronunciation_rule_id == PronunciationRule.id)
        .correlate(PronunciationRule)
        .scalar_subquery()
        .label("word_count")
    )


def serialize_rule(rule: PronunciationRule, word_count: int | None = None) -> dict[str, Any]:
    payload = {
        "id": rule.id,
        "letterCombination": rule.letter_combination,
        "pronunciation": rule.pronunciation,
        "ruleDescription": rule.rule_description,
        "createdAt": rule.created_at,
        "updatedAt": rule.updated_at,
    }
    if word_count is not None:
        payload["wordCount"] = int(word_count)
    return payload


def serialize_word_rule(link: WordPronunciationRule) -> dict[str, Any]:
    return {
        "id": link.rule.id,
        "letterCombination": link.rule.letter_combination,
        "pronunciation": link.rule.pronunciation,
        "ruleDescription": link.rule.rule_description,
        "positionInWord": link.position_in_word,
        "associatedAt": link.created_at,
    }


def _duplicate_rule() -> ConflictError:
    return ConflictError(
        "This pronunciation rule already exists.", "PRONUNCIATION_RULE_ALREADY_EXISTS"
    )


def list_rules(
    db: Session, *, page: int, limit: int, search: str | None = None
) -> tuple[list[dict[str, Any]], int]:
    query = db.query(PronunciationRule, _word_count_column())
    count_query = db.query(func.count(PronunciationRule.id))
    if search and search.strip():
        term = search.strip().lower()
        condition = or_(
            func.lower(PronunciationRule.letter_combination).contains(term, autoescape=True),
            func.lower(PronunciationRule.pronunciation).contains(term, autoescape=True),
            func.lower(PronunciationRule.rule_description).contains(term, autoescape=True),
        )
        query = query.filter(condition)
        count_query = count_query.filter(condition)

    rows = (
        query.order_by(PronunciationRule.letter_combination, PronunciationRule.pronunciation)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return [serialize_rule(rule, count) for rule, count in rows], count_query.scalar() or 0


def get_rule(db: Session, rule_id: int) -> PronunciationRule:
    rule = db.get(PronunciationRule, rule_id)
    if rule is None:
        raise NotFoundError("Pronunciation rule not found.", "PRONUNCIATION_RULE_NOT_FOUND")
    return rule


def get_rule_with_count(db: Session, rule_id: int) -> dict[str, Any]:
    row = (
        db.query(PronunciationRule, _word_count_column())
        .filter(PronunciationRule.id == rule_id)
        .populate_existing()
        .first()
    )
    if row is None:
        raise NotFoundError("Pronunciation rule not found.", "PRONUNCIATION_RULE_NOT_FOUND")
    return serialize_rule(*row)


def list_rules_by_combination(db: Session, letter_combination: str) -> list[dict[str, Any]]:
    rows = (
        db.query(PronunciationRule, _word_count_column())
        .filter(PronunciationRule.letter_combination == letter_combination.strip())
        .order_by(PronunciationRule.pronunciation)
        .all()
    )
    return [serialize_rule(rule, count) for rule, count in rows]


def create_rule(db: Session, payload: PronunciationRuleCreate) -> PronunciationRule:
    rule = PronunciationRule(**payload.model_dump())
    try:
        with transaction(db):
            db.add(rule)
    except IntegrityError as exc:
        raise _duplicate_rule() from exc
    db.refresh(rule)
    return rule


def update_rule(db: Session, rule_id: int, payload: PronunciationRuleUpdate) -> PronunciationRule:
    rule = get_rule(db, rule_id)
    changes = payload.model_dump(exclude_unset=True)
    for required in ("letter_combination", "pronunciation"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be empty.", "VALIDATION_ERROR")
    if not changes:
        raise ValidationError("No valid fields provided for update.", "INVALID_UPDATE")

    for field, value in changes.items():
        setattr(rule, field, value)
    try:
        with transaction(db):
            db.add(rule)
    except IntegrityError as exc:
        raise _duplicate_rule() from exc
    db.refresh(rule)
    return rule


def delete_rule(db: Session, rule_id: int) -> None:
    rule = get_rule(db, rule_id)
    with transaction(db):
        db.delete(rule)
    logger.info("Pronunciation rule %s deleted", rule_id)


def list_words_for_rule(
    db: Session, rule_id: int, *, page: int, limit: int
) -> tuple[list[dict[str, Any]], int]:
    get_rule(db, rule_id)
    query = (
        db.query(Word, WordPronunciationRule)
        .join(WordPronunciationRule, WordPronunciationRule.word_id == Word.id)
        .filter(WordPronunciationRule.pronunciation_rule_id == rule_id)
    )
    total = query.count()
    rows = query.order_by(Word.word).offset((page - 1) * limit).limit(limit).all()
    items = [
        {
            "wordId": word.id,
            "word": word.word,
            "phonetic": word.phonetic,
            "meaning": word.meaning,
            "difficulty": word.difficulty,
            "isMastered": bool(word.is_mastered),
            "positionInWord": link.position_in_word,
            "ruleAddedAt": link.created_at,
        }
        for word, link in rows
    ]
    return items, total


# ----------------------------------------------------------------------
# Word / rule associations
# ----------------------------------------------------------------------
def list_word_rules(db: Session, word_id: int) -> list[WordPronunciationRule]:
    if db.get(Word, word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")
    return (
        db.query(WordPronunciationRule)
        .join(WordPronunciationRule.rule)
        .options(joinedload(WordPronunciationRule.rule))
        .filter(WordPronunciationRule.word_id == word_id)
        .order_by(PronunciationRule.letter_combination, PronunciationRule.pronunciation)
        .all()
    )


def attach_rules(db: Session, word_id: int, payload: WordRulesAttach) -> tuple[int, list[WordPronunciationRule]]:
    """Link rules to a word, skipping links that already exist.

    Returns the number of links created and the word's full rule list.
    """

    if db.get(Word, word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")

    wanted = payload.pronunciation_rule_ids
    found = {
        row.id
        for row in db.query(PronunciationRule.id).filter(PronunciationRule.id.in_(wanted)).all()
    }
    missing = [rule_id for rule_id in wanted if rule_id not in found]
    if missing:
        raise NotFoundError(
            "One or more pronunciation rules do not exist.",
            "PRONUNCIATION_RULE_NOT_FOUND",
            details={"rule_ids": missing},
        )

    existing = {
        row.pronunciation_rule_id
        for row in db.query(WordPronunciationRule.pronunciation_rule_id).filter(
            WordPronunciationRule.word_id == word_id
        )
    }
    new_ids = [rule_id for rule_id in wanted if rule_id not in existing]
    with transaction(db):
        db.add_all(
            WordPronunciationRule(
                word_id=word_id,
                pronunciation_rule_id=rule_id,
                position_in_word=payload.position_in_word,
            )
            for rule_id in new_ids
        )
    return len(new_ids), list_word_rules(db, word_id)


def detach_rule(db: Session, word_id: int, rule_id: int) -> None:
    link = (
        db.query(WordPronunciationRule)
        .filter(
            WordPronunciationRule.word_id == word_id,
            WordPronunciationRule.pronunciation_rule_id == rule_id,
        )
        .first()
    )
    if link is None:
        raise NotFoundError(
            "Word-pronunciation rule association not found.", "ASSOCIATION_NOT_FOUND"
        )
    with transaction(db):
        db.delete(link)
