"""Study plans, their words, and the learning records collected while studying."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import case, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexibox.core.errors import ConflictError, NotFoundError, ValidationError
from lexibox.crud.word_crud import serialize_word
from lexibox.db.session import transaction
from lexibox.models.word_model import Word
from lexibox.models.word_plan_model import (
    ErrorWord,
    LearningRecord,
    PlanStatus,
    WordPlan,
    WordPlanWord,
)
from lexibox.schemas.word_plan_schema import (
    LearningRecordCreate,
    PlanWordCreate,
    WordPlanCreate,
    WordPlanUpdate,
)

logger = logging.getLogger(__name__)

LEARNED_FILTERS = ("all", "learned", "unlearned")


# ----------------------------------------------------------------------
# Serialisation helpers
# ----------------------------------------------------------------------
def serialize_plan(plan: WordPlan) -> dict[str, Any]:
    return {
        "id": plan.id,
        "name": plan.name,
        "description": plan.description,
        "mode": plan.mode.value,
        "status": plan.status.value,
        "targetWordCount": plan.target_word_count,
        "dailyWordCount": plan.daily_word_count,
        "createdAt": plan.created_at,
        "updatedAt": plan.updated_at,
    }


def serialize_record(record: LearningRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "planId": record.plan_id,
        "wordId": record.word_id,
        "userAnswer": record.user_answer,
        "isCorrect": bool(record.is_correct),
        "attempts": record.attempts,
        "learnedAt": record.learned_at,
    }


def serialize_error_word(entry: ErrorWord) -> dict[str, Any]:
    return {
        "id": entry.id,
        "planId": entry.plan_id,
        "wordId": entry.word_id,
        "errorCount": entry.error_count,
        "lastErrorAt": entry.last_error_at,
        "word": {
            "id": entry.word.id,
            "word": entry.word.word,
            "phonetic": entry.word.phonetic,
            "meaning": entry.word.meaning,
        },
    }


def _serialize_plan_word(link: WordPlanWord, state: dict[str, Any] | None) -> dict[str, Any]:
    state = state or {}
    return {
        "id": link.id,
        "planId": link.plan_id,
        "wordId": link.word_id,
        "orderIndex": link.order_index,
        "addedAt": link.added_at,
        "word": serialize_word(link.word),
        "isLearned": bool(state.get("attempts")),
        "isCorrect": bool(state.get("is_correct")),
        "attempts": state.get("attempts", 0),
        "errorCount": state.get("error_count", 0),
    }


# ----------------------------------------------------------------------
# Plans
# ----------------------------------------------------------------------
def get_plan(db: Session, plan_id: int) -> WordPlan:
    plan = db.get(WordPlan, plan_id)
    if plan is None:
        raise NotFoundError("Word plan not found.", "PLAN_NOT_FOUND")
    return plan


def get_active_plan(db: Session) -> WordPlan:
    plan = (
        db.query(WordPlan)
        .filter(WordPlan.status == PlanStatus.ACTIVE)
        .order_by(WordPlan.updated_at.desc(), WordPlan.id.desc())
        .first()
    )
    if plan is None:
        raise NotFoundError("No word plan is active.", "NO_ACTIVE_PLAN")
    return plan


def list_plans(db: Session) -> list[dict[str, Any]]:
    """Every plan (newest first) with its word count and learning progress."""

    plans = db.query(WordPlan).order_by(WordPlan.created_at.desc(), WordPlan.id.desc()).all()
    progress = _progress_by_plan(db, [plan.id for plan in plans])
    items = []
    for plan in plans:
        counts = progress.get(plan.id, {})
        learned = counts.get("learned_words", 0)
        items.append(
            {
                **serialize_plan(plan),
                "wordCount": counts.get("total_words", 0),
                "learnedWords": learned,
                "correctRate": _rate(counts.get("correct_words", 0), learned),
            }
        )
    return items


def _ensure_words_exist(db: Session, word_ids: list[int]) -> None:
    if not word_ids:
        return
    found = {row.id for row in db.query(Word.id).filter(Word.id.in_(word_ids)).all()}
    missing = [word_id for word_id in word_ids if word_id not in found]
    if missing:
        raise NotFoundError(
            "One or more words do not exist.", "WORD_NOT_FOUND", details={"word_ids": missing}
        )


def create_plan(db: Session, payload: WordPlanCreate) -> WordPlan:
    """Create a plan and attach ``payload.word_ids`` in the given order."""

    _ensure_words_exist(db, payload.word_ids)

    with transaction(db):
        plan = WordPlan(
            name=payload.name,
            description=payload.description,
            mode=payload.mode,
            target_word_count=payload.target_word_count,
            daily_word_count=payload.daily_word_count,
            status=PlanStatus.INACTIVE,
        )
        db.add(plan)
        db.flush()
        db.add_all(
            WordPlanWord(plan_id=plan.id, word_id=word_id, order_index=index)
            for index, word_id in enumerate(payload.word_ids)
        )

    db.refresh(plan)
    logger.info("Word plan %s created with %s words", plan.id, len(payload.word_ids))
    return plan


def _deactivate_others(db: Session, plan_id: int) -> None:
    db.execute(
        update(WordPlan)
        .where(WordPlan.id != plan_id, WordPlan.status == PlanStatus.ACTIVE)
        .values(status=PlanStatus.INACTIVE, updated_at=func.now())
        .execution_options(synchronize_session="fetch")
    )


def update_plan(db: Session, plan_id: int, payload: WordPlanUpdate) -> WordPlan:
    plan = get_plan(db, plan_id)
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field == "description"
    }
    if not changes:
        raise ValidationError("No valid fields provided for update.", "INVALID_UPDATE")

    with transaction(db):
        for field, value in changes.items():
            setattr(plan, field, value)
        if changes.get("status") == PlanStatus.ACTIVE:
            _deactivate_others(db, plan.id)

    db.refresh(plan)
    return plan


def activate_plan(db: Session, plan_id: int) -> WordPlan:
    """Make ``plan_id`` the only active plan."""

    plan = get_plan(db, plan_id)
    with transaction(db):
        _deactivate_others(db, plan.id)
        plan.status = PlanStatus.ACTIVE
    db.refresh(plan)
    logger.info("Word plan %s activated", plan_id)
    return plan


def delete_plan(db: Session, plan_id: int) -> None:
    plan = get_plan(db, plan_id)
    with transaction(db):
        db.delete(plan)
    logger.info("Word plan %s deleted", plan_id)


def get_plan_detail(db: Session, plan_id: int) -> dict[str, Any]:
    plan = get_plan(db, plan_id)
    links = (
        db.query(WordPlanWord)
        .options(joinedload(WordPlanWord.word))
        .filter(WordPlanWord.plan_id == plan_id)
        .order_by(WordPlanWord.order_index, WordPlanWord.id)
        .all()
    )
    states = _word_states(db, plan_id, [link.word_id for link in links])
    return {
        **serialize_plan(plan),
        "words": [_serialize_plan_word(link, states.get(link.word_id)) for link in links],
        "stats": get_plan_stats(db, plan_id),
    }


# ----------------------------------------------------------------------
# Plan words
# ----------------------------------------------------------------------
def list_plan_words(
    db: Session,
    plan_id: int,
    *,
    page: int,
    limit: int,
    search: str | None = None,
    learned: str = "all",
) -> tuple[list[dict[str, Any]], int]:
    get_plan(db, plan_id)
    if learned not in LEARNED_FILTERS:
        raise ValidationError("learned must be one of all, learned, unlearned.", "INVALID_FILTER")

    query = (
        db.query(WordPlanWord)
        .join(Word, WordPlanWord.word_id == Word.id)
        .options(joinedload(WordPlanWord.word))
        .filter(WordPlanWord.plan_id == plan_id)
    )
    if search and search.strip():
        term = search.strip().lower()
        query = query.filter(
            or_(
                func.lower(Word.word).contains(term, autoescape=True),
                func.lower(Word.meaning).contains(term, autoescape=True),
            )
        )
    if learned != "all":
        studied = (
            db.query(LearningRecord.id)
            .filter(
                LearningRecord.plan_id == WordPlanWord.plan_id,
                LearningRecord.word_id == WordPlanWord.word_id,
            )
            .exists()
        )
        query = query.filter(studied if learned == "learned" else ~studied)

    total = query.count()
    links = (
        query.order_by(WordPlanWord.order_index, WordPlanWord.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    states = _word_states(db, plan_id, [link.word_id for link in links])
    return [_serialize_plan_word(link, states.get(link.word_id)) for link in links], total


def add_plan_word(db: Session, plan_id: int, payload: PlanWordCreate) -> WordPlanWord:
    get_plan(db, plan_id)
    if db.get(Word, payload.word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")

    next_index = (
        db.query(func.coalesce(func.max(WordPlanWord.order_index), -1))
        .filter(WordPlanWord.plan_id == plan_id)
        .scalar()
        + 1
    )
    link = WordPlanWord(plan_id=plan_id, word_id=payload.word_id, order_index=next_index)
    try:
        with transaction(db):
            db.add(link)
    except IntegrityError as exc:
        raise ConflictError("The word is already in this plan.", "WORD_ALREADY_IN_PLAN") from exc
    db.refresh(link)
    return link


def remove_plan_word(db: Session, plan_id: int, word_id: int) -> None:
    """Drop a word from a plan together with its learning history in that plan."""

    get_plan(db, plan_id)
    link = (
        db.query(WordPlanWord)
        .filter(WordPlanWord.plan_id == plan_id, WordPlanWord.word_id == word_id)
        .first()
    )
    if link is None:
        raise NotFoundError("Word is not part of this plan.", "PLAN_WORD_NOT_FOUND")

    with transaction(db):
        for model in (LearningRecord, ErrorWord):
            db.query(model).filter(model.plan_id == plan_id, model.word_id == word_id).delete(
                synchronize_session=False
            )
        db.delete(link)


# ----------------------------------------------------------------------
# Learning records
# ----------------------------------------------------------------------
def record_learning(db: Session, plan_id: int, payload: LearningRecordCreate) -> LearningRecord:
    """Store one answer. Wrong answers also bump the word's error counter."""

    get_plan(db, plan_id)
    in_plan = (
        db.query(WordPlanWord.id)
        .filter(WordPlanWord.plan_id == plan_id, WordPlanWord.word_id == payload.word_id)
        .first()
    )
    if in_plan is None:
        raise NotFoundError("Word is not part of this plan.", "WORD_NOT_IN_PLAN")

    record = LearningRecord(
        plan_id=plan_id,
        word_id=payload.word_id,
        user_answer=payload.user_answer,
        is_correct=payload.is_correct,
        attempts=payload.attempts,
    )
    with transaction(db):
        db.add(record)
        if not payload.is_correct:
            entry = (
                db.query(ErrorWord)
                .filter(ErrorWord.plan_id == plan_id, ErrorWord.word_id == payload.word_id)
                .with_for_update()
                .first()
            )
            if entry is None:
                db.add(ErrorWord(plan_id=plan_id, word_id=payload.word_id, error_count=1))
            else:
                entry.error_count = ErrorWord.error_count + 1

    db.refresh(record)
    return record


def list_learning_records(db: Session, plan_id: int, limit: int = 50) -> list[LearningRecord]:
    get_plan(db, plan_id)
    return (
        db.query(LearningRecord)
        .filter(LearningRecord.plan_id == plan_id)
        .order_by(LearningRecord.learned_at.desc(), LearningRecord.id.desc())
        .limit(limit)
        .all()
    )


def list_error_words(db: Session, plan_id: int) -> list[ErrorWord]:
    get_plan(db, plan_id)
    return (
        db.query(ErrorWord)
        .options(joinedload(ErrorWord.word))
        .filter(ErrorWord.plan_id == plan_id)
        .order_by(ErrorWord.error_count.desc(), ErrorWord.id)
        .all()
    )


# ----------------------------------------------------------------------
# Statistics
# ----------------------------------------------------------------------
def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0


def _progress_by_plan(db: Session, plan_ids: list[int]) -> dict[int, dict[str, Any]]:
    if not plan_ids:
        return {}
    progress: dict[int, dict[str, Any]] = {plan_id: {} for plan_id in plan_ids}

    for plan_id, total in (
        db.query(WordPlanWord.plan_id, func.count(WordPlanWord.id))
        .filter(WordPlanWord.plan_id.in_(plan_ids))
        .group_by(WordPlanWord.plan_id)
    ):
        progress[plan_id]["total_words"] = total

    correct_word = case((LearningRecord.is_correct.is_(True), LearningRecord.word_id))
    for plan_id, learned, correct, last_studied in (
        db.query(
            LearningRecord.plan_id,
            func.count(func.distinct(LearningRecord.word_id)),
            func.count(func.distinct(correct_word)),
            func.max(LearningRecord.learned_at),
        )
        .filter(LearningRecord.plan_id.in_(plan_ids))
        .group_by(LearningRecord.plan_id)
    ):
        progress[plan_id].update(
            learned_words=learned, correct_words=correct, last_studied_at=last_studied
        )

    for plan_id, error_words, total_errors in (
        db.query(ErrorWord.plan_id, func.count(ErrorWord.id), func.sum(ErrorWord.error_count))
        .filter(ErrorWord.plan_id.in_(plan_ids))
        .group_by(ErrorWord.plan_id)
    ):
        progress[plan_id].update(error_words=error_words, total_errors=int(total_errors or 0))

    return progress


def _word_states(db: Session, plan_id: int, word_ids: list[int]) -> dict[int, dict[str, Any]]:
    """Attempts, last-answer correctness and error count per word of a plan."""

    if not word_ids:
        return {}
    states: dict[int, dict[str, Any]] = {}
    records = (
        db.query(LearningRecord)
        .filter(LearningRecord.plan_id == plan_id, LearningRecord.word_id.in_(word_ids))
        .order_by(LearningRecord.learned_at, LearningRecord.id)
        .all()
    )
    for record in records:
        state = states.setdefault(record.word_id, {"attempts": 0})
        state["attempts"] += record.attempts
        state["is_correct"] = bool(record.is_correct)

    for word_id, error_count in (
        db.query(ErrorWord.word_id, ErrorWord.error_count)
        .filter(ErrorWord.plan_id == plan_id, ErrorWord.word_id.in_(word_ids))
    ):
        states.setdefault(word_id, {"attempts": 0})["error_count"] = error_count
    return states


def get_plan_stats(db: Session, plan_id: int) -> dict[str, Any]:
    plan = get_plan(db, plan_id)
    counts = _progress_by_plan(db, [plan_id])[plan_id]
    total = counts.get("total_words", 0)
    learned = counts.get("learned_words", 0)
    correct = counts.get("correct_words", 0)

    today_learned, today_correct, today_errors = (
        db.query(
            func.count(LearningRecord.id),
            func.sum(case((LearningRecord.is_correct.is_(True), 1), else_=0)),
            func.sum(case((LearningRecord.is_correct.is_(False), 1), else_=0)),
        )
        .filter(
            LearningRecord.plan_id == plan_id,
            func.date(LearningRecord.learned_at) == func.current_date(),
        )
        .one()
    )

    return {
        "totalWords": total,
        "learnedWords": learned,
        "remainingWords": max(total - learned, 0),
        "correctWords": correct,
        "errorWords": counts.get("error_words", 0),
        "totalErrors": counts.get("total_errors", 0),
        "correctRate": _rate(correct, learned),
        "dailyProgress": (
            min(100, round(learned / plan.daily_word_count * 100)) if plan.daily_word_count else 0
        ),
        "lastStudiedAt": counts.get("last_studied_at"),
        "todayLearned": int(today_learned or 0),
        "todayCorrect": int(today_correct or 0),
        "todayErrors": int(today_errors or 0),
    }
