from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from lexibox.core.errors import ConflictError, NotFoundError
from lexibox.crud.word_crud import serialize_word
from lexibox.db.session import transaction
from lexibox.models.dictionary_model import Dictionary, DictionaryWord
from lexibox.models.word_model import Word
from lexibox.schemas.dictionary_schema import (
    DictionaryCreate,
    DictionaryUpdate,
    DictionaryWordCreate,
    DictionaryWordUpdate,
)


def serialize_dictionary(dictionary: Dictionary) -> dict[str, Any]:
    return {
        "id": dictionary.id,
        "name": dictionary.name,
        "description": dictionary.description,
        "isEnabled": bool(dictionary.is_enabled),
        "isMastered": bool(dictionary.is_mastered),
        "createdAt": dictionary.created_at,
        "updatedAt": dictionary.updated_at,
    }


def serialize_association(association: DictionaryWord) -> dict[str, Any]:
    return {
        "id": association.id,
        "dictionaryId": association.dictionary_id,
        "wordId": association.word_id,
        "difficulty": association.difficulty,
        "isMastered": association.is_mastered,
        "notes": association.notes,
        "addedAt": association.created_at,
        "word": serialize_word(association.word),
    }


# ----------------------------------------------------------------------
# Dictionaries
# ----------------------------------------------------------------------
def list_dictionaries(db: Session) -> list[Dictionary]:
    return (
        db.query(Dictionary)
        .order_by(Dictionary.created_at.desc(), Dictionary.id.desc())
        .all()
    )


def get_dictionary(db: Session, dictionary_id: int) -> Dictionary:
    dictionary = db.get(Dictionary, dictionary_id)
    if dictionary is None:
        raise NotFoundError("Dictionary not found.", "DICTIONARY_NOT_FOUND")
    return dictionary


def _duplicate_name() -> ConflictError:
    return ConflictError(
        "A dictionary with this name already exists.", "DICTIONARY_ALREADY_EXISTS"
    )


def create_dictionary(db: Session, payload: DictionaryCreate) -> Dictionary:
    dictionary = Dictionary(
        name=payload.name,
        description=payload.description,
        is_enabled=payload.is_enabled,
        is_mastered=payload.is_mastered,
    )
    try:
        with transaction(db):
            db.add(dictionary)
    except IntegrityError as exc:
        raise _duplicate_name() from exc
    db.refresh(dictionary)
    return dictionary


def update_dictionary(db: Session, dictionary_id: int, payload: DictionaryUpdate) -> Dictionary:
    dictionary = get_dictionary(db, dictionary_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("name") is not None:
        dictionary.name = changes["name"]
    if "description" in changes:
        dictionary.description = changes["description"]
    if changes.get("is_enabled") is not None:
        dictionary.is_enabled = changes["is_enabled"]
    if changes.get("is_mastered") is not None:
        dictionary.is_mastered = changes["is_mastered"]

    try:
        with transaction(db):
            db.add(dictionary)
    except IntegrityError as exc:
        raise _duplicate_name() from exc
    db.refresh(dictionary)
    return dictionary


def delete_dictionary(db: Session, dictionary_id: int) -> None:
    dictionary = get_dictionary(db, dictionary_id)
    with transaction(db):
        db.delete(dictionary)


# ----------------------------------------------------------------------
# Dictionary / word associations
# ----------------------------------------------------------------------
def _association_query(db: Session):
    return db.query(DictionaryWord).options(joinedload(DictionaryWord.word))


def list_dictionary_words(db: Session, dictionary_id: int) -> list[DictionaryWord]:
    get_dictionary(db, dictionary_id)
    return (
        _association_query(db)
        .filter(DictionaryWord.dictionary_id == dictionary_id)
        .order_by(DictionaryWord.created_at.desc(), DictionaryWord.id.desc())
        .all()
    )


def add_dictionary_word(
    db: Session, dictionary_id: int, payload: DictionaryWordCreate
) -> DictionaryWord:
    get_dictionary(db, dictionary_id)
    if db.get(Word, payload.word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")

    association = DictionaryWord(
        dictionary_id=dictionary_id,
        word_id=payload.word_id,
        difficulty=payload.difficulty,
        is_mastered=payload.is_mastered,
        notes=payload.notes,
    )
    try:
        with transaction(db):
            db.add(association)
    except IntegrityError as exc:
        raise ConflictError(
            "The word is already associated with this dictionary.",
            "WORD_ALREADY_IN_DICTIONARY",
        ) from exc
    return _association_query(db).filter(DictionaryWord.id == association.id).one()


def remove_dictionary_word(db: Session, dictionary_id: int, word_id: int) -> None:
    get_dictionary(db, dictionary_id)
    if db.get(Word, word_id) is None:
        raise NotFoundError("Word not found.", "WORD_NOT_FOUND")

    association = (
        db.query(DictionaryWord)
        .filter(
            DictionaryWord.dictionary_id == dictionary_id,
            DictionaryWord.word_id == word_id,
        )
        .first()
    )
    if association is None:
        raise NotFoundError(
            "Word is not associated with this dictionary.", "ASSOCIATION_NOT_FOUND"
        )

    with transaction(db):
        db.delete(association)


def update_dictionary_word(
    db: Session, relation_id: int, payload: DictionaryWordUpdate
) -> DictionaryWord:
    association = db.get(DictionaryWord, relation_id)
    if association is None:
        raise NotFoundError("Dictionary word association not found.", "ASSOCIATION_NOT_FOUND")

    changes = payload.model_dump(exclude_unset=True)
    with transaction(db):
        for field in ("difficulty", "is_mastered", "notes"):
            if field in changes:
                setattr(association, field, changes[field])

    return _association_query(db).filter(DictionaryWord.id == relation_id).populate_existing().one()
