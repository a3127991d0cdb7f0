from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from lexibox.api.dependencies import get_db
from lexibox.core.errors import ValidationError
from lexibox.crud import pronunciation_rule_crud, sentence_crud, word_crud
from lexibox.db.base_class import INT_MAX
from lexibox.schemas import sentence_schema
from lexibox.schemas.pronunciation_rule_schema import WordRulesAttach
from lexibox.schemas.word_schema import WordCreate, WordUpdate, normalize_difficulty
from lexibox.services import association_service

router = APIRouter()


def _parse_difficulty(raw: str | None) -> int | None:
    try:
        value = normalize_difficulty(raw)
    except ValueError as exc:
        raise ValidationError(str(exc), "INVALID_DIFFICULTY") from exc
    if value is not None and not 0 <= value <= 2:
        raise ValidationError("difficulty must be 0, 1, 2 or easy/medium/hard.", "INVALID_DIFFICULTY")
    return value


@router.get("")
def list_words(
    page: int = Query(default=1, ge=1, le=INT_MAX),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = Query(default=None),
    difficulty: str | None = Query(default=None),
    mastery_status: bool | None = Query(default=None, alias="masteryStatus"),
    db: Session = Depends(get_db),
):
    items, total = word_crud.list_words(
        db,
        page=page,
        limit=limit,
        search=search,
        difficulty=_parse_difficulty(difficulty),
        is_mastered=mastery_status,
    )
    return {
        "success": True,
        "data": {
            "items": [word_crud.serialize_word(word) for word in items],
            "page": page,
            "limit": limit,
            "total": total,
        },
    }


@router.get("/lookup", summary="Case-insensitive exact-match lookup")
def lookup_word(
    text: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    match = association_service.find_exact_match(db, text)
    return {
        "success": True,
        "data": word_crud.serialize_word(match) if match is not None else None,
    }


@router.get("/{word_id}")
def get_word(word_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    return {"success": True, "data": word_crud.serialize_word(word_crud.get_word(db, word_id))}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_word(payload: WordCreate, db: Session = Depends(get_db)):
    word = word_crud.create_word(db, payload)
    return {"success": True, "data": word_crud.serialize_word(word)}


@router.put("/{word_id}")
def update_word(
    payload: WordUpdate,
    word_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    word = word_crud.update_word(db, word_id, payload)
    return {"success": True, "data": word_crud.serialize_word(word)}


@router.delete("/{word_id}")
def delete_word(word_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    word_crud.delete_word(db, word_id)
    return {"success": True, "message": "Word deleted successfully."}


@router.get("/{word_id}/sentences", response_model=sentence_schema.WordSentencesOut)
def get_word_sentences(word_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    return {"data": sentence_crud.list_sentences_for_word(db, word_id)}


@router.get("/{word_id}/pronunciation-rules")
def get_word_rules(word_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    links = pronunciation_rule_crud.list_word_rules(db, word_id)
    return {"success": True, "data": [pronunciation_rule_crud.serialize_word_rule(link) for link in links]}


@router.post("/{word_id}/pronunciation-rules")
def attach_word_rules(
    payload: WordRulesAttach,
    word_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    added, links = pronunciation_rule_crud.attach_rules(db, word_id, payload)
    return {
        "success": True,
        "message": f"Added {added} pronunciation rule associations.",
        "data": [pronunciation_rule_crud.serialize_word_rule(link) for link in links],
    }


@router.delete("/{word_id}/pronunciation-rules/{rule_id}")
def detach_word_rule(
    word_id: int = Path(..., ge=1, le=INT_MAX),
    rule_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    pronunciation_rule_crud.detach_rule(db, word_id, rule_id)
    return {"success": True, "message": "Pronunciation rule association removed."}
