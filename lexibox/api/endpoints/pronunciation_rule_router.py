from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from lexibox.api.dependencies import get_db
from lexibox.crud import pronunciation_rule_crud
from lexibox.db.base_class import INT_MAX
from lexibox.schemas.pronunciation_rule_schema import (
    PronunciationRuleCreate,
    PronunciationRuleUpdate,
)

router = APIRouter()


@router.get("")
def list_rules(
    page: int = Query(default=1, ge=1, le=INT_MAX),
    limit: int = Query(default=20, ge=1, le=100),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    items, total = pronunciation_rule_crud.list_rules(db, page=page, limit=limit, search=search)
    return {
        "success": True,
        "data": {"items": items, "page": page, "limit": limit, "total": total},
    }


@router.get("/by-combination/{letter_combination}")
def list_rules_by_combination(letter_combination: str, db: Session = Depends(get_db)):
    return {
        "success": True,
        "data": pronunciation_rule_crud.list_rules_by_combination(db, letter_combination),
    }


@router.get("/{rule_id}")
def get_rule(rule_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    return {"success": True, "data": pronunciation_rule_crud.get_rule_with_count(db, rule_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_rule(payload: PronunciationRuleCreate, db: Session = Depends(get_db)):
    rule = pronunciation_rule_crud.create_rule(db, payload)
    return {"success": True, "data": pronunciation_rule_crud.serialize_rule(rule, 0)}


@router.put("/{rule_id}")
def update_rule(
    payload: PronunciationRuleUpdate,
    rule_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    pronunciation_rule_crud.update_rule(db, rule_id, payload)
    return {"success": True, "data": pronunciation_rule_crud.get_rule_with_count(db, rule_id)}


@router.delete("/{rule_id}")
def delete_rule(rule_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    pronunciation_rule_crud.delete_rule(db, rule_id)
    return {"success": True, "message": "Pronunciation rule deleted successfully."}


@router.get("/{rule_id}/words")
def list_words_for_rule(
    rule_id: int = Path(..., ge=1, le=INT_MAX),
    page: int = Query(default=1, ge=1, le=INT_MAX),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    items, total = pronunciation_rule_crud.list_words_for_rule(db, rule_id, page=page, limit=limit)
    return {
        "success": True,
        "data": {"items": items, "page": page, "limit": limit, "total": total},
    }
