from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from lexibox.api.dependencies import get_db
from lexibox.crud import word_plan_crud
from lexibox.db.base_class import INT_MAX
from lexibox.schemas.word_plan_schema import (
    LearningRecordCreate,
    PlanWordCreate,
    WordPlanCreate,
    WordPlanUpdate,
)

router = APIRouter()


@router.get("")
def list_plans(db: Session = Depends(get_db)):
    return {"success": True, "data": word_plan_crud.list_plans(db)}


# Declared before "/{plan_id}" so "active" is not parsed as an id.
@router.get("/active")
def get_active_plan(db: Session = Depends(get_db)):
    plan = word_plan_crud.get_active_plan(db)
    return {"success": True, "data": word_plan_crud.serialize_plan(plan)}


@router.get("/{plan_id}")
def get_plan(plan_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    return {"success": True, "data": word_plan_crud.get_plan_detail(db, plan_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_plan(payload: WordPlanCreate, db: Session = Depends(get_db)):
    plan = word_plan_crud.create_plan(db, payload)
    return {"success": True, "data": word_plan_crud.serialize_plan(plan)}


@router.put("/{plan_id}")
def update_plan(
    payload: WordPlanUpdate,
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    plan = word_plan_crud.update_plan(db, plan_id, payload)
    return {"success": True, "data": word_plan_crud.serialize_plan(plan)}


@router.delete("/{plan_id}")
def delete_plan(plan_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    word_plan_crud.delete_plan(db, plan_id)
    return {"success": True, "message": "Word plan deleted successfully."}


@router.put("/{plan_id}/activate")
def activate_plan(plan_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    plan = word_plan_crud.activate_plan(db, plan_id)
    return {"success": True, "data": word_plan_crud.serialize_plan(plan)}


@router.get("/{plan_id}/words")
def list_plan_words(
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    page: int = Query(default=1, ge=1, le=INT_MAX),
    limit: int = Query(default=50, ge=1, le=100),
    search: str | None = Query(default=None),
    learned: str = Query(default="all"),
    db: Session = Depends(get_db),
):
    items, total = word_plan_crud.list_plan_words(
        db, plan_id, page=page, limit=limit, search=search, learned=learned
    )
    return {
        "success": True,
        "data": {
            "items": items,
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": -(-total // limit),
        },
    }


@router.post("/{plan_id}/words", status_code=status.HTTP_201_CREATED)
def add_plan_word(
    payload: PlanWordCreate,
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    link = word_plan_crud.add_plan_word(db, plan_id, payload)
    return {
        "success": True,
        "data": {
            "id": link.id,
            "planId": link.plan_id,
            "wordId": link.word_id,
            "orderIndex": link.order_index,
            "addedAt": link.added_at,
        },
    }


@router.delete("/{plan_id}/words/{word_id}")
def remove_plan_word(
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    word_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    word_plan_crud.remove_plan_word(db, plan_id, word_id)
    return {"success": True, "message": "Word removed from plan."}


@router.post("/{plan_id}/learning-records", status_code=status.HTTP_201_CREATED)
def record_learning(
    payload: LearningRecordCreate,
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    record = word_plan_crud.record_learning(db, plan_id, payload)
    return {"success": True, "data": word_plan_crud.serialize_record(record)}


@router.get("/{plan_id}/learning-records")
def list_learning_records(
    plan_id: int = Path(..., ge=1, le=INT_MAX),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    records = word_plan_crud.list_learning_records(db, plan_id, limit)
    return {"success": True, "data": [word_plan_crud.serialize_record(r) for r in records]}


@router.get("/{plan_id}/error-words")
def list_error_words(plan_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    entries = word_plan_crud.list_error_words(db, plan_id)
    return {"success": True, "data": [word_plan_crud.serialize_error_word(e) for e in entries]}


@router.get("/{plan_id}/stats")
def get_plan_stats(plan_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    return {"success": True, "data": word_plan_crud.get_plan_stats(db, plan_id)}
