from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from lexibox.api.dependencies import get_db
from lexibox.db.base_class import INT_MAX
from lexibox.crud import dictionary_crud
from lexibox.schemas.dictionary_schema import (
    DictionaryCreate,
    DictionaryUpdate,
    DictionaryWordCreate,
    DictionaryWordUpdate,
)

router = APIRouter()
association_router = APIRouter()


@router.get("")
def list_dictionaries(db: Session = Depends(get_db)):
    return {
        "success": True,
        "data": [
            dictionary_crud.serialize_dictionary(dictionary)
            for dictionary in dictionary_crud.list_dictionaries(db)
        ],
    }


@router.get("/{dictionary_id}")
def get_dictionary(dictionary_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    dictionary = dictionary_crud.get_dictionary(db, dictionary_id)
    return {"success": True, "data": dictionary_crud.serialize_dictionary(dictionary)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_dictionary(payload: DictionaryCreate, db: Session = Depends(get_db)):
    dictionary = dictionary_crud.create_dictionary(db, payload)
    return {"success": True, "data": dictionary_crud.serialize_dictionary(dictionary)}


@router.put("/{dictionary_id}")
def update_dictionary(
    payload: DictionaryUpdate,
    dictionary_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    dictionary = dictionary_crud.update_dictionary(db, dictionary_id, payload)
    return {"success": True, "data": dictionary_crud.serialize_dictionary(dictionary)}


@router.delete("/{dictionary_id}")
def delete_dictionary(dictionary_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    dictionary_crud.delete_dictionary(db, dictionary_id)
    return {"success": True, "message": "Dictionary deleted successfully."}


@router.get("/{dictionary_id}/words")
def list_dictionary_words(dictionary_id: int = Path(..., ge=1, le=INT_MAX), db: Session = Depends(get_db)):
    associations = dictionary_crud.list_dictionary_words(db, dictionary_id)
    return {
        "success": True,
        "data": [dictionary_crud.serialize_association(item) for item in associations],
    }


@router.post("/{dictionary_id}/words", status_code=status.HTTP_201_CREATED)
def add_dictionary_word(
    payload: DictionaryWordCreate,
    dictionary_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    association = dictionary_crud.add_dictionary_word(db, dictionary_id, payload)
    return {"success": True, "data": dictionary_crud.serialize_association(association)}


@router.delete("/{dictionary_id}/words/{word_id}")
def remove_dictionary_word(
    dictionary_id: int = Path(..., ge=1, le=INT_MAX),
    word_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    dictionary_crud.remove_dictionary_word(db, dictionary_id, word_id)
    return {"success": True, "message": "Word removed from dictionary."}


@association_router.put("/{relation_id}")
def update_dictionary_word(
    payload: DictionaryWordUpdate,
    relation_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    association = dictionary_crud.update_dictionary_word(db, relation_id, payload)
    return {"success": True, "data": dictionary_crud.serialize_association(association)}
