from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from lexibox.api.dependencies import get_db
from lexibox.core.errors import ValidationError
from lexibox.crud import sentence_crud
from lexibox.db.base_class import INT_MAX
from lexibox.schemas import sentence_schema
from lexibox.services import association_service
from lexibox.services.tokenizer import tokenize

router = APIRouter()


@router.post(
    "/tokenize",
    response_model=sentence_schema.TokenizeOut,
    summary="Tokenize text without storing it",
)
def tokenize_text(payload: sentence_schema.TokenizeIn):
    if not payload.text:
        raise ValidationError("text is required and must be a string.", "INVALID_TEXT")
    return {"text": payload.text, "tokens": [token.as_dict() for token in tokenize(payload.text)]}


@router.post(
    "",
    response_model=sentence_schema.SentenceCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sentence and its tokens",
)
def create_sentence(
    payload: sentence_schema.SentenceCreate,
    db: Session = Depends(get_db),
):
    sentence = sentence_crud.create_sentence(db, payload.text, payload.tokens)
    return sentence_crud.serialize_sentence(sentence, with_words=False)


@router.get("", response_model=sentence_schema.SentencePageOut)
def list_sentences(
    page: int = Query(default=1, le=INT_MAX),
    page_size: int = Query(default=20, alias="pageSize"),
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    result = sentence_crud.list_sentences(db, page=page, page_size=page_size, search=search)
    return {
        "success": True,
        "data": {
            "items": result.items,
            "total": result.total,
            "page": result.page,
            "limit": result.page_size,
            "totalPages": result.total_pages,
        },
    }


@router.get("/{sentence_id}", response_model=sentence_schema.SentenceDetailOut)
def get_sentence(
    sentence_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    sentence = sentence_crud.get_sentence(db, sentence_id)
    return sentence_crud.serialize_sentence(sentence)


@router.delete(
    "/{sentence_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
def delete_sentence(
    sentence_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    sentence_crud.delete_sentence(db, sentence_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{sentence_id}/tokens/{position}",
    response_model=sentence_schema.TokenDetailOut,
    summary="Link a token to a word, or clear the link",
)
def update_token_word(
    payload: sentence_schema.TokenWordUpdate,
    sentence_id: int = Path(..., ge=1, le=INT_MAX),
    position: int = Path(..., ge=0, le=INT_MAX),
    db: Session = Depends(get_db),
):
    token = association_service.update_token_word(db, sentence_id, position, payload.word_id)
    return sentence_crud.serialize_token(token)


@router.get(
    "/{sentence_id}/suggestions",
    response_model=sentence_schema.TokenSuggestionsOut,
    summary="Exact-match word suggestions for unlinked tokens",
)
def suggest_token_links(
    sentence_id: int = Path(..., ge=1, le=INT_MAX),
    db: Session = Depends(get_db),
):
    return {"data": association_service.suggest_links(db, sentence_id)}
