from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lexibox.db.base_class import INT_MAX
from lexibox.models.sentence_model import TokenType


class TokenizeIn(BaseModel):
    text: str


class TokenOut(BaseModel):
    position: int
    text: str
    type: TokenType


class TokenizeOut(BaseModel):
    text: str
    tokens: List[TokenOut]


class TokenIn(BaseModel):
    """Pre-computed token supplied by the client when creating a sentence."""

    position: int = Field(..., ge=0, le=INT_MAX)
    text: str = Field(..., min_length=1)
    type: TokenType
    word_id: Optional[int] = Field(default=None, ge=1, le=INT_MAX)


class SentenceCreate(BaseModel):
    text: str
    tokens: Optional[List[TokenIn]] = None

    @model_validator(mode="after")
    def _ensure_contiguous_positions(self) -> "SentenceCreate":
        positions = [token.position for token in self.tokens or []]
        if positions != list(range(len(positions))):
            raise ValueError("token positions must run 0..N-1 in list order")
        return self


class TokenWordUpdate(BaseModel):
    word_id: Optional[int] = Field(default=None, ge=1, le=INT_MAX)


class CreatedTokenOut(TokenOut):
    word_id: Optional[int] = None


class LinkedWordOut(BaseModel):
    word_id: int
    word: str
    meaning: Optional[str] = None
    phonetic: Optional[str] = None


class TokenDetailOut(CreatedTokenOut):
    word: Optional[LinkedWordOut] = None


class SentenceCreatedOut(BaseModel):
    id: int
    text: str
    created_at: datetime
    tokens: List[CreatedTokenOut]


class SentenceDetailOut(BaseModel):
    id: int
    text: str
    created_at: datetime
    tokens: List[TokenDetailOut]


class SentenceListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    created_at: datetime
    token_count: int


class SentencePageData(BaseModel):
    items: List[SentenceListItem]
    total: int
    page: int
    limit: int
    totalPages: int


class SentencePageOut(BaseModel):
    success: bool = True
    data: SentencePageData


class WordSentenceOut(BaseModel):
    id: int
    text: str
    created_at: datetime
    tokens: List[TokenOut]


class WordSentencesOut(BaseModel):
    data: List[WordSentenceOut]


class TokenSuggestionOut(BaseModel):
    position: int
    text: str
    word_id: int


class TokenSuggestionsOut(BaseModel):
    data: List[TokenSuggestionOut]
