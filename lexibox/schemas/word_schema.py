from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexibox.models.word_model import Difficulty


def normalize_difficulty(value: Any) -> Any:
    """Accept 0-2 or ``easy``/``medium``/``hard`` (any case)."""

    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in Difficulty.LABELS:
        return Difficulty.LABELS[normalized]
    if normalized.isdigit():
        return int(normalized)
    raise ValueError("difficulty must be 0, 1, 2 or easy/medium/hard.")


def _strip_optional(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


class WordBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pronunciation1: Optional[str] = Field(default=None, max_length=255)
    pronunciation2: Optional[str] = Field(default=None, max_length=255)
    pronunciation3: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None
    difficulty: Optional[int] = Field(default=None, ge=0, le=2)
    is_mastered: Optional[bool] = Field(default=None, alias="isMastered")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        return normalize_difficulty(value)

    @field_validator("pronunciation1", "pronunciation2", "pronunciation3", "notes", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        return _strip_optional(value)


class WordCreate(WordBase):
    word: str = Field(..., min_length=1, max_length=255)
    phonetic: str = Field(..., min_length=1, max_length=255)
    meaning: str = Field(..., min_length=1)

    @field_validator("word", "phonetic", "meaning", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class WordUpdate(WordBase):
    word: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phonetic: Optional[str] = Field(default=None, min_length=1, max_length=255)
    meaning: Optional[str] = Field(default=None, min_length=1)

    @field_validator("word", "phonetic", "meaning", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value
