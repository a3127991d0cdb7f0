from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexibox.schemas.word_schema import normalize_difficulty


class DictionaryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_enabled: bool = Field(default=True, alias="isEnabled")
    is_mastered: bool = Field(default=False, alias="isMastered")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class DictionaryUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_enabled: Optional[bool] = Field(default=None, alias="isEnabled")
    is_mastered: Optional[bool] = Field(default=None, alias="isMastered")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class DictionaryWordCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word_id: int = Field(..., ge=1, alias="wordId")
    difficulty: Optional[int] = Field(default=None, ge=0, le=2)
    is_mastered: Optional[bool] = Field(default=None, alias="isMastered")
    notes: Optional[str] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        return normalize_difficulty(value)


class DictionaryWordUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    difficulty: Optional[int] = Field(default=None, ge=0, le=2)
    is_mastered: Optional[bool] = Field(default=None, alias="isMastered")
    notes: Optional[str] = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _normalize_difficulty(cls, value: Any) -> Any:
        return normalize_difficulty(value)

