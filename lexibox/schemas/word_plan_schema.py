from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexibox.db.base_class import INT_MAX
from lexibox.models.word_plan_model import PlanMode, PlanStatus


def _strip_name(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class WordPlanCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    mode: PlanMode = PlanMode.FLASH_CARD
    target_word_count: int = Field(default=10, ge=1, le=INT_MAX, alias="targetWordCount")
    daily_word_count: int = Field(default=5, ge=1, le=INT_MAX, alias="dailyWordCount")
    word_ids: List[int] = Field(default_factory=list, alias="wordIds")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_plan_name(cls, value: Any) -> Any:
        return _strip_name(value)

    @field_validator("word_ids")
    @classmethod
    def _validate_word_ids(cls, value: List[int]) -> List[int]:
        unique: list[int] = []
        for word_id in value:
            if not 1 <= word_id <= INT_MAX:
                raise ValueError("wordIds must contain positive integers")
            if word_id not in unique:
                unique.append(word_id)
        return unique


class WordPlanUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    mode: Optional[PlanMode] = None
    target_word_count: Optional[int] = Field(default=None, ge=1, le=INT_MAX, alias="targetWordCount")
    daily_word_count: Optional[int] = Field(default=None, ge=1, le=INT_MAX, alias="dailyWordCount")
    status: Optional[PlanStatus] = None

    @field_validator("name", mode="before")
    @classmethod
    def _strip_plan_name(cls, value: Any) -> Any:
        return _strip_name(value)


class PlanWordCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word_id: int = Field(..., ge=1, le=INT_MAX, alias="wordId")


class LearningRecordCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    word_id: int = Field(..., ge=1, le=INT_MAX, alias="wordId")
    is_correct: bool = Field(..., alias="isCorrect")
    user_answer: Optional[str] = Field(default=None, max_length=255, alias="userAnswer")
    attempts: int = Field(default=1, ge=1, le=INT_MAX)
