from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lexibox.db.base_class import INT_MAX


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class PronunciationRuleCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    letter_combination: str = Field(..., min_length=1, max_length=50, alias="letterCombination")
    pronunciation: str = Field(..., min_length=1, max_length=100)
    rule_description: Optional[str] = Field(default=None, alias="ruleDescription")

    @field_validator("letter_combination", "pronunciation", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("rule_description", mode="before")
    @classmethod
    def _blank_description_is_none(cls, value: Any) -> Any:
        value = _strip(value)
        return value or None


class PronunciationRuleUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    letter_combination: Optional[str] = Field(
        default=None, min_length=1, max_length=50, alias="letterCombination"
    )
    pronunciation: Optional[str] = Field(default=None, min_length=1, max_length=100)
    rule_description: Optional[str] = Field(default=None, alias="ruleDescription")

    @field_validator("letter_combination", "pronunciation", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("rule_description", mode="before")
    @classmethod
    def _blank_description_is_none(cls, value: Any) -> Any:
        value = _strip(value)
        return value or None


class WordRulesAttach(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pronunciation_rule_ids: List[int] = Field(..., min_length=1, alias="pronunciationRuleIds")
    position_in_word: Optional[int] = Field(default=None, ge=0, le=INT_MAX, alias="positionInWord")

    @field_validator("pronunciation_rule_ids")
    @classmethod
    def _validate_rule_ids(cls, value: List[int]) -> List[int]:
        for rule_id in value:
            if not 1 <= rule_id <= INT_MAX:
                raise ValueError("pronunciationRuleIds must contain positive integers")
        return list(dict.fromkeys(value))
