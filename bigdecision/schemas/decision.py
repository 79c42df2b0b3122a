from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DecisionCategory(str, Enum):
    WORK = "work"
    RELATIONSHIP = "relationship"
    EDUCATION = "education"
    HOUSING = "housing"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    INVESTMENT = "investment"
    OTHER = "other"


class TimeFrame(str, Enum):
    IMMEDIATE = "immediate"
    DAYS = "days"
    WEEK = "week"
    MONTH = "month"
    LONG_TERM = "long_term"


class DecisionOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("option title must not be empty")
        return value


class DecisionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    option_a: DecisionOption
    option_b: DecisionOption
    additional_info: str = ""
    category: DecisionCategory = DecisionCategory.OTHER
    importance: int = Field(default=3, ge=1, le=5)
    time_frame: TimeFrame = TimeFrame.DAYS

    @property
    def options(self) -> tuple[DecisionOption, DecisionOption]:
        return self.option_a, self.option_b


class DecisionResult(BaseModel):
    """Structured answer decoded from the model's JSON payload.

    Wire names follow the payload the model is asked to produce
    (``prosA``/``consA``/``prosB``/``consB``). The four lists are required
    but may be empty.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recommendation: Literal["A", "B"]
    confidence: float = Field(ge=0, le=1)
    reasoning: str
    pros_a: list[str] = Field(alias="prosA")
    cons_a: list[str] = Field(alias="consA")
    pros_b: list[str] = Field(alias="prosB")
    cons_b: list[str] = Field(alias="consB")
    reasoning_trace: str | None = None
