"""
Bug Report Model
================
Pydantic models for the findings produced by the bug detection stage.
This is the contract between the response parser and all downstream consumers.

Wire names follow the JSON the model is asked to produce (camelCase);
Python code uses the snake_case field names.

Fields:
    description     — non-blank explanation of the issue
    confidence      — model's self-reported certainty, number in [0, 100]
    severity        — exactly one of low / medium / high / critical
    suggested_fix   — replacement code, may be empty
    line_start      — first affected line (integer)
    line_end        — last affected line (integer, >= line_start)
    file_path       — BugReport only; stamped by the assembler, never taken from the model

CandidateReport is strict: a JSON boolean is not a number, "80" is not a
number, "High" is not a severity. Anything that fails raises
pydantic.ValidationError and is dropped by the validator.
"""
import math
from typing import Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)

from app.core.constants import CONFIDENCE_MAX, CONFIDENCE_MIN

Severity = Literal["low", "medium", "high", "critical"]
Number = Union[StrictInt, StrictFloat]


class CandidateReport(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    description: StrictStr
    confidence: Number
    severity: Severity
    suggested_fix: StrictStr = Field(alias="suggestedFix")
    line_start: int = Field(alias="lineStart")
    line_end: int = Field(alias="lineEnd")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v

    @field_validator("confidence")
    @classmethod
    def confidence_in_range(cls, v: Union[int, float]) -> Union[int, float]:
        # NaN fails both comparisons
        if not CONFIDENCE_MIN <= v <= CONFIDENCE_MAX:
            raise ValueError(
                f"confidence must be between {CONFIDENCE_MIN} and {CONFIDENCE_MAX}"
            )
        return v

    @field_validator("line_start", "line_end", mode="before")
    @classmethod
    def line_is_integral_number(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("line numbers must be numbers")
        if isinstance(v, float):
            if not math.isfinite(v) or not v.is_integer():
                raise ValueError("line numbers must be whole numbers")
            return int(v)
        return v

    @model_validator(mode="after")
    def line_range_ordered(self) -> "CandidateReport":
        if self.line_start > self.line_end:
            raise ValueError(
                f"lineStart ({self.line_start}) is after lineEnd ({self.line_end})"
            )
        return self


class BugReport(CandidateReport):
    file_path: StrictStr = Field(alias="filePath")
