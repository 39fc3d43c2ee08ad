"""Pydantic models mirroring ``schemas/analysis_result.v1.json``."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

ANALYSIS_RESULT_SCHEMA_NAME = "analysis_result.v1.json"
DEFAULT_CATEGORY = "Other"
SENTINEL_SUMMARY = (
    "Unable to parse the blood report. Please ensure the file is a valid blood test report "
    "with clear biomarker data."
)

BiomarkerStatus = Literal["normal", "low", "high"]


@lru_cache(maxsize=4)
def load_schema(name: str = ANALYSIS_RESULT_SCHEMA_NAME) -> dict[str, Any]:
    path = _SCHEMA_DIR / name
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class BiomarkerResult(BaseModel):
    name: str = Field(min_length=1)
    value: str
    unit: str = ""
    status: BiomarkerStatus
    range: str = ""
    insight: str = ""
    category: str = DEFAULT_CATEGORY

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Biomarker name cannot be blank")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def number_as_text(cls, v: Any) -> Any:
        # Models sometimes emit 14.2 instead of "14.2".
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY
        return v


class AnalysisResult(BaseModel):
    summary: str
    score: int
    critical_items: int
    results: list[BiomarkerResult] = Field(default_factory=list)


def sentinel_result() -> AnalysisResult:
    """Well-formed, empty result returned when the model output cannot be decoded."""
    return AnalysisResult(summary=SENTINEL_SUMMARY, score=0, critical_items=0, results=[])
