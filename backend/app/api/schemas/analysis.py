from __future__ import annotations

from pydantic import BaseModel

from app.domain.report import AnalysisResult


class AnalysisResponse(AnalysisResult):
    rawResponse: str | None = None


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
