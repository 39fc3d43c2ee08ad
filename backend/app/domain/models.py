from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from app.core.errors import PipelineError
from app.domain.report import AnalysisResult

PromptMode = Literal["direct", "text-fallback"]
PipelineState = Literal["precondition", "input", "invoke", "fallback", "parse", "done", "failed"]


@dataclass(frozen=True)
class UploadedDocument:
    content: bytes
    media_type: str | None
    filename: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class AnalysisRequest:
    """One model call. Exactly one of ``media_base64`` / ``extracted_text`` is set."""

    mode: PromptMode
    media_type: str
    prompt: str
    media_base64: str | None = None
    extracted_text: str | None = None

    def __post_init__(self) -> None:
        if (self.media_base64 is None) == (self.extracted_text is None):
            raise ValueError("AnalysisRequest needs exactly one of media_base64 or extracted_text")


@dataclass(frozen=True)
class AnalysisSuccess:
    result: AnalysisResult
    mode: PromptMode
    request_id: str
    states: tuple[PipelineState, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnalysisDegraded:
    result: AnalysisResult
    raw_response: str
    reason: str
    mode: PromptMode
    request_id: str
    states: tuple[PipelineState, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnalysisFailure:
    error: PipelineError
    request_id: str
    states: tuple[PipelineState, ...] = field(default_factory=tuple)


AnalysisOutcome = AnalysisSuccess | AnalysisDegraded | AnalysisFailure
