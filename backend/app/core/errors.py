"""Failure taxonomy for the report-analysis pipeline."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures reported to the API caller as ``{error, details?}``."""

    code = "pipeline_error"
    http_status = 500
    message = "Failed to process the file"

    def __init__(self, details: str | None = None):
        super().__init__(details or self.message)
        self.details = details

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ConfigurationError(PipelineError):
    """Raised when GEMINI_API_KEY is missing. Fatal until an operator fixes it."""

    code = "configuration_error"
    message = (
        "Gemini API key not configured. "
        "Please add GEMINI_API_KEY to your environment or backend/.env file."
    )


class NoFileError(PipelineError):
    """Raised when the multipart form carries no usable ``file`` field."""

    code = "no_file"
    http_status = 400
    message = "No file uploaded"


class ModelInvocationError(PipelineError):
    """Raised when the model call (and any fallback) failed. Carries the original cause."""

    code = "model_invocation_error"

    def __init__(self, cause: BaseException, *, mode: str = "direct"):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
        self.mode = mode


class ExtractionError(Exception):
    """Raised when a PDF has no usable text layer. Never surfaced to API callers."""
