"""ResponseParser: raw model text -> AnalysisResult, or the sentinel when it cannot be decoded.

Validation runs in two passes, JSON Schema first and then the Pydantic
models, so a structurally wrong payload is reported against the schema
the model was asked to follow.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

import jsonschema
from pydantic import ValidationError

from app.domain.report import AnalysisResult, load_schema, sentinel_result

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")


@dataclass(frozen=True)
class DecodeFailure:
    sentinel: AnalysisResult
    raw_text: str
    reason: str


def strip_code_fences(text: str) -> str:
    """Remove leading/trailing ``` markers (with optional language tag), however many layers."""
    cleaned = (text or "").strip()
    while True:
        stripped = _FENCE_OPEN.sub("", cleaned, count=1)
        stripped = _FENCE_CLOSE.sub("", stripped, count=1).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def decode(text: str) -> AnalysisResult:
    """Strict decoding. Raises ValueError with a short reason on any mismatch."""
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON: {exc.msg} at line {exc.lineno} column {exc.colno}") from exc

    try:
        jsonschema.validate(instance=data, schema=load_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ValueError(f"schema mismatch at {location}: {exc.message}") from exc

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"model validation failed: {exc.errors()[0].get('msg', exc)}") from exc


def parse(raw_text: str, *, request_id: str | None = None) -> AnalysisResult | DecodeFailure:
    try:
        return decode(raw_text)
    except RecursionError:
        reason = "invalid JSON: nesting too deep"
    except ValueError as exc:
        reason = str(exc)

    logger.error("[%s] Failed to parse AI response (%s): %s", request_id or "-", reason, (raw_text or "")[:500])
    return DecodeFailure(sentinel=sentinel_result(), raw_text=raw_text, reason=reason)
