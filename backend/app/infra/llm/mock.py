from __future__ import annotations

import json
from typing import Any

from app.infra.ports.llm import LLMPort

_SAMPLE_REPORT: dict[str, Any] = {
    "summary": (
        "Most markers are within range. Vitamin D is low and LDL cholesterol is elevated, "
        "both worth discussing with a clinician."
    ),
    "score": 78,
    "critical_items": 2,
    "results": [
        {
            "name": "Hemoglobin",
            "value": "14.2",
            "unit": "g/dL",
            "status": "normal",
            "range": "13.2-16.6",
            "insight": "Optimal oxygen transport capacity.",
            "category": "Blood Count",
        },
        {
            "name": "Vitamin D",
            "value": "18",
            "unit": "ng/mL",
            "status": "low",
            "range": "30-100",
            "insight": "Low vitamin D can affect bone health and immunity.",
            "category": "Vitamins",
        },
        {
            "name": "LDL Cholesterol",
            "value": "162",
            "unit": "mg/dL",
            "status": "high",
            "range": "<100",
            "insight": "Elevated LDL raises long-term cardiovascular risk.",
            "category": "Lipids",
        },
    ],
}


class MockLLM(LLMPort):
    """Offline stand-in that answers every prompt with the same three-marker report."""

    provider_name = "mock"
    model_name = "mock-llm-v1"

    def generate_text(
        self,
        *,
        prompt: str,
        schema: dict[str, Any] | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        return json.dumps(_SAMPLE_REPORT)

    def generate_text_from_media(
        self,
        *,
        prompt: str,
        media_base64: str,
        media_mime_type: str,
        schema: dict[str, Any] | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        return json.dumps(_SAMPLE_REPORT)
