from __future__ import annotations

import json
from typing import Any
from urllib import error as urlerror
from urllib import parse, request

from app.infra.ports.llm import LLMPort

_GOOGLE_AI_BASE = "https://generativelanguage.googleapis.com/v1beta"
_TYPE_MAP = {
    "object": "OBJECT",
    "array": "ARRAY",
    "string": "STRING",
    "number": "NUMBER",
    "integer": "INTEGER",
    "boolean": "BOOLEAN",
    "null": "NULL",
}


def _normalize_schema_type(type_value: object) -> tuple[str | None, bool]:
    if isinstance(type_value, str):
        mapped = _TYPE_MAP.get(type_value.lower())
        return mapped, False

    if isinstance(type_value, list):
        types = [item for item in type_value if isinstance(item, str)]
        nullable = any(item.lower() == "null" for item in types)
        non_null = [item for item in types if item.lower() != "null"]
        if not non_null:
            return None, nullable
        mapped = _TYPE_MAP.get(non_null[0].lower())
        return mapped, nullable

    return None, False


def _to_gemini_response_schema(node: object) -> dict:
    """Convert JSON Schema into the responseSchema subset Gemini REST accepts.

    Keys such as ``$schema``, ``$id`` and ``title`` are dropped; for union
    types the first non-null member wins.
    """
    if not isinstance(node, dict):
        return {}

    out: dict[str, object] = {}
    mapped_type, nullable = _normalize_schema_type(node.get("type"))
    if mapped_type:
        out["type"] = mapped_type
    if nullable:
        out["nullable"] = True
    elif isinstance(node.get("nullable"), bool):
        out["nullable"] = node["nullable"]

    if isinstance(node.get("description"), str):
        out["description"] = node["description"]
    if isinstance(node.get("format"), str):
        out["format"] = node["format"]
    if isinstance(node.get("enum"), list):
        out["enum"] = node["enum"]
    if isinstance(node.get("required"), list):
        out["required"] = [item for item in node["required"] if isinstance(item, str)]

    properties = node.get("properties")
    if isinstance(properties, dict):
        out["properties"] = {
            key: _to_gemini_response_schema(value)
            for key, value in properties.items()
            if isinstance(key, str)
        }

    items = node.get("items")
    if isinstance(items, dict):
        out["items"] = _to_gemini_response_schema(items)
    elif isinstance(items, list) and items and isinstance(items[0], dict):
        out["items"] = _to_gemini_response_schema(items[0])

    return out


def _extract_text(parsed: dict[str, Any]) -> str:
    feedback = parsed.get("promptFeedback") or {}
    block_reason = feedback.get("blockReason")
    if block_reason:
        raise RuntimeError(f"Gemini blocked the prompt ({block_reason})")

    candidates = parsed.get("candidates") or []
    if not candidates:
        raise RuntimeError("Gemini response has no candidates")

    candidate = candidates[0]
    parts = ((candidate.get("content") or {}).get("parts") or [])
    if not parts:
        finish_reason = candidate.get("finishReason") or "unknown"
        raise RuntimeError(f"Gemini response has no content parts (finishReason={finish_reason})")

    text = "".join(part.get("text", "") for part in parts if isinstance(part.get("text"), str))
    if not text.strip():
        raise RuntimeError("Gemini response parts do not contain text")
    return text


class GeminiLLM(LLMPort):
    provider_name = "gemini"

    def __init__(self, *, api_key: str, model_name: str, timeout_seconds: int = 60):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = max(3, int(timeout_seconds))

    @staticmethod
    def _is_timeout_error(exc: Exception) -> bool:
        reason = getattr(exc, "reason", None)
        message = f"{exc} {reason or ''}".lower()
        return isinstance(exc, TimeoutError) or isinstance(reason, TimeoutError) or "timed out" in message

    @staticmethod
    def _generation_config(schema: dict | None) -> dict:
        config: dict[str, object] = {"temperature": 0}
        if schema:
            config["responseMimeType"] = "application/json"
            config["responseSchema"] = _to_gemini_response_schema(schema)
        return config

    def generate_text(
        self,
        *,
        prompt: str,
        schema: dict | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": self._generation_config(schema),
        }
        return self._request_text(payload=payload, system_prompt=system_prompt, model=model)

    def generate_text_from_media(
        self,
        *,
        prompt: str,
        media_base64: str,
        media_mime_type: str,
        schema: dict | None = None,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {
                            "inlineData": {
                                "mimeType": media_mime_type,
                                "data": media_base64,
                            }
                        },
                        {"text": prompt},
                    ],
                }
            ],
            "generationConfig": self._generation_config(schema),
        }
        return self._request_text(payload=payload, system_prompt=system_prompt, model=model)

    def build_request(self, *, payload: dict, system_prompt: str | None, model: str | None) -> request.Request:
        model_name = model or self.model_name
        url = (
            f"{_GOOGLE_AI_BASE}/models/{parse.quote(model_name)}:generateContent"
            f"?key={parse.quote(self.api_key)}"
        )
        payload = dict(payload)
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt[:6000]}]}

        return request.Request(
            url=url,
            method="POST",
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def _request_text(self, *, payload: dict, system_prompt: str | None, model: str | None) -> str:
        req = self.build_request(payload=payload, system_prompt=system_prompt, model=model)

        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as resp:
                body = resp.read().decode("utf-8")
        except urlerror.HTTPError as exc:
            detail = ""
            try:
                detail = exc.read().decode("utf-8")
            except Exception:
                detail = str(exc)
            raise RuntimeError(f"Gemini API error ({exc.code}): {detail}") from exc
        except urlerror.URLError as exc:
            if self._is_timeout_error(exc):
                raise RuntimeError(f"Gemini API timeout (timeout={self.timeout_seconds}s).") from exc
            raise RuntimeError(f"Gemini API connection error: {exc}") from exc
        except TimeoutError as exc:
            raise RuntimeError(f"Gemini API timeout (timeout={self.timeout_seconds}s).") from exc

        try:
            parsed = json.loads(body)
        except json.JSONDecodeError as exc:
            raise RuntimeError("Gemini API returned a non-JSON envelope") from exc
        if not isinstance(parsed, dict):
            raise RuntimeError("Gemini API returned an unexpected envelope")
        return _extract_text(parsed)
