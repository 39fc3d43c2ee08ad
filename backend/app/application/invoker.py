"""ModelInvoker: the two call shapes over an LLMPort, bounded by a wall-clock timeout."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

from app.application.encoding import to_base64
from app.core.errors import ModelInvocationError
from app.domain.models import AnalysisRequest
from app.infra.ports.llm import LLMPort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0


class ModelInvoker:
    def __init__(
        self,
        *,
        llm: LLMPort,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        schema: dict[str, Any] | None = None,
        system_prompt: str | None = None,
        request_id: str | None = None,
    ):
        self.llm = llm
        self.timeout_seconds = timeout_seconds
        self.schema = schema
        self.system_prompt = system_prompt
        self.request_id = request_id or "-"

    def invoke_direct(self, content: bytes, media_type: str, prompt: str) -> str:
        req = AnalysisRequest(
            mode="direct",
            media_type=media_type,
            prompt=prompt,
            media_base64=to_base64(content),
        )
        return self.invoke(req)

    def invoke_text(self, text: str, prompt: str) -> str:
        # Text is already inside the prompt; kept on the request as its one payload.
        req = AnalysisRequest(
            mode="text-fallback",
            media_type="text/plain",
            prompt=prompt,
            extracted_text=text,
        )
        return self.invoke(req)

    def invoke(self, req: AnalysisRequest) -> str:
        model_name = getattr(self.llm, "model_name", None) or "llm"
        started = time.perf_counter()

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="model-invoke")
        try:
            future = executor.submit(self._call, req)
            text = future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError as exc:
            logger.warning(
                "[%s] Model call timed out: mode=%s model=%s timeout=%.1fs",
                self.request_id,
                req.mode,
                model_name,
                self.timeout_seconds,
            )
            raise ModelInvocationError(
                TimeoutError(f"Model call exceeded {self.timeout_seconds:g}s"),
                mode=req.mode,
            ) from exc
        except Exception as exc:
            raise ModelInvocationError(exc, mode=req.mode) from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        elapsed_ms = (time.perf_counter() - started) * 1000
        if not isinstance(text, str) or not text.strip():
            raise ModelInvocationError(RuntimeError("Model returned an empty response"), mode=req.mode)

        logger.info(
            "[%s] Model call ok: mode=%s model=%s elapsed_ms=%.0f chars=%d",
            self.request_id,
            req.mode,
            model_name,
            elapsed_ms,
            len(text),
        )
        return text

    def _call(self, req: AnalysisRequest) -> str:
        if req.media_base64 is not None:
            return self.llm.generate_text_from_media(
                prompt=req.prompt,
                media_base64=req.media_base64,
                media_mime_type=req.media_type,
                schema=self.schema,
                system_prompt=self.system_prompt,
            )
        return self.llm.generate_text(
            prompt=req.prompt,
            schema=self.schema,
            system_prompt=self.system_prompt,
        )
