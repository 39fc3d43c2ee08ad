"""AnalysisPipeline: upload -> model -> structured report.

States run in a fixed order::

    precondition -> input -> invoke -> [fallback] -> parse -> done
                                    \\-> failed

Everything before the model call fails hard (``ConfigurationError``,
``NoFileError``). After the model answered, decoding problems degrade to
the sentinel result instead of failing the request.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from app.application.encoding import encode
from app.application.fallback import FallbackExtractor
from app.application.invoker import DEFAULT_TIMEOUT_SECONDS, ModelInvoker
from app.application.parsing import DecodeFailure, parse
from app.application.prompts import SYSTEM_PROMPT, build_prompt
from app.core.errors import ConfigurationError, ExtractionError, ModelInvocationError, PipelineError
from app.domain.models import (
    AnalysisDegraded,
    AnalysisFailure,
    AnalysisOutcome,
    AnalysisSuccess,
    PipelineState,
    PromptMode,
    UploadedDocument,
)
from app.domain.report import load_schema
from app.infra.ports.llm import LLMPort
from app.utils.ids import new_public_id

logger = logging.getLogger(__name__)


class _Run:
    def __init__(self, request_id: str):
        self.request_id = request_id
        self.states: list[PipelineState] = []

    def enter(self, state: PipelineState) -> None:
        self.states.append(state)
        logger.debug("[%s] state=%s", self.request_id, state)


class AnalysisPipeline:
    def __init__(
        self,
        *,
        api_key_provider: Callable[[], str | None],
        llm_factory: Callable[[str], LLMPort],
        fallback: FallbackExtractor,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        schema: dict[str, Any] | None = None,
    ):
        self.api_key_provider = api_key_provider
        self.llm_factory = llm_factory
        self.fallback = fallback
        self.timeout_seconds = timeout_seconds
        self.schema = schema if schema is not None else load_schema()

    def analyze(self, document: UploadedDocument | None, *, request_id: str | None = None) -> AnalysisOutcome:
        run = _Run(request_id or new_public_id("req_"))

        try:
            api_key = self._precondition(run)
            content, media_type = self._input(run, document)
            raw_text, mode = self._invoke(run, api_key, content, media_type)
        except PipelineError as exc:
            run.enter("failed")
            logger.error("[%s] Analysis failed (%s): %s", run.request_id, exc.code, exc)
            return AnalysisFailure(error=exc, request_id=run.request_id, states=tuple(run.states))

        return self._parse(run, raw_text, mode)

    def _precondition(self, run: _Run) -> str:
        run.enter("precondition")
        api_key = self.api_key_provider()
        if not api_key:
            logger.error("[%s] Missing API key", run.request_id)
            raise ConfigurationError()
        return api_key

    def _input(self, run: _Run, document: UploadedDocument | None) -> tuple[bytes, str]:
        run.enter("input")
        content, media_type = encode(document)
        logger.info(
            "[%s] File received: %s, size=%d, type=%s",
            run.request_id,
            document.filename if document else None,
            len(content),
            media_type,
        )
        return content, media_type

    def _invoke(self, run: _Run, api_key: str, content: bytes, media_type: str) -> tuple[str, PromptMode]:
        run.enter("invoke")
        try:
            llm = self.llm_factory(api_key)
        except Exception as exc:
            raise ModelInvocationError(exc) from exc

        invoker = ModelInvoker(
            llm=llm,
            timeout_seconds=self.timeout_seconds,
            schema=self.schema,
            system_prompt=SYSTEM_PROMPT,
            request_id=run.request_id,
        )

        try:
            return invoker.invoke_direct(content, media_type, build_prompt("direct")), "direct"
        except ModelInvocationError as direct_error:
            logger.error("[%s] Multimodal call failed: %s", run.request_id, direct_error)
            if not self.fallback.is_eligible(media_type):
                raise
            return self._fallback(run, invoker, content, direct_error), "text-fallback"

    def _fallback(
        self,
        run: _Run,
        invoker: ModelInvoker,
        content: bytes,
        direct_error: ModelInvocationError,
    ) -> str:
        run.enter("fallback")
        logger.info("[%s] Falling back to text extraction", run.request_id)
        try:
            text = self.fallback.extract_text(content, request_id=run.request_id)
            logger.info("[%s] Text extracted length: %d", run.request_id, len(text))
            return invoker.invoke_text(text, build_prompt("text-fallback", text))
        except (ExtractionError, ModelInvocationError) as fallback_error:
            # The direct-call error stays the reported cause.
            logger.error("[%s] Text fallback failed: %s", run.request_id, fallback_error)
            raise direct_error

    def _parse(self, run: _Run, raw_text: str, mode: PromptMode) -> AnalysisOutcome:
        run.enter("parse")
        logger.info("[%s] Model response received (first 100 chars): %s", run.request_id, raw_text[:100])
        parsed = parse(raw_text, request_id=run.request_id)
        run.enter("done")

        if isinstance(parsed, DecodeFailure):
            return AnalysisDegraded(
                result=parsed.sentinel,
                raw_response=parsed.raw_text,
                reason=parsed.reason,
                mode=mode,
                request_id=run.request_id,
                states=tuple(run.states),
            )

        logger.info("[%s] Analysis complete: mode=%s results=%d", run.request_id, mode, len(parsed.results))
        return AnalysisSuccess(result=parsed, mode=mode, request_id=run.request_id, states=tuple(run.states))
