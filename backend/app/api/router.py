from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from app.api.dependencies import provide_analysis_pipeline
from app.api.schemas.analysis import AnalysisResponse, ErrorResponse
from app.application.analysis import AnalysisPipeline
from app.domain.models import AnalysisDegraded, AnalysisFailure, AnalysisOutcome, UploadedDocument
from app.utils.ids import new_public_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])

_UPLOAD_BODY = {
    "required": False,
    "content": {
        "multipart/form-data": {
            "schema": {
                "type": "object",
                "properties": {"file": {"type": "string", "format": "binary"}},
            }
        }
    },
}


async def _read_upload(file: object) -> UploadedDocument | None:
    # A text value under "file" counts as no upload.
    if not isinstance(file, UploadFile):
        return None
    payload = await file.read()
    return UploadedDocument(content=payload, media_type=file.content_type, filename=file.filename)


def outcome_to_response(outcome: AnalysisOutcome) -> tuple[int, dict]:
    if isinstance(outcome, AnalysisFailure):
        return outcome.error.http_status, ErrorResponse(**outcome.error.to_payload()).model_dump(
            exclude_none=True
        )
    if isinstance(outcome, AnalysisDegraded):
        body = AnalysisResponse(**outcome.result.model_dump(), rawResponse=outcome.raw_response)
        return 200, body.model_dump()
    return 200, outcome.result.model_dump()


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={"requestBody": _UPLOAD_BODY},
)
async def analyze_report(
    request: Request,
    response: Response,
    pipeline: AnalysisPipeline = Depends(provide_analysis_pipeline),
):
    request_id = new_public_id("req_")
    logger.info("[%s] Analyze request started", request_id)

    form = await request.form()
    document = await _read_upload(form.get("file"))
    outcome = await run_in_threadpool(pipeline.analyze, document, request_id=request_id)

    status_code, body = outcome_to_response(outcome)
    headers = {"X-Request-ID": outcome.request_id}
    if status_code != 200:
        return JSONResponse(status_code=status_code, content=body, headers=headers)

    response.headers.update(headers)
    return body
