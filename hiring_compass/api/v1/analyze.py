import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status

from hiring_compass.core.config import settings
from hiring_compass.core.errors import AnalysisError, ResumeInputError
from hiring_compass.core.rate_limit import rate_limit
from hiring_compass.core.security import require_api_token
from hiring_compass.schemas.analysis import AnalyzeRequest, AnalyzeResponse, ResponseMetadata
from hiring_compass.services.analysis_service import AnalysisService, get_analysis_service
from hiring_compass.services.resume_input import AnalysisInput, prepare_file_input, prepare_text_input

logger = logging.getLogger(__name__)

router = APIRouter()


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or uuid.uuid4().hex


def _input_error(exc: ResumeInputError, request_id: str) -> HTTPException:
    logger.warning("analysis_input_rejected request_id=%s status=%s: %s", request_id, exc.status_code, exc)
    return HTTPException(status_code=exc.status_code, detail=str(exc))


async def _run_analysis(request_id: str, analysis_input: AnalysisInput, service: AnalysisService) -> AnalyzeResponse:
    started = time.perf_counter()
    logger.info(
        "analysis_started request_id=%s role=%s company=%s chars=%s",
        request_id,
        analysis_input.job_role,
        analysis_input.company,
        len(analysis_input.resume_text),
    )
    try:
        result = await service.analyze_with_deadline(
            analysis_input.resume_text,
            analysis_input.job_role,
            analysis_input.company,
            deadline_s=settings.analyze_timeout_s,
        )
    except AnalysisError as exc:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            "analysis_failed request_id=%s kind=%s duration_ms=%s: %s",
            request_id,
            exc.kind,
            duration_ms,
            exc,
        )
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "analysis_completed request_id=%s score=%s market_pulse=%s duration_ms=%s",
        request_id,
        result.overall_score,
        result.market_pulse is not None,
        duration_ms,
    )
    return AnalyzeResponse(
        data=result,
        metadata=ResponseMetadata(
            request_id=request_id,
            processing_time_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(),
        ),
    )


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_api_token)],
)
@rate_limit(settings.analyze_rate_limit)
async def analyze_resume(
    request: Request,
    payload: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = _request_id(request)
    try:
        analysis_input = prepare_text_input(payload.resume_text, payload.job_role, payload.company)
    except ResumeInputError as exc:
        raise _input_error(exc, request_id) from exc
    return await _run_analysis(request_id, analysis_input, service)


@router.post(
    "/analyze/file",
    response_model=AnalyzeResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_api_token)],
)
@rate_limit(settings.analyze_rate_limit)
async def analyze_resume_file(
    request: Request,
    resume_file: UploadFile = File(..., alias="resumeFile"),
    job_role: str = Form(default="", alias="jobRole"),
    company: str = Form(default="", alias="company"),
    service: AnalysisService = Depends(get_analysis_service),
):
    request_id = _request_id(request)
    filename = resume_file.filename or "resume"

    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await resume_file.read(1024 * 64)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File is too large. Maximum file size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    content = b"".join(chunks)
    logger.info("analysis_file_received request_id=%s filename=%s bytes=%s", request_id, filename, total)

    try:
        analysis_input = prepare_file_input(filename, content, resume_file.content_type, job_role, company)
    except ResumeInputError as exc:
        raise _input_error(exc, request_id) from exc
    return await _run_analysis(request_id, analysis_input, service)
