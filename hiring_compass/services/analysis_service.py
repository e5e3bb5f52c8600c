from __future__ import annotations

import asyncio
import logging
import time
from functools import lru_cache
from typing import Any, Callable, Protocol

from pydantic import ValidationError

from hiring_compass.core.config import settings
from hiring_compass.core.errors import (
    AnalysisError,
    AnalysisTimeoutError,
    InvalidSchemaError,
    UnexpectedAnalysisError,
)
from hiring_compass.schemas.analysis import AnalysisResult, MarketPulse
from hiring_compass.scoring import (
    build_improvement_plan,
    build_recruiter_perspective,
    score_resume,
    validate_analysis_result,
)
from hiring_compass.services.ai_analysis import ai_analysis_enabled, request_ai_analysis
from hiring_compass.services.market_pulse import MarketPulseFetcher

logger = logging.getLogger(__name__)

Scorer = Callable[[str, str, str], AnalysisResult]
AIProducer = Callable[[str, str, str], Any]


class PulseFetcher(Protocol):
    async def fetch(self, job_role: str, company: str) -> MarketPulse | None: ...


def _result_from_ai_payload(payload: dict[str, Any], job_role: str, company: str) -> AnalysisResult:
    data = dict(payload)
    data.pop("marketPulse", None)
    data["overallScore"] = int(round(data["overallScore"]))
    if "improvementPlan" not in data:
        data["improvementPlan"] = build_improvement_plan(job_role, company).model_dump(by_alias=True)
    if not isinstance(data.get("recruiterPerspective"), str) or not data["recruiterPerspective"].strip():
        data["recruiterPerspective"] = build_recruiter_perspective(
            data["overallScore"],
            [str(item) for item in data.get("keyStrengths", [])],
            [str(item) for item in data.get("keyGaps", [])],
            job_role,
            company,
        )
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or "result"
        raise InvalidSchemaError(field, first.get("msg", "does not match the analysis model")) from exc


class AnalysisService:
    """Score a resume, then try to attach market pulse data within a time budget."""

    def __init__(
        self,
        *,
        fetcher: PulseFetcher | None,
        enrichment_timeout_s: float = 8.0,
        scorer: Scorer = score_resume,
        ai_producer: AIProducer | None = None,
    ):
        self._fetcher = fetcher
        self._enrichment_timeout_s = enrichment_timeout_s
        self._scorer = scorer
        self._ai_producer = ai_producer

    async def analyze(self, resume_text: str, job_role: str, company: str) -> AnalysisResult:
        result = await self._base_result(resume_text, job_role, company)
        validate_analysis_result(result.model_dump(mode="json", by_alias=True))

        market_pulse = await self._fetch_market_pulse(job_role, company)
        if market_pulse is not None:
            result.market_pulse = market_pulse
        return result

    async def analyze_with_deadline(
        self,
        resume_text: str,
        job_role: str,
        company: str,
        *,
        deadline_s: float,
    ) -> AnalysisResult:
        try:
            return await asyncio.wait_for(self.analyze(resume_text, job_role, company), timeout=deadline_s)
        except asyncio.TimeoutError as exc:
            logger.warning("analysis_deadline_exceeded deadline_s=%s role=%s", deadline_s, job_role)
            raise AnalysisTimeoutError("Analysis took too long. Please try again.") from exc

    async def _base_result(self, resume_text: str, job_role: str, company: str) -> AnalysisResult:
        if self._ai_producer is not None:
            try:
                payload = await asyncio.to_thread(self._ai_producer, resume_text, job_role, company)
                if payload is not None:
                    validate_analysis_result(payload)
                    return _result_from_ai_payload(payload, job_role, company)
            except AnalysisError:
                raise
            except Exception as exc:
                logger.exception("ai_analysis_failed role=%s", job_role)
                raise UnexpectedAnalysisError("Failed to analyze resume.") from exc
            logger.info("ai_analysis_unavailable fallback=heuristic")

        try:
            return self._scorer(resume_text, job_role, company)
        except AnalysisError:
            raise
        except Exception as exc:
            logger.exception("heuristic_scoring_failed role=%s", job_role)
            raise UnexpectedAnalysisError("Failed to analyze resume.") from exc

    async def _fetch_market_pulse(self, job_role: str, company: str) -> MarketPulse | None:
        if self._fetcher is None:
            return None
        started = time.perf_counter()
        try:
            market_pulse = await asyncio.wait_for(
                self._fetcher.fetch(job_role, company),
                timeout=self._enrichment_timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning("market_pulse_timeout timeout_s=%s", self._enrichment_timeout_s)
            return None
        except Exception as exc:  # noqa: BLE001 - enrichment is optional
            logger.warning("market_pulse_unexpected_error: %s", exc)
            return None
        logger.info(
            "market_pulse_resolved latency_ms=%s attached=%s",
            int((time.perf_counter() - started) * 1000),
            market_pulse is not None,
        )
        return market_pulse


@lru_cache(maxsize=1)
def get_analysis_service() -> AnalysisService:
    return AnalysisService(
        fetcher=MarketPulseFetcher.from_settings(settings),
        enrichment_timeout_s=settings.market_pulse_timeout_s,
        ai_producer=request_ai_analysis if ai_analysis_enabled() else None,
    )
