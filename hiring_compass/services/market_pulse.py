from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
from pydantic import BaseModel, Field

from hiring_compass.core.config import Settings
from hiring_compass.core.errors import EnrichmentUnavailable
from hiring_compass.core.scoring_config import get_scoring_value
from hiring_compass.schemas.analysis import DemandLevel, MarketPulse, SalaryRange

logger = logging.getLogger(__name__)

SERPAPI_SEARCH_URL = "https://serpapi.com/search"

SKILL_KEYWORDS: tuple[str, ...] = (
    "python", "javascript", "typescript", "java", "c++", "golang", "rust",
    "react", "angular", "vue", "nodejs", "aws", "azure", "gcp", "kubernetes",
    "docker", "sql", "mongodb", "machine learning", "ai", "leadership",
    "communication", "agile", "scrum", "git", "rest api", "graphql",
)
_POSTING_HINTS = ("job", "hire", "apply")
_SALARY_RANGE_RE = re.compile(r"\$(\d{2,3})k?\s*[-–]\s*\$?(\d{2,3})k?\b", re.IGNORECASE)

_JOB_RESULTS_SCANNED = 5
_SALARY_RESULTS_SCANNED = 3
_SKILL_RESULTS_SCANNED = 5


class JobMarketSignal(BaseModel):
    posting_volume: int = Field(default=0, ge=0)
    top_companies: list[str] = Field(default_factory=list)


def classify_demand_level(posting_volume: int) -> DemandLevel:
    if posting_volume >= int(get_scoring_value("market_pulse.demand.high", 20)):
        return "high"
    if posting_volume >= int(get_scoring_value("market_pulse.demand.moderate", 10)):
        return "moderate"
    return "low"


def build_hiring_outlook(signal: JobMarketSignal, job_role: str) -> str:
    level = classify_demand_level(signal.posting_volume)
    if level == "high":
        activity = "strong hiring activity with high competition. "
    elif level == "moderate":
        activity = "moderate hiring activity. "
    else:
        activity = "limited hiring activity. "

    outlook = f"{job_role} market shows {activity}"
    if signal.top_companies:
        outlook += f"Top companies hiring: {', '.join(signal.top_companies)}. "
    return outlook + "Focus on highlighted trending skills and tailor your application for each role."


def parse_job_market(results: list[dict[str, Any]]) -> JobMarketSignal:
    posting_volume = 0
    for result in results:
        snippet = str(result.get("snippet") or "").lower()
        if any(hint in snippet for hint in _POSTING_HINTS):
            posting_volume += 1

    companies: list[str] = []
    for result in results[:_JOB_RESULTS_SCANNED]:
        title = str(result.get("title") or "")
        if "-" not in title:
            continue
        parts = [part.strip() for part in title.split("-")]
        candidate = parts[-1]
        if candidate and candidate not in companies:
            companies.append(candidate)

    max_companies = int(get_scoring_value("market_pulse.max_top_companies", 3))
    return JobMarketSignal(posting_volume=posting_volume, top_companies=companies[:max_companies])


def parse_salary_range(results: list[dict[str, Any]]) -> SalaryRange | None:
    min_salary: int | None = None
    max_salary: int | None = None
    for result in results[:_SALARY_RESULTS_SCANNED]:
        match = _SALARY_RANGE_RE.search(str(result.get("snippet") or ""))
        if not match:
            continue
        low = int(match.group(1)) * 1000
        high = int(match.group(2)) * 1000
        if min_salary is None or low < min_salary:
            min_salary = low
        if max_salary is None or high > max_salary:
            max_salary = high

    if min_salary is None or max_salary is None or max_salary <= min_salary:
        return None
    return SalaryRange(min=min_salary, max=max_salary, currency="USD")


def parse_trending_skills(results: list[dict[str, Any]]) -> list[str]:
    skills: list[str] = []
    for result in results[:_SKILL_RESULTS_SCANNED]:
        text = f"{result.get('title') or ''} {result.get('snippet') or ''}".strip().lower()
        if not text:
            continue
        for skill in SKILL_KEYWORDS:
            if skill in text and skill not in skills:
                skills.append(skill)
    return skills


class MarketPulseFetcher:
    """Best-effort SerpAPI lookups for demand, salary and trending skills.

    ``fetch`` never raises. Each of the three lookups degrades to a neutral
    value on its own, so one failing search still leaves the others in the
    result. ``None`` is returned only when the feature is off, the API key is
    missing, or something outside the individual lookups breaks.
    """

    def __init__(
        self,
        *,
        enabled: bool,
        api_key: str | None,
        request_timeout_s: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
        now: Callable[[], datetime] | None = None,
    ):
        self._enabled = enabled
        self._api_key = (api_key or "").strip()
        self._request_timeout_s = request_timeout_s
        self._transport = transport
        self._now = now or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(cls, config: Settings) -> "MarketPulseFetcher":
        return cls(
            enabled=config.market_pulse_enabled,
            api_key=config.serpapi_api_key,
            request_timeout_s=config.market_pulse_request_timeout_s,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._request_timeout_s,
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch(self, job_role: str, company: str) -> MarketPulse | None:
        if not self._enabled:
            logger.info("market_pulse_skipped reason=disabled")
            return None
        if not self._api_key:
            logger.warning("market_pulse_skipped reason=missing_serpapi_key")
            return None

        try:
            async with self._client() as client:
                job_market, salary, skills = await asyncio.gather(
                    self._fetch_job_market(client, job_role, company),
                    self._fetch_salary(client, job_role),
                    self._fetch_trending_skills(client, job_role),
                )
            max_skills = int(get_scoring_value("market_pulse.max_trending_skills", 5))
            return MarketPulse(
                demand_level=classify_demand_level(job_market.posting_volume),
                trending_skills=skills[:max_skills],
                market_salary_range=salary,
                hiring_outlook=build_hiring_outlook(job_market, job_role),
                top_companies=job_market.top_companies,
                last_updated=self._now().isoformat(),
            )
        except Exception as exc:  # noqa: BLE001 - enrichment must never fail the analysis
            logger.warning("market_pulse_failed role=%s: %s", job_role, exc)
            return None

    async def _search(self, client: httpx.AsyncClient, params: dict[str, str]) -> list[dict[str, Any]]:
        query = {**params, "api_key": self._api_key, "engine": "google"}
        response = await client.get(SERPAPI_SEARCH_URL, params=query)
        if not response.is_success:
            raise EnrichmentUnavailable(f"SerpAPI returned status {response.status_code}")
        payload = response.json()
        results = payload.get("organic_results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            return []
        return [item for item in results if isinstance(item, dict)]

    async def _fetch_job_market(self, client: httpx.AsyncClient, job_role: str, company: str) -> JobMarketSignal:
        started = time.perf_counter()
        query = f"{job_role} jobs {company or ''}".strip()
        try:
            results = await self._search(client, {"q": query, "location": "United States"})
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "market_pulse_job_market_failed latency_ms=%s: %s",
                int((time.perf_counter() - started) * 1000),
                exc,
            )
            return JobMarketSignal()
        signal = parse_job_market(results)
        logger.info(
            "market_pulse_job_market latency_ms=%s postings=%s",
            int((time.perf_counter() - started) * 1000),
            signal.posting_volume,
        )
        return signal

    async def _fetch_salary(self, client: httpx.AsyncClient, job_role: str) -> SalaryRange | None:
        started = time.perf_counter()
        try:
            results = await self._search(client, {"q": f"{job_role} salary 2024 2025"})
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "market_pulse_salary_failed latency_ms=%s: %s",
                int((time.perf_counter() - started) * 1000),
                exc,
            )
            return None
        salary = parse_salary_range(results)
        logger.info(
            "market_pulse_salary latency_ms=%s found=%s",
            int((time.perf_counter() - started) * 1000),
            salary is not None,
        )
        return salary

    async def _fetch_trending_skills(self, client: httpx.AsyncClient, job_role: str) -> list[str]:
        started = time.perf_counter()
        try:
            results = await self._search(client, {"q": f"{job_role} required skills 2024 trending"})
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "market_pulse_skills_failed latency_ms=%s: %s",
                int((time.perf_counter() - started) * 1000),
                exc,
            )
            return []
        skills = parse_trending_skills(results)
        logger.info(
            "market_pulse_skills latency_ms=%s count=%s",
            int((time.perf_counter() - started) * 1000),
            len(skills),
        )
        return skills
