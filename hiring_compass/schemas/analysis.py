from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MarketFit = Literal["excellent", "strong", "moderate", "weak", "poor"]
DemandLevel = Literal["high", "moderate", "low"]
BreakdownCategory = Literal[
    "Technical Skills",
    "Experience Level",
    "Role Alignment",
    "Company Fit",
    "Market Demand",
]

BREAKDOWN_CATEGORIES: tuple[str, ...] = (
    "Technical Skills",
    "Experience Level",
    "Role Alignment",
    "Company Fit",
    "Market Demand",
)
MARKET_FIT_VALUES: tuple[str, ...] = ("excellent", "strong", "moderate", "weak", "poor")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreBreakdown(CamelModel):
    category: BreakdownCategory
    score: float = Field(ge=0, le=100)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = Field(min_length=1)


class WeeklyMilestone(CamelModel):
    week: int = Field(ge=1, le=4)
    title: str
    goals: list[str]
    resources: list[str]
    time_commitment: str


class ImprovementPlan(CamelModel):
    title: str
    duration: str
    overview: str
    focus_areas: list[str]
    weeks: list[WeeklyMilestone] = Field(min_length=4, max_length=4)
    success_metrics: list[str]


class SalaryRange(CamelModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)
    currency: str = "USD"


class MarketPulse(CamelModel):
    demand_level: DemandLevel
    trending_skills: list[str] = Field(default_factory=list, max_length=5)
    market_salary_range: SalaryRange | None = None
    hiring_outlook: str
    top_companies: list[str] = Field(default_factory=list, max_length=3)
    last_updated: str


class AnalysisResult(CamelModel):
    overall_score: int = Field(ge=0, le=100)
    confidence: float = Field(ge=0.0, le=1.0)
    market_fit: MarketFit
    breakdown: list[ScoreBreakdown] = Field(min_length=5, max_length=5)
    key_strengths: list[str] = Field(min_length=2, max_length=4)
    key_gaps: list[str] = Field(min_length=1, max_length=3)
    recommended_actions: list[str] = Field(min_length=2, max_length=3)
    improvement_plan: ImprovementPlan
    recruiter_perspective: str
    market_pulse: MarketPulse | None = None
    timestamp: str

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready camelCase dict; an absent market pulse is left out entirely."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalyzeRequest(CamelModel):
    resume_text: str = ""
    job_role: str = ""
    company: str = ""


class ResponseMetadata(CamelModel):
    request_id: str
    processing_time_ms: int = Field(ge=0)
    timestamp: str


class AnalyzeResponse(CamelModel):
    success: Literal[True] = True
    data: AnalysisResult
    metadata: ResponseMetadata
