from __future__ import annotations

from typing import Any

from pydantic import Field

from hiring_compass.schemas.analysis import CamelModel


class HistoryItem(CamelModel):
    id: str
    timestamp: int = Field(ge=0)
    job_role: str
    company: str
    overall_score: int | None = None
    resume_preview: str = ""
    full_data: dict[str, Any] = Field(default_factory=dict)


class HistorySaveRequest(CamelModel):
    job_role: str = ""
    company: str = ""
    resume_text: str = ""
    analysis_result: dict[str, Any] = Field(default_factory=dict)


class HistoryStatistics(CamelModel):
    total_items: int = Field(ge=0)
    oldest_analysis: int | None = None
    newest_analysis: int | None = None
    average_score: int = Field(default=0, ge=0, le=100)
    companies_analyzed: int = Field(ge=0)
    roles_analyzed: int = Field(ge=0)
