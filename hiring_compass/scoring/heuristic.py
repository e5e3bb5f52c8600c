from __future__ import annotations

import math
import random
from datetime import datetime, timezone
from typing import Callable, Protocol

from hiring_compass.core.scoring_config import get_scoring_value
from hiring_compass.schemas.analysis import AnalysisResult, MarketFit, ScoreBreakdown
from hiring_compass.scoring.signals import (
    ResumeSignals,
    extract_resume_signals,
    is_developer_role,
    is_engineering_role,
    is_senior_role,
)
from hiring_compass.scoring.templates import build_improvement_plan, build_recruiter_perspective


class RandomSource(Protocol):
    def random(self) -> float: ...


_default_rng = random.Random()


def _round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def _cfg(path: str, default: float) -> float:
    return float(get_scoring_value(path, default))


def compute_overall_score(signals: ResumeSignals, job_role: str) -> int:
    base = min(
        100.0,
        _cfg("overall.base_intercept", 40) + signals.word_count / _cfg("overall.words_per_point", 10),
    )
    boost = 0.0
    if signals.has_tech:
        boost += _cfg("overall.boosts.technology", 18)
    if signals.has_experience:
        boost += _cfg("overall.boosts.experience", 12)
    if signals.has_leadership and is_senior_role(job_role):
        boost += _cfg("overall.boosts.leadership", 10)
    return int(_round_half_up(max(0.0, min(100.0, base + boost))))


def compute_confidence(word_count: int) -> float:
    length_bonus = min(
        word_count / _cfg("confidence.words_for_full_bonus", 3000),
        _cfg("confidence.max_length_bonus", 0.3),
    )
    value = min(_cfg("confidence.cap", 0.95), _cfg("confidence.base", 0.6) + length_bonus)
    return _round_half_up(value, 2)


def market_fit_for_score(overall_score: float) -> MarketFit:
    if overall_score >= _cfg("market_fit.excellent", 80):
        return "excellent"
    if overall_score >= _cfg("market_fit.strong", 65):
        return "strong"
    if overall_score >= _cfg("market_fit.moderate", 50):
        return "moderate"
    if overall_score >= _cfg("market_fit.weak", 35):
        return "weak"
    return "poor"


def _jittered(base: float, span: float, rng: RandomSource) -> float:
    return _round_half_up(min(100.0, max(0.0, base + rng.random() * span)), 1)


def _signal_score(category_key: str, signal: bool, rng: RandomSource) -> float:
    branch = "with_signal" if signal else "without_signal"
    base = _cfg(f"breakdown.{category_key}.{branch}.base", 50)
    span = _cfg(f"breakdown.{category_key}.{branch}.jitter", 20)
    return _jittered(base, span, rng)


def _weighted_score(category_key: str, overall_score: int, rng: RandomSource) -> float:
    weight = _cfg(f"breakdown.{category_key}.overall_weight", 0.9)
    span = _cfg(f"breakdown.{category_key}.jitter", 10)
    return _jittered(overall_score * weight, span, rng)


def build_breakdown(
    signals: ResumeSignals,
    overall_score: int,
    job_role: str,
    company: str,
    rng: RandomSource,
) -> list[ScoreBreakdown]:
    if signals.has_tech and is_engineering_role(job_role):
        tech_reasoning = "Strong technical foundation visible in projects and tools listed."
    else:
        tech_reasoning = "Technical depth could be strengthened with more specific tool/framework mentions."

    if signals.has_experience:
        experience_reasoning = "Clear seniority progression demonstrated across roles."
    else:
        experience_reasoning = "Limited explicit experience timeframe data; consider adding years and milestones."

    alignment = "well" if overall_score > 70 else "partially"

    return [
        ScoreBreakdown(
            category="Technical Skills",
            score=_signal_score("technical_skills", signals.has_tech, rng),
            confidence=_cfg("breakdown.technical_skills.confidence", 0.85),
            reasoning=tech_reasoning,
        ),
        ScoreBreakdown(
            category="Experience Level",
            score=_signal_score("experience_level", signals.has_experience, rng),
            confidence=_cfg("breakdown.experience_level.confidence", 0.87),
            reasoning=experience_reasoning,
        ),
        ScoreBreakdown(
            category="Role Alignment",
            score=_weighted_score("role_alignment", overall_score, rng),
            confidence=_cfg("breakdown.role_alignment.confidence", 0.81),
            reasoning=f"Resume experience aligns {alignment} with {job_role} requirements.",
        ),
        ScoreBreakdown(
            category="Company Fit",
            score=_weighted_score("company_fit", overall_score, rng),
            confidence=_cfg("breakdown.company_fit.confidence", 0.73),
            reasoning=(
                f"Limited company-specific culture signals for {company} in provided resume; "
                "research company values."
            ),
        ),
        ScoreBreakdown(
            category="Market Demand",
            score=_signal_score("market_demand", signals.has_tech, rng),
            confidence=_cfg("breakdown.market_demand.confidence", 0.88),
            reasoning="Current market demand is favorable for stated skillset; positioning could emphasize impact.",
        ),
    ]


def build_key_strengths(signals: ResumeSignals) -> list[str]:
    return [
        "Strong technical foundation with modern tech stack"
        if signals.has_tech
        else "Clear communication and documentation skills",
        "Demonstrated career progression and growth",
        "Comprehensive project experience with measurable outcomes"
        if signals.word_count > 500
        else "Focused experience highlights",
    ]


def build_key_gaps(signals: ResumeSignals, job_role: str) -> list[str]:
    if not signals.has_tech and is_developer_role(job_role):
        depth_gap = "Limited technical depth for engineering role"
    else:
        depth_gap = "Cloud infrastructure experience not highlighted"
    if signals.has_leadership:
        leadership_gap = "Limited mention of team development and mentorship"
    else:
        leadership_gap = "No explicit leadership examples"
    return [depth_gap, leadership_gap]


def build_recommended_actions(company: str) -> list[str]:
    return [
        "Quantify impact: use metrics and results rather than responsibilities",
        f"Add research on {company} culture; tailor language to their values and mission",
        "Include certifications, side projects, or open-source contributions to strengthen candidacy",
    ]


def _recruiter_strengths(signals: ResumeSignals) -> list[str]:
    return [
        "Technical knowledge" if signals.has_tech else "Communication",
        "Career progression",
        "Project depth" if signals.word_count > 500 else "Concise highlights",
    ]


def score_resume(
    resume_text: str,
    job_role: str,
    company: str,
    *,
    rng: RandomSource | None = None,
    now: Callable[[], datetime] | None = None,
) -> AnalysisResult:
    """Score a resume against a role and company with keyword heuristics.

    Deterministic apart from the breakdown sub-scores, which draw cosmetic
    jitter from ``rng`` (a module-level ``random.Random`` unless given).
    Empty text is valid input and yields a low-confidence result.
    """
    source = rng or _default_rng
    clock = now or (lambda: datetime.now(timezone.utc))

    signals = extract_resume_signals(resume_text)
    overall_score = compute_overall_score(signals, job_role)
    key_gaps = build_key_gaps(signals, job_role)

    return AnalysisResult(
        overall_score=overall_score,
        confidence=compute_confidence(signals.word_count),
        market_fit=market_fit_for_score(overall_score),
        breakdown=build_breakdown(signals, overall_score, job_role, company, source),
        key_strengths=build_key_strengths(signals),
        key_gaps=key_gaps,
        recommended_actions=build_recommended_actions(company),
        improvement_plan=build_improvement_plan(job_role, company),
        recruiter_perspective=build_recruiter_perspective(
            overall_score, _recruiter_strengths(signals), key_gaps, job_role, company
        ),
        timestamp=clock().isoformat(),
    )
