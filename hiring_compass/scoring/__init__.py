from .heuristic import RandomSource, compute_confidence, compute_overall_score, market_fit_for_score, score_resume
from .schema_validator import validate_analysis_result
from .signals import ResumeSignals, extract_resume_signals
from .templates import build_improvement_plan, build_recruiter_perspective

__all__ = [
    "RandomSource",
    "compute_confidence",
    "compute_overall_score",
    "market_fit_for_score",
    "score_resume",
    "validate_analysis_result",
    "ResumeSignals",
    "extract_resume_signals",
    "build_improvement_plan",
    "build_recruiter_perspective",
]
