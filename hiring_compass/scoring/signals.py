from __future__ import annotations

import re

from pydantic import BaseModel, Field

_EXPERIENCE_RE = re.compile(r"\d+\+?\s*years?|senior|lead|principal|expert", re.IGNORECASE)
_TECH_RE = re.compile(r"react|typescript|javascript|node|python|aws|gcp|docker|kubernetes", re.IGNORECASE)
_LEADERSHIP_RE = re.compile(r"\b(?:led|managed|mentored|directed|founded|head of)\b", re.IGNORECASE)

_SENIOR_ROLE_RE = re.compile(r"lead|senior|manager|principal|head|director", re.IGNORECASE)
_ENGINEER_ROLE_RE = re.compile(r"engineer|developer|architect", re.IGNORECASE)
_DEVELOPER_ROLE_RE = re.compile(r"engineer|developer", re.IGNORECASE)
_MANAGER_ROLE_RE = re.compile(r"manager|lead|director", re.IGNORECASE)


class ResumeSignals(BaseModel):
    word_count: int = Field(ge=0)
    has_experience: bool
    has_tech: bool
    has_leadership: bool


def extract_resume_signals(resume_text: str) -> ResumeSignals:
    text = resume_text or ""
    return ResumeSignals(
        word_count=len(text.split()),
        has_experience=bool(_EXPERIENCE_RE.search(text)),
        has_tech=bool(_TECH_RE.search(text)),
        has_leadership=bool(_LEADERSHIP_RE.search(text)),
    )


def is_senior_role(job_role: str) -> bool:
    return bool(_SENIOR_ROLE_RE.search(job_role or ""))


def is_engineering_role(job_role: str) -> bool:
    return bool(_ENGINEER_ROLE_RE.search(job_role or ""))


def is_developer_role(job_role: str) -> bool:
    return bool(_DEVELOPER_ROLE_RE.search(job_role or ""))


def is_management_role(job_role: str) -> bool:
    return bool(_MANAGER_ROLE_RE.search(job_role or ""))
