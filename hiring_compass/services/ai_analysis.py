from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from typing import Any

from openai import OpenAI

from hiring_compass.core.config import settings

logger = logging.getLogger(__name__)

ANALYSIS_SYSTEM_PROMPT = """You are an expert recruiter and ATS (Applicant Tracking System) engine. Analyze the provided resume against the job role and company.

Return ONLY valid JSON (no markdown, no commentary) matching this exact schema:
{
  "overallScore": number (0-100, be conservative if confidence is low),
  "confidence": number (0-1, based on resume clarity),
  "marketFit": "excellent" | "strong" | "moderate" | "weak" | "poor",
  "breakdown": [
    {
      "category": "Technical Skills" | "Experience Level" | "Role Alignment" | "Company Fit" | "Market Demand",
      "score": number (0-100),
      "confidence": number (0-1),
      "reasoning": string (1-2 sentences, recruiter-realistic)
    }
  ],
  "keyStrengths": [string, string, string],
  "keyGaps": [string, string],
  "recommendedActions": [string, string, string],
  "recruiterPerspective": string,
  "timestamp": ISO timestamp
}

Rules:
- If confidence is low (< 0.6), reduce scores by 10-20 points
- Be conservative - favor lower scores when uncertain
- Focus on recruiter concerns: skills match, experience level, market rate, culture fit
- Each breakdown category must be present exactly once
- Key strengths: 2-4 items max
- Key gaps: 1-3 items max
- Recommended actions: 2-3 items max
- No markdown, no explanation, JSON only"""


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def ai_analysis_enabled() -> bool:
    if not settings.analysis_ai_enabled:
        return False
    api_key = (settings.openai_api_key or "").strip()
    if not api_key or _looks_like_placeholder(api_key):
        return False
    return True


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(settings.openai_api_key or "").strip(),
        base_url=settings.openai_base_url or None,
        timeout=settings.ai_timeout_s,
        max_retries=1,
    )


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def request_ai_analysis(resume_text: str, job_role: str, company: str) -> Any:
    """Ask the configured model for a camelCase analysis payload.

    Returns None when AI analysis is off or the call fails, so the caller can
    fall back to the heuristic scorer. Any parsed JSON value is returned
    unvalidated; checking its shape is the caller's job.
    """
    if not ai_analysis_enabled():
        return None

    started = time.perf_counter()
    user_prompt = f"Resume:\n{resume_text}\n\nJob Role: {job_role}\nCompany: {company}"
    try:
        response = _client().chat.completions.create(
            model=settings.ai_model,
            messages=[
                {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.2,
            response_format={"type": "json_object"},
            max_tokens=1024,
        )
        content = response.choices[0].message.content if response.choices else ""
        if not content:
            logger.warning("ai_analysis_empty model=%s", settings.ai_model)
            return None
        parsed = json.loads(_strip_code_fence(content))
    except Exception as exc:  # noqa: BLE001 - heuristic fallback is expected
        logger.warning("ai_analysis_failed model=%s prompt_len=%s: %s", settings.ai_model, len(user_prompt), exc)
        return None

    logger.info(
        "ai_analysis_completed model=%s latency_ms=%s",
        settings.ai_model,
        int((time.perf_counter() - started) * 1000),
    )
    return parsed
