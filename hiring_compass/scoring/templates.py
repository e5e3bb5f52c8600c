from __future__ import annotations

from typing import Any

from hiring_compass.schemas.analysis import ImprovementPlan, WeeklyMilestone
from hiring_compass.scoring.signals import is_engineering_role, is_management_role

_ENGINEERING_PLAN: dict[str, Any] = {
    "focus_areas": ["Technical Depth", "System Design", "Project Portfolio"],
    "weeks": [
        (
            "Foundation & Assessment",
            [
                "Audit current technical skills against job requirements",
                "Identify top 3 priority tech skills to learn",
                "Set up learning environment and resources",
            ],
            [
                "LeetCode or HackerRank (DS/Algorithms)",
                "Tech documentation for target languages",
                "GitHub account setup for projects",
            ],
            "5-7 hours/week",
        ),
        (
            "Core Technical Skills",
            [
                "Master fundamentals of primary language/framework",
                "Complete 5-10 coding challenges",
                "Study system design patterns",
            ],
            [
                "Udemy/Coursera courses on core tech",
                "Official framework documentation",
                "System Design Interview book",
            ],
            "8-10 hours/week",
        ),
        (
            "Project Build & Portfolio",
            [
                "Start building 1-2 portfolio projects",
                "Implement best practices and design patterns",
                "Document code and architecture decisions",
            ],
            [
                "GitHub for version control",
                "Project templates and boilerplates",
                "Technical writing guides",
            ],
            "10-12 hours/week",
        ),
        (
            "Polish & Demonstrate Expertise",
            [
                "Complete and refine portfolio projects",
                "Write technical blog posts or README documentation",
                "Prepare for technical interviews",
            ],
            [
                "Interview prep guides",
                "Mock interview platforms",
                "Portfolio website builder",
            ],
            "8-10 hours/week",
        ),
    ],
}

_MANAGEMENT_PLAN: dict[str, Any] = {
    "focus_areas": ["Leadership Skills", "Strategic Thinking", "Team Development"],
    "weeks": [
        (
            "Leadership Fundamentals",
            [
                "Assess current leadership competencies",
                "Research leadership styles and frameworks",
                "Define leadership vision and values",
            ],
            [
                "\"The Manager's Path\" by Camille Fournier",
                "LinkedIn Learning leadership courses",
                "Harvard ManageMentor resources",
            ],
            "6-8 hours/week",
        ),
        (
            "Team & Communication Skills",
            [
                "Study effective delegation and feedback techniques",
                "Practice difficult conversations",
                "Develop communication frameworks",
            ],
            [
                "Crucial Conversations workshop materials",
                "Coaching and mentoring guides",
                "Communication courses",
            ],
            "7-9 hours/week",
        ),
        (
            "Strategic & Business Acumen",
            [
                "Learn company strategy frameworks",
                "Study OKRs and goal-setting methodologies",
                "Understand profit & loss fundamentals",
            ],
            [
                "Business strategy books",
                "OKR frameworks documentation",
                "Financial literacy courses",
            ],
            "8-10 hours/week",
        ),
        (
            "Real-World Application & Reflection",
            [
                "Apply learnings in current/practice scenarios",
                "Document lessons learned and growth areas",
                "Create personal leadership development plan",
            ],
            [
                "Peer mentoring networks",
                "Reflection journaling templates",
                "Executive coaching resources",
            ],
            "6-8 hours/week",
        ),
    ],
}

_GENERAL_PLAN: dict[str, Any] = {
    "focus_areas": ["Core Competencies", "Industry Knowledge", "Professional Network"],
    "weeks": [
        (
            "Role Deep Dive",
            [
                "Research and define role competencies",
                "Analyze job description in detail",
                "Identify skill gaps and priorities",
            ],
            [
                "Job description analysis template",
                "Industry reports and whitepapers",
                "Competitor research",
            ],
            "5-7 hours/week",
        ),
        (
            "Skill Development",
            [
                "Enroll in relevant online courses",
                "Complete skill assessments",
                "Practice with real-world scenarios",
            ],
            [
                "LinkedIn Learning, Coursera, Udemy",
                "Industry certifications",
                "Practice platforms",
            ],
            "8-10 hours/week",
        ),
        (
            "Experience Building",
            [
                "Take on side projects or freelance work",
                "Build case studies from work",
                "Network with industry professionals",
            ],
            [
                "Upwork, Fiverr for projects",
                "Industry conferences and webinars",
                "Professional associations",
            ],
            "10-12 hours/week",
        ),
        (
            "Portfolio & Personal Brand",
            [
                "Create professional portfolio/website",
                "Update LinkedIn profile comprehensively",
                "Share learnings and insights publicly",
            ],
            [
                "Portfolio website builders",
                "LinkedIn optimization guides",
                "Content creation tools",
            ],
            "7-9 hours/week",
        ),
    ],
}

_SUCCESS_METRICS = [
    "Complete all weekly milestones on schedule",
    "Build or improve 1-2 portfolio projects/artifacts",
    "Gain measurable competency improvements in focus areas",
    "Network with 5+ professionals in target industry",
    "Document and showcase learning progress",
]


def _plan_template_for_role(job_role: str) -> dict[str, Any]:
    # Engineering wins over management, so "Engineering Lead" gets the technical plan.
    if is_engineering_role(job_role):
        return _ENGINEERING_PLAN
    if is_management_role(job_role):
        return _MANAGEMENT_PLAN
    return _GENERAL_PLAN


def build_improvement_plan(job_role: str, company: str) -> ImprovementPlan:
    template = _plan_template_for_role(job_role)
    weeks = [
        WeeklyMilestone(
            week=index,
            title=title,
            goals=list(goals),
            resources=list(resources),
            time_commitment=time_commitment,
        )
        for index, (title, goals, resources, time_commitment) in enumerate(template["weeks"], start=1)
    ]
    return ImprovementPlan(
        title=f"30-Day {job_role} Mastery Plan for {company}",
        duration="4 weeks (30 days)",
        overview=(
            f"A structured improvement plan to accelerate your readiness for the {job_role} position at "
            f"{company}. This plan targets key skill gaps and builds on your existing strengths."
        ),
        focus_areas=list(template["focus_areas"]),
        weeks=weeks,
        success_metrics=list(_SUCCESS_METRICS),
    )


def _recruiter_tone(overall_score: float) -> str:
    if overall_score >= 75:
        return "strong candidate"
    if overall_score >= 55:
        return "good match with gaps"
    return "needs improvement for this role"


def build_recruiter_perspective(
    overall_score: float,
    strengths: list[str],
    gaps: list[str],
    job_role: str,
    company: str,
) -> str:
    strength_text = "; ".join(strengths[:3]) if strengths else "Relevant strengths present."
    gap_text = "; ".join(gaps[:3]) if gaps else "Some areas to improve."
    return (
        f"Recruiter summary for {job_role} @ {company}: {_recruiter_tone(overall_score)}. "
        f"Key strengths: {strength_text}. Key concerns: {gap_text}. "
        f"Recommended next steps: highlight measurable impact, tailor for {company}, and address top gaps."
    )
