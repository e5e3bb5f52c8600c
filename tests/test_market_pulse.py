import os
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("MARKET_PULSE_ENABLED", "0")

import httpx

from hiring_compass.services.market_pulse import (
    JobMarketSignal,
    MarketPulseFetcher,
    build_hiring_outlook,
    classify_demand_level,
    parse_job_market,
    parse_salary_range,
    parse_trending_skills,
)

FIXED_NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)

JOB_RESULTS = [
    {"title": f"Senior Engineer - {name}", "snippet": "We are hiring. Apply now."}
    for name in ("Acme", "Globex", "Initech", "Umbrella", "Hooli")
] + [{"title": "Senior Engineer opening", "snippet": "Apply today for this job"} for _ in range(15)]

SALARY_RESULTS = [
    {"title": "Salary guide", "snippet": "Typical pay is $120k - $160k per year."},
    {"title": "Pay report", "snippet": "Offers range $110k – $150k depending on level."},
    {"title": "Overview", "snippet": "No figures listed here."},
    {"title": "Outside scan window", "snippet": "$40k - $400k"},
]

SKILL_RESULTS = [
    {"title": "Top skills", "snippet": "Python, Docker and Kubernetes are in demand."},
    {"title": "Cloud skills", "snippet": "Teams want AWS plus GraphQL experience."},
]


def _route(request: httpx.Request) -> str:
    query = request.url.params.get("q", "")
    if "required skills" in query:
        return "skills"
    if " salary " in query:
        return "salary"
    return "jobs"


class RecordingHandler:
    def __init__(self, overrides=None):
        self.calls = []
        self.overrides = overrides or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        kind = _route(request)
        self.calls.append((kind, request))
        override = self.overrides.get(kind)
        if override is not None:
            return override(request)
        payload = {"jobs": JOB_RESULTS, "salary": SALARY_RESULTS, "skills": SKILL_RESULTS}[kind]
        return httpx.Response(200, json={"organic_results": payload})


def _fetcher(handler, *, enabled=True, api_key="test-key"):
    return MarketPulseFetcher(
        enabled=enabled,
        api_key=api_key,
        transport=httpx.MockTransport(handler),
        now=lambda: FIXED_NOW,
    )


class MarketPulseFetcherTests(unittest.IsolatedAsyncioTestCase):
    async def test_disabled_makes_no_network_calls(self):
        handler = RecordingHandler()
        result = await _fetcher(handler, enabled=False).fetch("Senior Engineer", "Acme")
        self.assertIsNone(result)
        self.assertEqual(handler.calls, [])

    async def test_missing_api_key_returns_none(self):
        handler = RecordingHandler()
        result = await _fetcher(handler, api_key="  ").fetch("Senior Engineer", "Acme")
        self.assertIsNone(result)
        self.assertEqual(handler.calls, [])

    async def test_full_pulse(self):
        handler = RecordingHandler()
        pulse = await _fetcher(handler).fetch("Senior Engineer", "Acme")

        self.assertIsNotNone(pulse)
        self.assertEqual(len(handler.calls), 3)
        self.assertEqual(pulse.demand_level, "high")
        self.assertEqual(pulse.top_companies, ["Acme", "Globex", "Initech"])
        self.assertEqual(pulse.market_salary_range.min, 110000)
        self.assertEqual(pulse.market_salary_range.max, 160000)
        self.assertEqual(pulse.market_salary_range.currency, "USD")
        self.assertIn("python", pulse.trending_skills)
        self.assertLessEqual(len(pulse.trending_skills), 5)
        self.assertIn("Top companies hiring: Acme, Globex, Initech.", pulse.hiring_outlook)
        self.assertEqual(pulse.last_updated, FIXED_NOW.isoformat())

        for _, request in handler.calls:
            self.assertEqual(request.url.params["api_key"], "test-key")
            self.assertEqual(request.url.params["engine"], "google")
        job_request = next(request for kind, request in handler.calls if kind == "jobs")
        self.assertEqual(job_request.url.params["q"], "Senior Engineer jobs Acme")
        self.assertEqual(job_request.url.params["location"], "United States")

    async def test_one_lookup_failing_keeps_the_others(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        handler = RecordingHandler(overrides={"salary": refuse})
        pulse = await _fetcher(handler).fetch("Senior Engineer", "Acme")

        self.assertIsNotNone(pulse)
        self.assertIsNone(pulse.market_salary_range)
        self.assertEqual(pulse.demand_level, "high")
        self.assertIn("python", pulse.trending_skills)
        self.assertNotIn("marketSalaryRange", pulse.model_dump(by_alias=True, exclude_none=True))

    async def test_all_lookups_failing_gives_degraded_pulse(self):
        def server_error(request):
            return httpx.Response(500, json={"error": "boom"})

        handler = RecordingHandler(overrides={"jobs": server_error, "salary": server_error, "skills": server_error})
        pulse = await _fetcher(handler).fetch("Senior Engineer", "Acme")

        self.assertIsNotNone(pulse)
        self.assertEqual(pulse.demand_level, "low")
        self.assertEqual(pulse.trending_skills, [])
        self.assertEqual(pulse.top_companies, [])
        self.assertIsNone(pulse.market_salary_range)

    async def test_missing_organic_results_is_empty(self):
        def no_results(request):
            return httpx.Response(200, json={"search_metadata": {}})

        handler = RecordingHandler(overrides={"skills": no_results})
        pulse = await _fetcher(handler).fetch("Senior Engineer", "Acme")
        self.assertEqual(pulse.trending_skills, [])

    async def test_failure_outside_lookups_returns_none(self):
        handler = RecordingHandler()
        fetcher = _fetcher(handler)
        with patch.object(MarketPulseFetcher, "_client", side_effect=RuntimeError("client setup failed")):
            result = await fetcher.fetch("Senior Engineer", "Acme")
        self.assertIsNone(result)


class MarketPulseParserTests(unittest.TestCase):
    def test_demand_thresholds(self):
        self.assertEqual(classify_demand_level(20), "high")
        self.assertEqual(classify_demand_level(10), "moderate")
        self.assertEqual(classify_demand_level(9), "low")
        self.assertEqual(classify_demand_level(0), "low")

    def test_salary_parser_ignores_year_ranges(self):
        results = [{"snippet": "Salary trends for 2024 - 2025 are changing"}]
        self.assertIsNone(parse_salary_range(results))

    def test_salary_parser_only_scans_first_three(self):
        salary = parse_salary_range(SALARY_RESULTS)
        self.assertEqual((salary.min, salary.max), (110000, 160000))

    def test_job_market_counts_postings_and_companies(self):
        signal = parse_job_market(JOB_RESULTS)
        self.assertEqual(signal.posting_volume, 20)
        self.assertEqual(signal.top_companies, ["Acme", "Globex", "Initech"])

    def test_trending_skills_have_no_duplicates(self):
        skills = parse_trending_skills(SKILL_RESULTS + SKILL_RESULTS)
        self.assertEqual(len(skills), len(set(skills)))
        self.assertIn("docker", skills)
        self.assertIn("graphql", skills)

    def test_hiring_outlook_without_companies(self):
        outlook = build_hiring_outlook(JobMarketSignal(posting_volume=12), "Data Analyst")
        self.assertTrue(outlook.startswith("Data Analyst market shows moderate hiring activity."))
        self.assertNotIn("Top companies", outlook)


if __name__ == "__main__":
    unittest.main()
