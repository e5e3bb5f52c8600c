import os
import unittest

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("MARKET_PULSE_ENABLED", "0")

from fastapi.testclient import TestClient

from hiring_compass.core.history_store import InMemoryHistoryRepository, get_history_repository
from hiring_compass.main import app


class HistoryApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        self.repository = InMemoryHistoryRepository(max_items=50)
        app.dependency_overrides[get_history_repository] = lambda: self.repository

    def tearDown(self):
        app.dependency_overrides.clear()

    def _save(self, job_role="Backend Engineer", company="Acme Corp", score=74):
        return self.client.post(
            "/v1/history",
            json={
                "jobRole": job_role,
                "company": company,
                "resumeText": "Python engineer with five years of API work.",
                "analysisResult": {"overallScore": score, "marketFit": "strong"},
            },
        )

    def test_history_is_empty_until_saved(self):
        response = self.client.get("/v1/history")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [])

    def test_save_then_get(self):
        saved = self._save()
        self.assertEqual(saved.status_code, 201)
        body = saved.json()
        self.assertEqual(body["jobRole"], "Backend Engineer")
        self.assertEqual(body["overallScore"], 74)
        self.assertTrue(body["resumePreview"].startswith("Python engineer"))

        fetched = self.client.get(f"/v1/history/{body['id']}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["fullData"]["marketFit"], "strong")

    def test_save_rejects_invalid_role(self):
        response = self._save(job_role="x")
        self.assertEqual(response.status_code, 400)

    def test_save_rejects_overlong_company(self):
        response = self._save(company="c" * 600)
        self.assertEqual(response.status_code, 400)

    def test_search_and_stats(self):
        self._save(job_role="Backend Engineer", company="Acme Corp", score=80)
        self._save(job_role="Product Manager", company="Globex", score=60)

        found = self.client.get("/v1/history", params={"q": "globex"}).json()
        self.assertEqual([item["company"] for item in found], ["Globex"])

        stats = self.client.get("/v1/history/stats").json()
        self.assertEqual(stats["totalItems"], 2)
        self.assertEqual(stats["averageScore"], 70)
        self.assertEqual(stats["companiesAnalyzed"], 2)

    def test_delete_and_clear(self):
        item_id = self._save().json()["id"]
        self._save(job_role="Data Analyst")

        self.assertEqual(self.client.delete(f"/v1/history/{item_id}").status_code, 204)
        self.assertEqual(self.client.get(f"/v1/history/{item_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"/v1/history/{item_id}").status_code, 404)

        self.assertEqual(self.client.delete("/v1/history").status_code, 204)
        self.assertEqual(self.client.get("/v1/history").json(), [])


if __name__ == "__main__":
    unittest.main()
