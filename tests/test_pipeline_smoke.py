import os
import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("MARKET_PULSE_ENABLED", "0")

from fastapi.testclient import TestClient

import hiring_compass.main  # noqa: F401
from hiring_compass.core.scoring_config import get_scoring_value


class PipelineSmokeTests(unittest.TestCase):
    def test_safe_imports_and_scoring_config_lookup(self):
        self.assertEqual(get_scoring_value("market_pulse.demand.high"), 20)

    def test_health(self):
        with TestClient(hiring_compass.main.app) as client:
            response = client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertIn("X-Request-Id", response.headers)


if __name__ == "__main__":
    unittest.main()
