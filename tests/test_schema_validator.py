import copy
import unittest

from hiring_compass.core.errors import InvalidSchemaError
from hiring_compass.scoring import score_resume, validate_analysis_result


class ZeroRandom:
    def random(self) -> float:
        return 0.0


def _valid_payload() -> dict:
    result = score_resume(
        "Senior Python engineer with 8 years building APIs on AWS and Docker.",
        "Backend Engineer",
        "Acme Corp",
        rng=ZeroRandom(),
    )
    return result.model_dump(mode="json", by_alias=True)


class SchemaValidatorTests(unittest.TestCase):
    def setUp(self):
        self.payload = _valid_payload()

    def assertInvalid(self, payload, field):
        with self.assertRaises(InvalidSchemaError) as ctx:
            validate_analysis_result(payload)
        self.assertEqual(ctx.exception.field, field)
        self.assertEqual(ctx.exception.status_code, 502)
        return ctx.exception

    def test_valid_payload_passes(self):
        self.assertTrue(validate_analysis_result(self.payload))

    def test_confidence_above_one_names_the_field(self):
        self.payload["confidence"] = 1.2
        error = self.assertInvalid(self.payload, "confidence")
        self.assertIn("confidence", str(error))

    def test_overall_score_checked_first(self):
        self.payload["overallScore"] = 101
        self.payload["confidence"] = -1
        self.assertInvalid(self.payload, "overallScore")

    def test_boolean_is_not_a_number(self):
        self.payload["overallScore"] = True
        self.assertInvalid(self.payload, "overallScore")

    def test_nan_overall_score_rejected(self):
        self.payload["overallScore"] = float("nan")
        self.assertInvalid(self.payload, "overallScore")

    def test_infinite_confidence_rejected(self):
        self.payload["confidence"] = float("inf")
        self.assertInvalid(self.payload, "confidence")

    def test_nan_breakdown_score_rejected(self):
        self.payload["breakdown"][0]["score"] = float("nan")
        self.assertInvalid(self.payload, "breakdown[0].score")

    def test_unknown_market_fit(self):
        self.payload["marketFit"] = "great"
        self.assertInvalid(self.payload, "marketFit")

    def test_breakdown_with_four_entries_fails(self):
        self.payload["breakdown"] = self.payload["breakdown"][:4]
        self.assertInvalid(self.payload, "breakdown")

    def test_duplicate_breakdown_category_fails(self):
        breakdown = copy.deepcopy(self.payload["breakdown"])
        breakdown[4]["category"] = breakdown[0]["category"]
        self.payload["breakdown"] = breakdown
        self.assertInvalid(self.payload, "breakdown[4].category")

    def test_breakdown_score_out_of_range(self):
        self.payload["breakdown"][2]["score"] = 140
        self.assertInvalid(self.payload, "breakdown[2].score")

    def test_breakdown_reasoning_required(self):
        self.payload["breakdown"][1]["reasoning"] = "   "
        self.assertInvalid(self.payload, "breakdown[1].reasoning")

    def test_list_length_bounds(self):
        cases = {
            "keyStrengths": ["only one"],
            "keyGaps": [],
            "recommendedActions": ["a", "b", "c", "d"],
        }
        for field, value in cases.items():
            with self.subTest(field=field):
                payload = copy.deepcopy(self.payload)
                payload[field] = value
                self.assertInvalid(payload, field)

    def test_timestamp_must_be_string(self):
        self.payload["timestamp"] = 1700000000
        self.assertInvalid(self.payload, "timestamp")

    def test_non_mapping_rejected(self):
        self.assertInvalid(["not", "an", "object"], "result")


if __name__ == "__main__":
    unittest.main()
