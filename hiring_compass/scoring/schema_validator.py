from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from hiring_compass.core.errors import InvalidSchemaError
from hiring_compass.schemas.analysis import BREAKDOWN_CATEGORIES, MARKET_FIT_VALUES


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_range(field: str, value: Any, low: float, high: float) -> None:
    if not _is_number(value):
        raise InvalidSchemaError(field, f"expected a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise InvalidSchemaError(field, "must be a finite number")
    if value < low or value > high:
        raise InvalidSchemaError(field, f"{value} is outside [{low:g}, {high:g}]")


def _require_list_length(field: str, value: Any, low: int, high: int) -> None:
    if not isinstance(value, list):
        raise InvalidSchemaError(field, "expected a list")
    if len(value) < low or len(value) > high:
        raise InvalidSchemaError(field, f"expected {low}-{high} items, got {len(value)}")


def _validate_breakdown(breakdown: Any) -> None:
    if not isinstance(breakdown, list):
        raise InvalidSchemaError("breakdown", "expected a list")
    if len(breakdown) != len(BREAKDOWN_CATEGORIES):
        raise InvalidSchemaError(
            "breakdown",
            f"expected exactly {len(BREAKDOWN_CATEGORIES)} items, got {len(breakdown)}",
        )

    seen: set[str] = set()
    for index, item in enumerate(breakdown):
        prefix = f"breakdown[{index}]"
        if not isinstance(item, Mapping):
            raise InvalidSchemaError(prefix, "expected an object")
        category = item.get("category")
        if category not in BREAKDOWN_CATEGORIES:
            raise InvalidSchemaError(f"{prefix}.category", f"unknown category {category!r}")
        if category in seen:
            raise InvalidSchemaError(f"{prefix}.category", f"duplicate category {category!r}")
        seen.add(category)
        _require_range(f"{prefix}.score", item.get("score"), 0, 100)
        _require_range(f"{prefix}.confidence", item.get("confidence"), 0, 1)
        reasoning = item.get("reasoning")
        if not isinstance(reasoning, str) or not reasoning.strip():
            raise InvalidSchemaError(f"{prefix}.reasoning", "expected a non-empty string")


def validate_analysis_result(candidate: Any) -> bool:
    """Check a camelCase analysis payload against the result contract.

    Returns True when every constraint holds. Otherwise raises
    InvalidSchemaError for the first violated field, checking in this order:
    overallScore, confidence, marketFit, breakdown, keyStrengths, keyGaps,
    recommendedActions, timestamp.
    """
    if not isinstance(candidate, Mapping):
        raise InvalidSchemaError("result", "expected an object")

    _require_range("overallScore", candidate.get("overallScore"), 0, 100)
    _require_range("confidence", candidate.get("confidence"), 0, 1)

    market_fit = candidate.get("marketFit")
    if market_fit not in MARKET_FIT_VALUES:
        raise InvalidSchemaError("marketFit", f"{market_fit!r} is not one of {', '.join(MARKET_FIT_VALUES)}")

    _validate_breakdown(candidate.get("breakdown"))
    _require_list_length("keyStrengths", candidate.get("keyStrengths"), 2, 4)
    _require_list_length("keyGaps", candidate.get("keyGaps"), 1, 3)
    _require_list_length("recommendedActions", candidate.get("recommendedActions"), 2, 3)

    if not isinstance(candidate.get("timestamp"), str):
        raise InvalidSchemaError("timestamp", "expected an ISO-8601 string")
    return True
