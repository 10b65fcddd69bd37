"""Shared scoring primitives for component scorers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

# Evidence strength to sub-score.
LEVEL_SCORES: dict[str, float] = {
    "HIGH": 100.0,
    "MEDIUM": 65.0,
    "LOW": 30.0,
    "NONE": 0.0,
}

_LEVEL_ORDER = ("HIGH", "MEDIUM", "LOW", "NONE")


@dataclass(slots=True, frozen=True)
class ComponentScore:
    """Sub-score produced by a single component scorer."""

    component: str
    score: int
    items: tuple[dict[str, Any], ...] = field(default_factory=tuple)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    return max(lower, min(upper, value))


def weighted_average(pairs: Iterable[tuple[float, float]]) -> float:
    """Weighted mean of ``(score, weight)`` pairs; 0.0 when total weight is 0."""
    total = 0.0
    weight_sum = 0.0
    for score, weight in pairs:
        total += score * weight
        weight_sum += weight
    if weight_sum <= 0:
        return 0.0
    return total / weight_sum


def validate_level_scores(level_scores: Mapping[str, float]) -> dict[str, float]:
    """Merge overrides onto the default level table and validate the result."""
    unknown = sorted(set(level_scores) - set(_LEVEL_ORDER))
    if unknown:
        raise ValueError(f"Unknown evidence levels: {unknown}")
    merged = {**LEVEL_SCORES, **level_scores}
    normalized = {level: float(merged[level]) for level in _LEVEL_ORDER}
    for level, value in normalized.items():
        if not 0.0 <= value <= 100.0:
            raise ValueError(f"level score for {level} must be within [0, 100]")
    ordered = [normalized[level] for level in _LEVEL_ORDER]
    if any(higher < lower for higher, lower in zip(ordered, ordered[1:])):
        raise ValueError("level scores must not increase as evidence weakens")
    return normalized
