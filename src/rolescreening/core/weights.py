"""Proportional redistribution of component weights."""

from __future__ import annotations

from typing import Mapping

from ..schemas import RoleConfig

COMPONENTS: tuple[str, ...] = ("education", "experience", "skills", "questions", "modifiers")

BASE_WEIGHTS: dict[str, float] = {
    "education": 25.0,
    "experience": 30.0,
    "skills": 25.0,
    "questions": 10.0,
    "modifiers": 10.0,
}

WEIGHT_TOTAL = 100.0


def active_components(role: RoleConfig) -> dict[str, bool]:
    """Mark the components that carry any content for ``role``."""
    return {
        "education": role.education_requirement is not None,
        "experience": role.experience_requirement is not None,
        "skills": len(role.skills) > 0,
        "questions": len(role.questions) > 0,
        "modifiers": role.has_modifiers,
    }


def normalize(
    base_weights: Mapping[str, float],
    active_flags: Mapping[str, bool],
) -> dict[str, float]:
    """Rescale the active components' base weights so they sum to 100.

    Inactive components are omitted. When nothing is active the result is an
    empty mapping and the caller decides how to report the degenerate role.
    """
    active = [c for c in COMPONENTS if active_flags.get(c) and c in base_weights]
    active_sum = sum(float(base_weights[c]) for c in active)
    if not active or active_sum <= 0:
        return {}
    scale_factor = WEIGHT_TOTAL / active_sum
    return {c: float(base_weights[c]) * scale_factor for c in active}


class WeightNormalizer:
    """Holds the base weight table and normalizes it per role."""

    def __init__(self, *, base_weights: Mapping[str, float] | None = None) -> None:
        weights = dict(BASE_WEIGHTS)
        if base_weights:
            unknown = sorted(set(base_weights) - set(COMPONENTS))
            if unknown:
                raise ValueError(f"Unknown scoring components: {unknown}")
            weights.update({k: float(v) for k, v in base_weights.items()})
        non_positive = [c for c in COMPONENTS if weights[c] <= 0]
        if non_positive:
            raise ValueError(f"Base weights must be positive: {non_positive}")
        self._base_weights = weights

    @property
    def base_weights(self) -> dict[str, float]:
        return dict(self._base_weights)

    def normalize(self, role: RoleConfig) -> dict[str, float]:
        return normalize(self._base_weights, active_components(role))
