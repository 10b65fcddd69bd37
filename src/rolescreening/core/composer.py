"""Final score composition: weighting, modifiers, status and match level."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

from .gate import GateResult
from .modifiers import ModifierOutcome, outcome_to_dict
from .scorers.base import clamp, round_half_up

StatusType = Literal["QUALIFIED", "NOT_QUALIFIED", "REJECTED"]
MatchLevel = Literal["PERFECT", "STRONG", "GOOD", "FAIR", "POOR"]

QUALIFIED_THRESHOLD = 70.0

# Lower bound of each display band, highest first; anything below is POOR.
MATCH_LEVEL_BANDS: tuple[tuple[str, float], ...] = (
    ("PERFECT", 90.0),
    ("STRONG", 80.0),
    ("GOOD", 70.0),
    ("FAIR", 60.0),
)

DEGENERATE_NOTE = "no active scoring components"


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
    """Per-component view of how the overall score was reached.

    Mappings are read-only views; ``ScoreResult.to_dict`` returns plain copies.
    """

    education_score: int | None = None
    experience_score: int | None = None
    skills_score: int | None = None
    questions_score: int | None = None
    bonus_points: float = 0.0
    penalty_points: float = 0.0
    applied_weights: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    base_score: float = 0.0
    modifiers: ModifierOutcome = field(default_factory=ModifierOutcome)
    details: Mapping[str, tuple[Mapping[str, Any], ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    degenerate: bool = False
    notes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(slots=True, frozen=True)
class ScoreResult:
    """Engine output for one (role, evidence) pair."""

    status: StatusType
    overall_score: int
    match_level: MatchLevel
    breakdown: ScoreBreakdown
    rejection_reasons: tuple[str, ...] = field(default_factory=tuple)

    @property
    def qualified(self) -> bool:
        return self.status == "QUALIFIED"

    def to_dict(self) -> dict[str, Any]:
        breakdown = self.breakdown
        modifiers = outcome_to_dict(breakdown.modifiers)
        return {
            "status": self.status,
            "overall_score": self.overall_score,
            "match_level": self.match_level,
            "rejection_reasons": list(self.rejection_reasons),
            "breakdown": {
                "education_score": breakdown.education_score,
                "experience_score": breakdown.experience_score,
                "skills_score": breakdown.skills_score,
                "questions_score": breakdown.questions_score,
                "bonus_points": breakdown.bonus_points,
                "penalty_points": breakdown.penalty_points,
                "applied_weights": dict(breakdown.applied_weights),
                "base_score": breakdown.base_score,
                "bonus_matches": modifiers["bonus_matches"],
                "penalty_details": modifiers["penalty_details"],
                "unmatched_triggers": modifiers["unmatched_triggers"],
                "details": {k: [dict(item) for item in v] for k, v in breakdown.details.items()},
                "degenerate": breakdown.degenerate,
                "notes": list(breakdown.notes),
            },
        }


class ScoreComposer:
    """Combine gate result, weighted sub-scores and modifiers into a ``ScoreResult``."""

    def __init__(
        self,
        *,
        qualified_threshold: float | None = None,
        match_levels: Mapping[str, float] | None = None,
    ) -> None:
        self._qualified_threshold = (
            QUALIFIED_THRESHOLD if qualified_threshold is None else float(qualified_threshold)
        )
        if match_levels:
            bands = tuple(
                sorted(
                    ((label, float(bound)) for label, bound in match_levels.items()),
                    key=lambda band: band[1],
                    reverse=True,
                )
            )
        else:
            bands = MATCH_LEVEL_BANDS
        self._bands = bands

    @property
    def qualified_threshold(self) -> float:
        return self._qualified_threshold

    def compose(
        self,
        gate_result: GateResult,
        weights: Mapping[str, float],
        sub_scores: Mapping[str, float],
        modifiers: ModifierOutcome,
        *,
        details: Mapping[str, tuple[dict[str, Any], ...]] | None = None,
    ) -> ScoreResult:
        if not gate_result.passed:
            return ScoreResult(
                status="REJECTED",
                overall_score=0,
                match_level=self.match_level(0),
                breakdown=ScoreBreakdown(),
                rejection_reasons=tuple(gate_result.reasons),
            )

        if not weights:
            return ScoreResult(
                status="NOT_QUALIFIED",
                overall_score=0,
                match_level=self.match_level(0),
                breakdown=ScoreBreakdown(degenerate=True, notes=(DEGENERATE_NOTE,)),
            )

        base_score = sum(
            weight * float(sub_scores.get(component, 0.0))
            for component, weight in weights.items()
        ) / 100.0
        final_score = round_half_up(
            clamp(base_score + modifiers.bonus_points + modifiers.penalty_points)
        )

        status: StatusType = (
            "QUALIFIED" if final_score >= self._qualified_threshold else "NOT_QUALIFIED"
        )

        breakdown = ScoreBreakdown(
            education_score=_component_score(sub_scores, "education"),
            experience_score=_component_score(sub_scores, "experience"),
            skills_score=_component_score(sub_scores, "skills"),
            questions_score=_component_score(sub_scores, "questions"),
            bonus_points=modifiers.bonus_points,
            penalty_points=modifiers.penalty_points,
            applied_weights=MappingProxyType(dict(weights)),
            base_score=round(base_score, 4),
            modifiers=modifiers,
            details=_freeze_details(details or {}),
        )
        return ScoreResult(
            status=status,
            overall_score=final_score,
            match_level=self.match_level(final_score),
            breakdown=breakdown,
        )

    def match_level(self, score: float) -> MatchLevel:
        for label, lower_bound in self._bands:
            if score >= lower_bound:
                return label  # type: ignore[return-value]
        return "POOR"


def _freeze_details(
    details: Mapping[str, tuple[Mapping[str, Any], ...]],
) -> Mapping[str, tuple[Mapping[str, Any], ...]]:
    return MappingProxyType(
        {
            component: tuple(MappingProxyType(dict(item)) for item in items)
            for component, items in details.items()
        }
    )


def _component_score(sub_scores: Mapping[str, float], component: str) -> int | None:
    value = sub_scores.get(component)
    if value is None:
        return None
    return round_half_up(float(value))


def compose(
    gate_result: GateResult,
    weights: Mapping[str, float],
    sub_scores: Mapping[str, float],
    modifiers: ModifierOutcome,
) -> ScoreResult:
    """Compose with the default threshold and match-level bands."""
    return ScoreComposer().compose(gate_result, weights, sub_scores, modifiers)
