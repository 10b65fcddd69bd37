"""Core scoring engine components."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..schemas import EvidenceBundle, RoleConfig

# NOTE: keep imports explicit for export clarity.
from .composer import (
    MATCH_LEVEL_BANDS,
    QUALIFIED_THRESHOLD,
    ScoreBreakdown,
    ScoreComposer,
    ScoreResult,
    compose,
)
from .engine import MODIFIER_BASELINE_SCORE, BatchItem, ScoringEngine, score_candidate
from .gate import GateResult, gate
from .modifiers import ModifierAggregator, ModifierOutcome, PenaltySchedule, aggregate
from .scorers import (
    ComponentScore,
    EducationScorer,
    ExperienceScorer,
    QuestionsScorer,
    SkillsScorer,
)
from .weights import BASE_WEIGHTS, COMPONENTS, WeightNormalizer, active_components, normalize


@runtime_checkable
class ComponentScorer(Protocol):
    """Scorer contract for one weighted component."""

    component: str

    def score(self, role: RoleConfig, evidence: EvidenceBundle) -> ComponentScore | None:
        """Return the component sub-score, or None when the component is inactive."""


__all__ = [
    "BASE_WEIGHTS",
    "COMPONENTS",
    "MATCH_LEVEL_BANDS",
    "MODIFIER_BASELINE_SCORE",
    "QUALIFIED_THRESHOLD",
    "BatchItem",
    "ComponentScore",
    "ComponentScorer",
    "EducationScorer",
    "ExperienceScorer",
    "GateResult",
    "ModifierAggregator",
    "ModifierOutcome",
    "PenaltySchedule",
    "QuestionsScorer",
    "ScoreBreakdown",
    "ScoreComposer",
    "ScoreResult",
    "ScoringEngine",
    "SkillsScorer",
    "WeightNormalizer",
    "active_components",
    "aggregate",
    "compose",
    "gate",
    "normalize",
    "score_candidate",
]
