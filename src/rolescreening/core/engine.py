"""Candidate scoring engine orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import structlog

from ..errors import InvalidEvidenceError
from ..schemas import EvidenceBundle, RoleConfig, load_evidence, load_role_config
from .composer import ScoreComposer, ScoreResult
from .gate import gate
from .modifiers import ModifierAggregator, ModifierOutcome
from .scorers import EducationScorer, ExperienceScorer, QuestionsScorer, SkillsScorer
from .weights import WeightNormalizer

# Sub-score held by the modifiers share of the weighted blend. Bonus and
# penalty points are applied on top, so that share is earned only through them.
MODIFIER_BASELINE_SCORE = 0.0


@dataclass(slots=True, frozen=True)
class BatchItem:
    """Per-candidate outcome of a batch run."""

    candidate_id: str
    result: ScoreResult | None
    error: str | None = None


class ScoringEngine:
    """Gate, weight, score and compose a single candidate against a role.

    The engine holds only read-only collaborators, so one instance may score
    any number of candidates, concurrently or not.
    """

    def __init__(
        self,
        *,
        normalizer: WeightNormalizer | None = None,
        scorers: Iterable[Any] | None = None,
        aggregator: ModifierAggregator | None = None,
        composer: ScoreComposer | None = None,
        modifier_baseline: float | None = None,
    ) -> None:
        self._normalizer = normalizer or WeightNormalizer()
        self._scorers = list(scorers) if scorers is not None else default_scorers()
        self._aggregator = aggregator or ModifierAggregator()
        self._composer = composer or ScoreComposer()
        self._modifier_baseline = (
            MODIFIER_BASELINE_SCORE if modifier_baseline is None else float(modifier_baseline)
        )
        if not 0.0 <= self._modifier_baseline <= 100.0:
            raise ValueError("modifier_baseline must be within [0, 100]")
        self._logger = structlog.get_logger(__name__)

    @property
    def composer(self) -> ScoreComposer:
        return self._composer

    def score(
        self,
        role: RoleConfig | dict[str, Any],
        evidence: EvidenceBundle | dict[str, Any],
    ) -> ScoreResult:
        role_config = load_role_config(role)
        bundle = load_evidence(evidence)

        gate_result = gate(role_config, bundle)
        if not gate_result.passed:
            self._logger.info(
                "gate.rejected",
                role_id=role_config.role_id,
                reasons=list(gate_result.reasons),
            )
            return self._composer.compose(gate_result, {}, {}, ModifierOutcome())

        weights = self._normalizer.normalize(role_config)
        if not weights:
            self._logger.warning("scoring.degenerate_role", role_id=role_config.role_id)

        sub_scores: dict[str, float] = {}
        details: dict[str, tuple[dict[str, Any], ...]] = {}
        for scorer in self._scorers:
            component_score = scorer.score(role_config, bundle)
            if component_score is None:
                continue
            sub_scores[component_score.component] = float(component_score.score)
            details[component_score.component] = component_score.items

        if "modifiers" in weights:
            sub_scores["modifiers"] = self._modifier_baseline

        modifiers = self._aggregator.aggregate(
            role_config.bonus_config,
            role_config.penalty_config,
            bundle,
        )

        result = self._composer.compose(
            gate_result,
            weights,
            sub_scores,
            modifiers,
            details=details,
        )
        self._logger.debug(
            "scoring.composed",
            role_id=role_config.role_id,
            overall_score=result.overall_score,
            status=result.status,
        )
        return result

    def score_batch(
        self,
        role: RoleConfig | dict[str, Any],
        candidates: Iterable[tuple[str, EvidenceBundle | dict[str, Any]]],
    ) -> list[BatchItem]:
        """Score ``(candidate_id, evidence)`` pairs, isolating per-candidate errors.

        An invalid role fails the whole batch before any candidate is scored.
        """
        role_config = load_role_config(role)
        items: list[BatchItem] = []
        for candidate_id, evidence in candidates:
            try:
                result = self.score(role_config, evidence)
            except InvalidEvidenceError as exc:
                self._logger.warning(
                    "scoring.invalid_evidence",
                    candidate_id=candidate_id,
                    errors=exc.errors,
                )
                items.append(BatchItem(candidate_id=candidate_id, result=None, error=str(exc)))
                continue
            items.append(BatchItem(candidate_id=candidate_id, result=result))
        return items


def default_scorers() -> list[Any]:
    return [EducationScorer(), ExperienceScorer(), SkillsScorer(), QuestionsScorer()]


def score_candidate(
    role: RoleConfig | dict[str, Any],
    evidence: EvidenceBundle | dict[str, Any],
) -> ScoreResult:
    """Score one candidate with default settings."""
    return ScoringEngine().score(role, evidence)


__all__ = [
    "BatchItem",
    "MODIFIER_BASELINE_SCORE",
    "ScoringEngine",
    "default_scorers",
    "score_candidate",
]
