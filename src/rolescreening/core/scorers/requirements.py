"""Education and experience requirement scorers."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ...schemas import EvidenceBundle, RoleConfig
from .base import ComponentScore, round_half_up

MET_DEFAULT_SCORE = 100.0

REQUIREMENT_QUALITY_SCORES: dict[str, float] = {
    "EXCEEDS": 100.0,
    "MEETS": 80.0,
    "BELOW": 50.0,
}


@dataclass
class RequirementScorerConfig:
    """Scores for a met requirement, with and without quality evidence."""

    met_score: float = MET_DEFAULT_SCORE
    quality_scores: dict[str, float] = field(
        default_factory=lambda: dict(REQUIREMENT_QUALITY_SCORES)
    )

    def __post_init__(self) -> None:
        unknown = sorted(set(self.quality_scores) - set(REQUIREMENT_QUALITY_SCORES))
        if unknown:
            raise ValueError(f"Unknown requirement qualities: {unknown}")
        self.quality_scores = {**REQUIREMENT_QUALITY_SCORES, **self.quality_scores}
        values = [self.met_score, *self.quality_scores.values()]
        if any(not 0.0 <= float(value) <= 100.0 for value in values):
            raise ValueError("requirement scores must be within [0, 100]")


class RequirementScorer:
    """Binary-plus-quality scorer for a single configured requirement."""

    component = "requirement"

    def __init__(self, *, config: RequirementScorerConfig | None = None) -> None:
        self._config = config or RequirementScorerConfig()
        self._logger = structlog.get_logger(__name__)

    def score(self, role: RoleConfig, evidence: EvidenceBundle) -> ComponentScore | None:
        requirement = self._requirement(role)
        if requirement is None:
            return None

        met, quality = self._evidence(evidence)
        if met is None:
            self._logger.info("evidence.missing", kind=self.component)

        if met is not True:
            value = 0.0
        elif quality is not None:
            value = float(self._config.quality_scores[quality])
        else:
            value = float(self._config.met_score)

        item = {
            "required": requirement.required,
            "description": requirement.description,
            "met": met,
            "quality": quality,
            "score": value,
        }
        return ComponentScore(component=self.component, score=round_half_up(value), items=(item,))

    def _requirement(self, role: RoleConfig):
        raise NotImplementedError

    def _evidence(self, evidence: EvidenceBundle) -> tuple[bool | None, str | None]:
        raise NotImplementedError


class EducationScorer(RequirementScorer):
    component = "education"

    def _requirement(self, role: RoleConfig):
        return role.education_requirement

    def _evidence(self, evidence: EvidenceBundle) -> tuple[bool | None, str | None]:
        return evidence.education_met, evidence.education_quality


class ExperienceScorer(RequirementScorer):
    component = "experience"

    def _requirement(self, role: RoleConfig):
        return role.experience_requirement

    def _evidence(self, evidence: EvidenceBundle) -> tuple[bool | None, str | None]:
        return evidence.experience_met, evidence.experience_quality
