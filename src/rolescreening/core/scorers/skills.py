"""Skills component scorer."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ...schemas import EvidenceBundle, RoleConfig, SkillEvidence
from .base import (
    LEVEL_SCORES,
    ComponentScore,
    clamp,
    round_half_up,
    validate_level_scores,
    weighted_average,
)

# Weight multiplier for mandatory skills. The original material mentions both
# 2x and 3x; 2x is the documented default.
MANDATORY_SKILL_MULTIPLIER = 2.0


@dataclass
class SkillsScorerConfig:
    """Configuration for skill scoring."""

    level_scores: dict[str, float] = field(default_factory=lambda: dict(LEVEL_SCORES))
    mandatory_multiplier: float = MANDATORY_SKILL_MULTIPLIER

    def __post_init__(self) -> None:
        self.level_scores = validate_level_scores(self.level_scores)
        if self.mandatory_multiplier < 1.0:
            raise ValueError("mandatory_multiplier must be >= 1")


class SkillsScorer:
    """Weighted average of per-skill evidence strength."""

    component = "skills"

    def __init__(self, *, config: SkillsScorerConfig | None = None) -> None:
        self._config = config or SkillsScorerConfig()
        self._logger = structlog.get_logger(__name__)

    def score(self, role: RoleConfig, evidence: EvidenceBundle) -> ComponentScore | None:
        if not role.skills:
            return None

        items: list[dict] = []
        pairs: list[tuple[float, float]] = []
        for skill in role.skills:
            found = evidence.skill(skill.name)
            if found is None:
                self._logger.info("evidence.missing", kind="skill", name=skill.name)
                found = SkillEvidence()

            level = found.level if found.found else "NONE"
            sub_score = self._config.level_scores[level]
            weight = float(skill.weight)
            if skill.mandatory:
                weight *= self._config.mandatory_multiplier

            pairs.append((sub_score, weight))
            items.append(
                {
                    "skill_name": skill.name,
                    "category": skill.category,
                    "mandatory": skill.mandatory,
                    "found": found.found,
                    "level": level,
                    "score": sub_score,
                    "effective_weight": weight,
                    "evidence": found.evidence,
                }
            )

        score = round_half_up(clamp(weighted_average(pairs)))
        return ComponentScore(component=self.component, score=score, items=tuple(items))
