"""Questions component scorer."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ...schemas import EvidenceBundle, QuestionEvidence, RoleConfig
from .base import (
    LEVEL_SCORES,
    ComponentScore,
    clamp,
    round_half_up,
    validate_level_scores,
    weighted_average,
)


@dataclass
class QuestionsScorerConfig:
    """Configuration for question scoring."""

    level_scores: dict[str, float] = field(default_factory=lambda: dict(LEVEL_SCORES))

    def __post_init__(self) -> None:
        self.level_scores = validate_level_scores(self.level_scores)


class QuestionsScorer:
    """Plain weighted average of answer quality per question."""

    component = "questions"

    def __init__(self, *, config: QuestionsScorerConfig | None = None) -> None:
        self._config = config or QuestionsScorerConfig()
        self._logger = structlog.get_logger(__name__)

    def score(self, role: RoleConfig, evidence: EvidenceBundle) -> ComponentScore | None:
        if not role.questions:
            return None

        items: list[dict] = []
        pairs: list[tuple[float, float]] = []
        for question in role.questions:
            answered = evidence.question(question.text)
            if answered is None:
                self._logger.info("evidence.missing", kind="question", name=question.text)
                answered = QuestionEvidence()

            sub_score = self._config.level_scores[answered.quality]
            pairs.append((sub_score, float(question.weight)))
            items.append(
                {
                    "question": question.text,
                    "category": question.category,
                    "answer": answered.answer,
                    "quality": answered.quality,
                    "score": sub_score,
                    "weight": question.weight,
                    "evidence": answered.evidence,
                }
            )

        score = round_half_up(clamp(weighted_average(pairs)))
        return ComponentScore(component=self.component, score=score, items=tuple(items))
