"""Component scorers for education, experience, skills and questions."""

from .base import LEVEL_SCORES, ComponentScore, clamp, round_half_up, weighted_average
from .questions import QuestionsScorer, QuestionsScorerConfig
from .requirements import (
    REQUIREMENT_QUALITY_SCORES,
    EducationScorer,
    ExperienceScorer,
    RequirementScorerConfig,
)
from .skills import MANDATORY_SKILL_MULTIPLIER, SkillsScorer, SkillsScorerConfig

__all__ = [
    "LEVEL_SCORES",
    "MANDATORY_SKILL_MULTIPLIER",
    "REQUIREMENT_QUALITY_SCORES",
    "ComponentScore",
    "EducationScorer",
    "ExperienceScorer",
    "QuestionsScorer",
    "QuestionsScorerConfig",
    "RequirementScorerConfig",
    "SkillsScorer",
    "SkillsScorerConfig",
    "clamp",
    "round_half_up",
    "weighted_average",
]
