"""Pydantic schema definitions for role configurations and candidate evidence."""

from __future__ import annotations

from .evidence import (
    EvidenceBundle,
    QuestionEvidence,
    SkillEvidence,
    load_evidence,
)
from .role import (
    BonusConfig,
    BonusItem,
    EducationRequirement,
    EmploymentGapCheck,
    ExperienceRequirement,
    JobStabilityCheck,
    PenaltyConfig,
    Question,
    RoleConfig,
    Skill,
    load_role_config,
)

__all__ = [
    "BonusConfig",
    "BonusItem",
    "EducationRequirement",
    "EmploymentGapCheck",
    "EvidenceBundle",
    "ExperienceRequirement",
    "JobStabilityCheck",
    "PenaltyConfig",
    "Question",
    "QuestionEvidence",
    "RoleConfig",
    "Skill",
    "SkillEvidence",
    "load_evidence",
    "load_role_config",
]
