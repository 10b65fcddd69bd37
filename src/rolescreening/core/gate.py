"""Tier-1 hard requirement gate."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..schemas import EvidenceBundle, RoleConfig

EDUCATION_NOT_MET = "education requirement not met"
EXPERIENCE_NOT_MET = "experience requirement not met"
MANDATORY_SKILL_MISSING = "mandatory skill missing: {name}"


@dataclass(slots=True, frozen=True)
class GateResult:
    """Outcome of the hard requirement checks."""

    passed: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)


def gate(config: RoleConfig, evidence: EvidenceBundle) -> GateResult:
    """Evaluate every hard requirement and collect all failures."""
    reasons: list[str] = []

    education = config.education_requirement
    if education is not None and education.required and evidence.education_met is not True:
        reasons.append(EDUCATION_NOT_MET)

    experience = config.experience_requirement
    if experience is not None and experience.required and evidence.experience_met is not True:
        reasons.append(EXPERIENCE_NOT_MET)

    for skill in config.mandatory_skills:
        found = evidence.skill(skill.name)
        if found is None or found.found is not True:
            reasons.append(MANDATORY_SKILL_MISSING.format(name=skill.name))

    return GateResult(passed=not reasons, reasons=tuple(reasons))
