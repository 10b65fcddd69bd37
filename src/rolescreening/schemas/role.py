"""Role configuration schema: requirements, weighted skills and questions, modifiers."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from ..errors import InvalidRoleConfigError, validation_messages

MIN_WEIGHT = 1
MAX_WEIGHT = 10
MAX_SKILLS = 10
MAX_QUESTIONS = 10

DEFAULT_BONUS_CAP = 10.0
DEFAULT_PENALTY_CAP = -10.0

StabilityConcern = Literal["strict", "moderate", "lenient"]
GapThreshold = Literal["6months", "1year", "2years"]


class RoleModel(BaseModel):
    """Base for role schema objects: immutable, camelCase aliases accepted."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_require_text)]


class EducationRequirement(RoleModel):
    """Education requirement attached to a role."""

    required: bool = False
    description: str = ""


class ExperienceRequirement(RoleModel):
    """Experience requirement attached to a role."""

    required: bool = False
    description: str = ""
    minimum_years: float | None = Field(default=None, ge=0)


class Skill(RoleModel):
    """Weighted skill; mandatory skills are also hard requirements."""

    name: NonBlankStr
    category: str | None = None
    weight: int = Field(ge=MIN_WEIGHT, le=MAX_WEIGHT)
    mandatory: bool = False


class Question(RoleModel):
    """Weighted screening question answered from resume evidence."""

    text: NonBlankStr
    category: str | None = None
    weight: int = Field(ge=MIN_WEIGHT, le=MAX_WEIGHT)


class BonusItem(RoleModel):
    """Bonus awarded when any of its triggers is matched."""

    name: NonBlankStr
    points: float = Field(ge=0)
    trigger_keywords: list[str] = Field(default_factory=list)

    def matches(self, trigger: str) -> bool:
        needle = trigger.strip().casefold()
        if not needle:
            return False
        if needle == self.name.casefold():
            return True
        return any(needle == keyword.strip().casefold() for keyword in self.trigger_keywords)


class BonusConfig(RoleModel):
    """Bonus settings; the summed bonus never exceeds ``max_points``."""

    enabled: bool = True
    items: list[BonusItem] = Field(default_factory=list)
    max_points: float = Field(default=DEFAULT_BONUS_CAP, ge=0)

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.items)


class JobStabilityCheck(RoleModel):
    concern: StabilityConcern = "moderate"


class EmploymentGapCheck(RoleModel):
    threshold: GapThreshold = "1year"


class PenaltyConfig(RoleModel):
    """Penalty settings; ``max_points`` is the (non-positive) floor of the total."""

    enabled: bool = True
    job_stability: JobStabilityCheck | None = None
    employment_gap: EmploymentGapCheck | None = None
    max_points: float = Field(default=DEFAULT_PENALTY_CAP, le=0)

    @property
    def active(self) -> bool:
        return self.enabled and (
            self.job_stability is not None or self.employment_gap is not None
        )


class RoleConfig(RoleModel):
    """Provider-neutral role configuration consumed by the scoring engine."""

    role_id: str | None = None
    title: str | None = None
    education_requirement: EducationRequirement | None = None
    experience_requirement: ExperienceRequirement | None = None
    skills: list[Skill] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)
    bonus_config: BonusConfig | None = None
    penalty_config: PenaltyConfig | None = None

    @model_validator(mode="after")
    def _check_collections(self) -> "RoleConfig":
        problems: list[str] = []
        if len(self.skills) > MAX_SKILLS:
            problems.append(f"cannot have more than {MAX_SKILLS} skills")
        if len(self.questions) > MAX_QUESTIONS:
            problems.append(f"cannot have more than {MAX_QUESTIONS} questions")
        problems.extend(_duplicates("skill", [skill.name for skill in self.skills]))
        problems.extend(_duplicates("question", [q.text for q in self.questions]))
        if self.bonus_config is not None:
            problems.extend(
                _duplicates("bonus item", [item.name for item in self.bonus_config.items])
            )
        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def mandatory_skills(self) -> list[Skill]:
        return [skill for skill in self.skills if skill.mandatory]

    @property
    def has_modifiers(self) -> bool:
        bonus_active = self.bonus_config is not None and self.bonus_config.active
        penalty_active = self.penalty_config is not None and self.penalty_config.active
        return bonus_active or penalty_active


def _duplicates(label: str, names: list[str]) -> list[str]:
    seen: set[str] = set()
    problems: list[str] = []
    for name in names:
        key = name.casefold()
        if key in seen:
            problems.append(f"duplicate {label}: {name!r}")
        seen.add(key)
    return problems


def load_role_config(raw: Any) -> RoleConfig:
    """Validate a raw mapping into a ``RoleConfig``; never repairs bad input."""
    if isinstance(raw, RoleConfig):
        return raw
    if not isinstance(raw, dict):
        raise InvalidRoleConfigError(["role configuration must be a mapping"])
    try:
        return RoleConfig.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRoleConfigError(validation_messages(exc)) from exc
