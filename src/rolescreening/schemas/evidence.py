"""Evidence bundle schema: pre-judged facts about a candidate."""

from __future__ import annotations

from typing import Any, Literal, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..errors import InvalidEvidenceError, validation_messages

EvidenceLevel = Literal["HIGH", "MEDIUM", "LOW", "NONE"]
AnswerType = Literal["YES", "NO", "PARTIAL"]
RequirementQuality = Literal["EXCEEDS", "MEETS", "BELOW"]

EVIDENCE_LEVELS: tuple[str, ...] = ("HIGH", "MEDIUM", "LOW", "NONE")
ANSWER_TYPES: tuple[str, ...] = ("YES", "NO", "PARTIAL")
REQUIREMENT_QUALITIES: tuple[str, ...] = ("EXCEEDS", "MEETS", "BELOW")

T = TypeVar("T")


def _normalize_enum(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class EvidenceModel(BaseModel):
    """Base for evidence objects: immutable, camelCase aliases accepted."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SkillEvidence(EvidenceModel):
    """Whether a skill was found and at which strength."""

    found: bool = False
    level: EvidenceLevel = "NONE"
    evidence: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, value: Any) -> Any:
        return _normalize_enum(value)


class QuestionEvidence(EvidenceModel):
    """Answer to a screening question and the quality of its supporting evidence."""

    answer: AnswerType = "NO"
    quality: EvidenceLevel = "NONE"
    evidence: str | None = None

    @field_validator("answer", "quality", mode="before")
    @classmethod
    def _enums(cls, value: Any) -> Any:
        return _normalize_enum(value)


class EvidenceBundle(EvidenceModel):
    """Structured evidence for one candidate, produced upstream of the engine."""

    education_met: bool | None = None
    experience_met: bool | None = None
    education_quality: RequirementQuality | None = None
    experience_quality: RequirementQuality | None = None
    skill_evidence: dict[str, SkillEvidence] = Field(default_factory=dict)
    question_evidence: dict[str, QuestionEvidence] = Field(default_factory=dict)
    bonus_triggers_matched: list[str] = Field(default_factory=list)
    penalty_triggers_matched: list[str] = Field(default_factory=list)

    @field_validator("education_quality", "experience_quality", mode="before")
    @classmethod
    def _quality(cls, value: Any) -> Any:
        return _normalize_enum(value)

    def skill(self, name: str) -> SkillEvidence | None:
        """Return evidence for ``name`` (case/whitespace-insensitive) or None."""
        return _lookup(self.skill_evidence, name)

    def question(self, text: str) -> QuestionEvidence | None:
        """Return evidence for question ``text`` (case/whitespace-insensitive) or None."""
        return _lookup(self.question_evidence, text)


def _lookup(mapping: Mapping[str, T], key: str) -> T | None:
    if key in mapping:
        return mapping[key]
    needle = " ".join(key.split()).casefold()
    for candidate_key, value in mapping.items():
        if " ".join(candidate_key.split()).casefold() == needle:
            return value
    return None


def load_evidence(raw: Any) -> EvidenceBundle:
    """Validate a raw mapping into an ``EvidenceBundle`` at the system boundary."""
    if isinstance(raw, EvidenceBundle):
        return raw
    if not isinstance(raw, dict):
        raise InvalidEvidenceError(["evidence must be a mapping"])
    try:
        return EvidenceBundle.model_validate(raw)
    except ValidationError as exc:
        raise InvalidEvidenceError(validation_messages(exc)) from exc
