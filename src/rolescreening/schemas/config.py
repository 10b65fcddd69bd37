"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigSection(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CoreConfig(ConfigSection):
    base_weights: dict[str, float] | None = None
    qualified_threshold: float | None = Field(default=None, ge=0, le=100)
    mandatory_multiplier: float | None = Field(default=None, ge=1)
    modifier_baseline: float | None = None
    match_levels: dict[str, float] | None = None


class ScorerConfig(ConfigSection):
    level_scores: dict[str, float] | None = None
    requirement_quality_scores: dict[str, float] | None = None
    skills: dict[str, Any] | None = None
    questions: dict[str, Any] | None = None
    education: dict[str, Any] | None = None
    experience: dict[str, Any] | None = None


class ModifierConfig(ConfigSection):
    job_stability: dict[str, float] | None = None
    employment_gap: dict[str, float] | None = None
    default_bonus_cap: float | None = Field(default=None, ge=0)
    default_penalty_cap: float | None = Field(default=None, le=0)


class AppConfig(ConfigSection):
    core: CoreConfig = Field(default_factory=CoreConfig)
    scorers: ScorerConfig = Field(default_factory=ScorerConfig)
    modifiers: ModifierConfig = Field(default_factory=ModifierConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        core_settings = self.core.model_dump(exclude_none=True)
        if core_settings:
            settings["core"] = core_settings
        scorer_settings = self.scorers.model_dump(exclude_none=True)
        if scorer_settings:
            settings["scorers"] = scorer_settings
        modifier_settings = self.modifiers.model_dump(exclude_none=True)
        if modifier_settings:
            settings["modifiers"] = modifier_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    try:
        return AppConfig.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid config: {exc}") from exc
