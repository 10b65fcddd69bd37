"""Dependency injection container for the scoring system."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import (
    EducationScorer,
    ExperienceScorer,
    ModifierAggregator,
    PenaltySchedule,
    QuestionsScorer,
    ScoreComposer,
    ScoringEngine,
    SkillsScorer,
    WeightNormalizer,
)
from .core.scorers import QuestionsScorerConfig, RequirementScorerConfig, SkillsScorerConfig
from .pipeline import ScoringPipeline


class ScoringContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition.

    ``config`` mirrors ``AppConfig.to_settings()``; options left undefined
    inject ``None`` and the components fall back to their defaults.
    """

    config = providers.Configuration()

    weight_normalizer = providers.Singleton(
        WeightNormalizer,
        base_weights=config.core.base_weights,
    )

    education_scorer = providers.Singleton(EducationScorer)
    experience_scorer = providers.Singleton(ExperienceScorer)
    skills_scorer = providers.Singleton(SkillsScorer)
    questions_scorer = providers.Singleton(QuestionsScorer)

    scorers = providers.List(
        education_scorer,
        experience_scorer,
        skills_scorer,
        questions_scorer,
    )

    penalty_schedule = providers.Singleton(PenaltySchedule)

    modifier_aggregator = providers.Singleton(
        ModifierAggregator,
        schedule=penalty_schedule,
        default_bonus_cap=config.modifiers.default_bonus_cap,
        default_penalty_cap=config.modifiers.default_penalty_cap,
    )

    score_composer = providers.Singleton(
        ScoreComposer,
        qualified_threshold=config.core.qualified_threshold,
        match_levels=config.core.match_levels,
    )

    scoring_engine = providers.Singleton(
        ScoringEngine,
        normalizer=weight_normalizer,
        scorers=scorers,
        aggregator=modifier_aggregator,
        composer=score_composer,
        modifier_baseline=config.core.modifier_baseline,
    )

    pipeline = providers.Factory(
        ScoringPipeline,
        engine=scoring_engine,
    )


def _present(**options: Any) -> dict[str, Any]:
    return {key: value for key, value in options.items() if value is not None}


def create_container(*, settings: dict | None = None) -> ScoringContainer:
    """Instantiate container with optional overrides.

    Raises ``ValueError`` or ``TypeError`` when a scorer or penalty override
    is malformed.
    """

    container = ScoringContainer()

    if not settings:
        return container

    container.config.from_dict(settings)

    core_settings = settings.get("core") or {}
    scorer_settings = settings.get("scorers") or {}
    level_scores = scorer_settings.get("level_scores")
    quality_scores = scorer_settings.get("requirement_quality_scores")

    # Shared tables first, then the per-scorer section on top.
    skills_options = _present(
        level_scores=level_scores,
        mandatory_multiplier=core_settings.get("mandatory_multiplier"),
    )
    skills_options.update(scorer_settings.get("skills") or {})
    if skills_options:
        container.skills_scorer.override(
            providers.Singleton(SkillsScorer, config=SkillsScorerConfig(**skills_options))
        )

    questions_options = _present(level_scores=level_scores)
    questions_options.update(scorer_settings.get("questions") or {})
    if questions_options:
        container.questions_scorer.override(
            providers.Singleton(QuestionsScorer, config=QuestionsScorerConfig(**questions_options))
        )

    for name, scorer_cls in (("education", EducationScorer), ("experience", ExperienceScorer)):
        requirement_options = _present(quality_scores=quality_scores)
        requirement_options.update(scorer_settings.get(name) or {})
        if requirement_options:
            getattr(container, f"{name}_scorer").override(
                providers.Singleton(
                    scorer_cls, config=RequirementScorerConfig(**requirement_options)
                )
            )

    modifier_settings = settings.get("modifiers") or {}
    schedule_options = _present(
        job_stability=modifier_settings.get("job_stability"),
        employment_gap=modifier_settings.get("employment_gap"),
    )
    if schedule_options:
        container.penalty_schedule.override(
            providers.Object(PenaltySchedule(**schedule_options))
        )

    return container
