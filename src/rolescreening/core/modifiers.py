"""Bonus and penalty aggregation applied after weighted scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from ..schemas import BonusConfig, EvidenceBundle, PenaltyConfig
from ..schemas.role import DEFAULT_BONUS_CAP, DEFAULT_PENALTY_CAP

# Deduction per triggered job-stability check, by configured concern.
JOB_STABILITY_DEDUCTIONS: dict[str, float] = {
    "strict": 25.0,
    "moderate": 15.0,
    "lenient": 8.0,
}

# Deduction per reported employment gap, by configured threshold.
EMPLOYMENT_GAP_DEDUCTIONS: dict[str, float] = {
    "6months": 5.0,
    "1year": 10.0,
    "2years": 20.0,
}

JOB_STABILITY_TRIGGERS = frozenset({"job_stability", "job_hopping"})
EMPLOYMENT_GAP_TRIGGERS = frozenset({"employment_gap"})


@dataclass(slots=True, frozen=True)
class BonusMatch:
    """A configured bonus item matched by a trigger."""

    name: str
    trigger: str
    points: float
    applied: float


@dataclass(slots=True, frozen=True)
class PenaltyDetail:
    """A configured penalty check triggered by the evidence."""

    check: str
    level: str
    occurrences: int
    points: float
    applied: float


@dataclass(slots=True, frozen=True)
class ModifierOutcome:
    """Bounded bonus/penalty deltas plus their audit trail.

    ``bonus_points`` is non-negative and ``penalty_points`` non-positive.
    """

    bonus_points: float = 0.0
    penalty_points: float = 0.0
    bonus_matches: tuple[BonusMatch, ...] = field(default_factory=tuple)
    penalty_details: tuple[PenaltyDetail, ...] = field(default_factory=tuple)
    unmatched_triggers: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class PenaltySchedule:
    """Deduction tables for the penalty checks."""

    job_stability: dict[str, float] = field(
        default_factory=lambda: dict(JOB_STABILITY_DEDUCTIONS)
    )
    employment_gap: dict[str, float] = field(
        default_factory=lambda: dict(EMPLOYMENT_GAP_DEDUCTIONS)
    )

    def __post_init__(self) -> None:
        self.job_stability = _merge_table(
            "job_stability", self.job_stability, JOB_STABILITY_DEDUCTIONS
        )
        self.employment_gap = _merge_table(
            "employment_gap", self.employment_gap, EMPLOYMENT_GAP_DEDUCTIONS
        )


def _merge_table(
    name: str, table: dict[str, float], defaults: dict[str, float]
) -> dict[str, float]:
    unknown = sorted(set(table) - set(defaults))
    if unknown:
        raise ValueError(f"Unknown {name} levels: {unknown}")
    merged = {key: float(value) for key, value in {**defaults, **table}.items()}
    if any(value < 0 for value in merged.values()):
        raise ValueError(f"{name} deductions must be non-negative")
    return merged


def _cap(config: BonusConfig | PenaltyConfig, default: float) -> float:
    if "max_points" in config.model_fields_set:
        return float(config.max_points)
    return default


def _trigger_key(trigger: str) -> str:
    return "_".join(trigger.strip().casefold().replace("-", " ").split())


class ModifierAggregator:
    """Turn matched bonus/penalty triggers into capped point deltas.

    ``default_bonus_cap`` / ``default_penalty_cap`` apply to roles whose
    bonus or penalty config leaves ``max_points`` unset.
    """

    def __init__(
        self,
        *,
        schedule: PenaltySchedule | None = None,
        default_bonus_cap: float | None = None,
        default_penalty_cap: float | None = None,
    ) -> None:
        self._schedule = schedule or PenaltySchedule()
        self._default_bonus_cap = (
            DEFAULT_BONUS_CAP if default_bonus_cap is None else float(default_bonus_cap)
        )
        self._default_penalty_cap = (
            DEFAULT_PENALTY_CAP if default_penalty_cap is None else float(default_penalty_cap)
        )
        if self._default_bonus_cap < 0:
            raise ValueError("default_bonus_cap must be >= 0")
        if self._default_penalty_cap > 0:
            raise ValueError("default_penalty_cap must be <= 0")
        self._logger = structlog.get_logger(__name__)

    def aggregate(
        self,
        bonus_config: BonusConfig | None,
        penalty_config: PenaltyConfig | None,
        evidence: EvidenceBundle,
    ) -> ModifierOutcome:
        bonus_points, matches, unmatched_bonus = self._bonus(
            bonus_config, evidence.bonus_triggers_matched
        )
        penalty_points, details, unmatched_penalty = self._penalty(
            penalty_config, evidence.penalty_triggers_matched
        )
        return ModifierOutcome(
            bonus_points=bonus_points,
            penalty_points=penalty_points,
            bonus_matches=matches,
            penalty_details=details,
            unmatched_triggers=unmatched_bonus + unmatched_penalty,
        )

    def _bonus(
        self,
        config: BonusConfig | None,
        triggers: list[str],
    ) -> tuple[float, tuple[BonusMatch, ...], tuple[str, ...]]:
        if config is None or not config.enabled or not triggers:
            return 0.0, (), ()

        cap = _cap(config, self._default_bonus_cap)
        remaining = cap
        matches: list[BonusMatch] = []
        used: set[int] = set()
        for item in config.items:
            hit = next(
                (idx for idx, trigger in enumerate(triggers) if item.matches(trigger)),
                None,
            )
            if hit is None:
                continue
            used.update(idx for idx, trigger in enumerate(triggers) if item.matches(trigger))
            applied = min(float(item.points), remaining)
            remaining -= applied
            matches.append(
                BonusMatch(
                    name=item.name,
                    trigger=triggers[hit],
                    points=float(item.points),
                    applied=applied,
                )
            )

        unmatched = tuple(t for idx, t in enumerate(triggers) if idx not in used)
        for trigger in unmatched:
            self._logger.info("bonus.unknown_trigger", trigger=trigger)

        total = cap - remaining
        if sum(match.points for match in matches) > cap:
            self._logger.debug("bonus.capped", cap=cap, matched=len(matches))
        return total, tuple(matches), unmatched

    def _penalty(
        self,
        config: PenaltyConfig | None,
        triggers: list[str],
    ) -> tuple[float, tuple[PenaltyDetail, ...], tuple[str, ...]]:
        if config is None or not config.enabled or not triggers:
            return 0.0, (), ()

        keys = [_trigger_key(trigger) for trigger in triggers]
        stability_hits = sum(1 for key in keys if key in JOB_STABILITY_TRIGGERS)
        gap_hits = sum(1 for key in keys if key in EMPLOYMENT_GAP_TRIGGERS)

        checks: list[tuple[str, str, int, float]] = []
        handled: set[str] = set()
        if config.job_stability is not None and stability_hits:
            handled |= JOB_STABILITY_TRIGGERS
            concern = config.job_stability.concern
            checks.append(
                ("job_stability", concern, 1, float(self._schedule.job_stability[concern]))
            )
        if config.employment_gap is not None and gap_hits:
            handled |= EMPLOYMENT_GAP_TRIGGERS
            threshold = config.employment_gap.threshold
            per_gap = float(self._schedule.employment_gap[threshold])
            checks.append(("employment_gap", threshold, gap_hits, per_gap * gap_hits))

        cap = abs(_cap(config, self._default_penalty_cap))
        remaining = cap
        details: list[PenaltyDetail] = []
        for check, level, occurrences, points in checks:
            applied = min(points, remaining)
            remaining -= applied
            details.append(
                PenaltyDetail(
                    check=check,
                    level=level,
                    occurrences=occurrences,
                    points=points,
                    applied=applied,
                )
            )

        unmatched = tuple(t for t, key in zip(triggers, keys) if key not in handled)
        for trigger in unmatched:
            self._logger.info("penalty.ignored_trigger", trigger=trigger)

        return 0.0 - (cap - remaining), tuple(details), unmatched


def aggregate(
    bonus_config: BonusConfig | None,
    penalty_config: PenaltyConfig | None,
    evidence: EvidenceBundle,
) -> ModifierOutcome:
    """Aggregate modifiers with the default penalty schedule."""
    return ModifierAggregator().aggregate(bonus_config, penalty_config, evidence)


def outcome_to_dict(outcome: ModifierOutcome) -> dict[str, Any]:
    return {
        "bonus_points": outcome.bonus_points,
        "penalty_points": outcome.penalty_points,
        "bonus_matches": [
            {
                "name": m.name,
                "trigger": m.trigger,
                "points": m.points,
                "applied": m.applied,
            }
            for m in outcome.bonus_matches
        ],
        "penalty_details": [
            {
                "check": d.check,
                "level": d.level,
                "occurrences": d.occurrences,
                "points": d.points,
                "applied": d.applied,
            }
            for d in outcome.penalty_details
        ],
        "unmatched_triggers": list(outcome.unmatched_triggers),
    }
