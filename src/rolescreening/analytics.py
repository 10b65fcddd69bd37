"""Role-level summaries over a batch of score results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from .core import ScoreResult

# Skills found in fewer than this share of candidates are hiring bottlenecks.
BOTTLENECK_AVAILABILITY = 30.0


@dataclass(slots=True)
class SkillAvailability:
    """How often a configured skill was found across candidates."""

    found: int = 0
    total: int = 0
    availability: float = 0.0
    is_bottleneck: bool = False


@dataclass(slots=True)
class RoleSummary:
    """Aggregate view of a role's evaluated candidates."""

    total_evaluated: int
    average_score: float
    qualification_rate: float
    status_counts: dict[str, int]
    match_level_counts: dict[str, int]
    skills: dict[str, SkillAvailability] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_evaluated": self.total_evaluated,
            "average_score": self.average_score,
            "qualification_rate": self.qualification_rate,
            "status_counts": dict(self.status_counts),
            "match_level_counts": dict(self.match_level_counts),
            "skills": {
                name: {
                    "found": item.found,
                    "total": item.total,
                    "availability": item.availability,
                    "is_bottleneck": item.is_bottleneck,
                }
                for name, item in self.skills.items()
            },
        }


def summarize_results(results: Iterable[ScoreResult]) -> RoleSummary:
    """Summarize scores, statuses and per-skill availability.

    Rejected results carry no per-skill detail, so skill availability only
    counts candidates that passed the hard requirement gate.
    """
    results = list(results)
    total = len(results)
    statuses = Counter(result.status for result in results)
    levels = Counter(result.match_level for result in results)

    skills: dict[str, SkillAvailability] = {}
    for result in results:
        for item in result.breakdown.details.get("skills", ()):
            entry = skills.setdefault(item["skill_name"], SkillAvailability())
            entry.total += 1
            if item["found"]:
                entry.found += 1
    for entry in skills.values():
        entry.availability = round(100.0 * entry.found / entry.total, 2) if entry.total else 0.0
        entry.is_bottleneck = entry.availability < BOTTLENECK_AVAILABILITY

    average = round(sum(r.overall_score for r in results) / total, 2) if total else 0.0
    qualification_rate = round(100.0 * statuses["QUALIFIED"] / total, 2) if total else 0.0

    return RoleSummary(
        total_evaluated=total,
        average_score=average,
        qualification_rate=qualification_rate,
        status_counts=dict(sorted(statuses.items())),
        match_level_counts=dict(sorted(levels.items())),
        skills=skills,
    )
