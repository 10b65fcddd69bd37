"""Scoring pipeline assembly and execution."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pendulum
import structlog
import yaml

from . import __version__
from .analytics import summarize_results
from .core import ScoreResult, ScoringEngine
from .errors import EvidenceExtractionError, InvalidEvidenceError
from .llm import EvidenceExtractor
from .logging import candidate_context
from .schemas import EvidenceBundle, RoleConfig, load_role_config


@dataclass(slots=True)
class EvidenceRecord:
    """One candidate line from an evidence JSONL file."""

    candidate_id: str
    candidate_name: str | None = None
    evidence: dict[str, Any] | None = None
    resume_text: str | None = None


class EvidenceLoadError(ValueError):
    """Raised when evidence loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[EvidenceRecord]):
        super().__init__("Evidence loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Evidence loading failed: {self.errors}"


class EvidenceLoader:
    """Load per-candidate evidence (or resume text) records from JSONL."""

    def load(self, path: Path) -> list[EvidenceRecord]:
        records: list[EvidenceRecord] = []
        errors: list[str] = []
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: record must be a JSON object")
                    continue
                candidate_id = record.get("candidate_id")
                if not candidate_id:
                    errors.append(f"line {idx}: missing candidate_id field")
                    continue
                evidence = record.get("evidence")
                resume_text = record.get("resume_text")
                if evidence is None and not resume_text:
                    errors.append(f"line {idx}: neither evidence nor resume_text provided")
                    continue
                records.append(
                    EvidenceRecord(
                        candidate_id=str(candidate_id),
                        candidate_name=record.get("candidate_name"),
                        evidence=evidence,
                        resume_text=resume_text,
                    )
                )
        if errors:
            raise EvidenceLoadError(errors, records)
        return records


class RoleLoader:
    """Load a role configuration from JSON or YAML."""

    def load(self, path: Path) -> RoleConfig:
        with path.open("r", encoding="utf-8") as handle:
            if path.suffix.lower() in {".yaml", ".yml"}:
                try:
                    data = yaml.safe_load(handle)
                except yaml.YAMLError as exc:
                    raise ValueError(f"Invalid role YAML: {exc}") from exc
            else:
                try:
                    data = json.load(handle)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"Invalid role JSON: {exc}") from exc
        return load_role_config(data)


class OutputWriter:
    """Persist scoring outcomes."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


def build_table_view(record: EvidenceRecord, result: ScoreResult) -> dict[str, Any]:
    """Compact projection used for result listings."""
    breakdown = result.breakdown
    return {
        "candidate_id": record.candidate_id,
        "candidate_name": record.candidate_name,
        "overall_score": result.overall_score,
        "status": result.status,
        "match_level": result.match_level,
        "education_score": breakdown.education_score,
        "experience_score": breakdown.experience_score,
        "skills_score": breakdown.skills_score,
        "questions_score": breakdown.questions_score,
        "bonus_points": breakdown.bonus_points,
        "penalty_points": breakdown.penalty_points,
        "rejection_reasons_count": len(result.rejection_reasons),
    }


def build_expanded_view(result: ScoreResult) -> dict[str, Any]:
    """Detailed projection with per-item analysis and modifier breakdown."""
    rendered = result.to_dict()
    breakdown = rendered["breakdown"]
    details = breakdown["details"]
    return {
        "skills_analysis": details.get("skills", []),
        "questions_analysis": details.get("questions", []),
        "education": (details.get("education") or [None])[0],
        "experience": (details.get("experience") or [None])[0],
        "applied_weights": breakdown["applied_weights"],
        "base_score": breakdown["base_score"],
        "bonus_breakdown": breakdown["bonus_matches"],
        "penalty_breakdown": breakdown["penalty_details"],
        "unmatched_triggers": breakdown["unmatched_triggers"],
        "rejection_reasons": rendered["rejection_reasons"],
        "notes": breakdown["notes"],
    }


class ScoringPipeline:
    """End-to-end scoring orchestrator for one role and a batch of candidates."""

    def __init__(
        self,
        *,
        engine: ScoringEngine,
        evidence_loader: EvidenceLoader | None = None,
        role_loader: RoleLoader | None = None,
        writer: OutputWriter | None = None,
    ) -> None:
        self._engine = engine
        self._evidence = evidence_loader or EvidenceLoader()
        self._roles = role_loader or RoleLoader()
        self._writer = writer or OutputWriter()
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        role_path: Path,
        evidence_path: Path,
        output_path: Path,
        audit_logger: "AuditLogger | None" = None,
        extractor: EvidenceExtractor | None = None,
    ) -> list[dict]:
        role = self._roles.load(role_path)
        load_errors: list[str] = []
        try:
            records = self._evidence.load(evidence_path)
        except EvidenceLoadError as exc:
            records = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        serialized_results: list[dict] = []
        scored: list[ScoreResult] = []

        for record in records:
            with candidate_context(record.candidate_id, role.role_id):
                entry, result = self._process(role, record, extractor, audit_logger)
            serialized_results.append(entry)
            if result is not None:
                scored.append(result)

        metadata = {
            "role_id": role.role_id,
            "candidate_count": len(records),
            "evaluated": len(scored),
            "unevaluated": len(records) - len(scored),
            "errors": load_errors,
            "summary": summarize_results(scored).to_dict(),
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(
            output_path,
            {"metadata": metadata, "results": serialized_results},
        )
        return serialized_results

    def _process(
        self,
        role: RoleConfig,
        record: EvidenceRecord,
        extractor: EvidenceExtractor | None,
        audit_logger: "AuditLogger | None",
    ) -> tuple[dict[str, Any], ScoreResult | None]:
        entry: dict[str, Any] = {
            "candidate_id": record.candidate_id,
            "candidate_name": record.candidate_name,
            "role_id": role.role_id,
        }
        try:
            bundle = self._resolve_evidence(role, record, extractor)
            result = self._engine.score(role, bundle)
        except (EvidenceExtractionError, InvalidEvidenceError) as exc:
            self._logger.warning("extraction.failed", error=str(exc))
            entry.update({"evaluation": "unevaluated", "error": str(exc)})
            if audit_logger:
                audit_logger.append({**entry})
            return entry, None

        entry.update(
            {
                "evaluation": "evaluated",
                "result": result.to_dict(),
                "table_view": build_table_view(record, result),
                "expanded_view": build_expanded_view(result),
            }
        )
        if audit_logger:
            audit_logger.append(
                {
                    "candidate_id": record.candidate_id,
                    "role_id": role.role_id,
                    "evaluation": "evaluated",
                    "status": result.status,
                    "overall_score": result.overall_score,
                    "applied_weights": dict(result.breakdown.applied_weights),
                    "rejection_reasons": list(result.rejection_reasons),
                }
            )
        self._logger.info(
            "scoring.result",
            status=result.status,
            overall_score=result.overall_score,
            match_level=result.match_level,
        )
        return entry, result

    @staticmethod
    def _resolve_evidence(
        role: RoleConfig,
        record: EvidenceRecord,
        extractor: EvidenceExtractor | None,
    ) -> EvidenceBundle | dict[str, Any]:
        if record.evidence is not None:
            return record.evidence
        if extractor is None:
            raise EvidenceExtractionError("No evidence extractor configured for resume text")
        try:
            return extractor.extract(role, record.resume_text or "")
        except EvidenceExtractionError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EvidenceExtractionError(
                f"Evidence extraction failed: {type(exc).__name__}: {exc}"
            ) from exc


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, record: dict) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")
