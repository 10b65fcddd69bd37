from __future__ import annotations

import http.client
import json
from pathlib import Path

import pytest

from rolescreening.container import create_container
from rolescreening.errors import EvidenceExtractionError
from rolescreening.llm import HTTPLLMClient
from rolescreening.pipeline import AuditLogger
from rolescreening.schemas import EvidenceBundle, RoleConfig, load_evidence

ROLE = {
    "roleId": "R-PIPE",
    "title": "Analytics Engineer",
    "skills": [
        {"name": "Python", "weight": 8, "mandatory": True},
        {"name": "SQL", "weight": 4},
    ],
}


class StubExtractor:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def extract(self, role: RoleConfig, resume_text: str) -> EvidenceBundle:
        self.calls.append(resume_text)
        if "FAIL" in resume_text:
            raise EvidenceExtractionError("model returned garbage")
        return load_evidence({"skillEvidence": {"Python": {"found": True, "level": "LOW"}}})


def write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    role_path = tmp_path / "role.json"
    role_path.write_text(json.dumps(ROLE), encoding="utf-8")

    lines = [
        json.dumps(
            {
                "candidate_id": "C-1",
                "candidate_name": "Grace Hopper",
                "evidence": {
                    "skillEvidence": {
                        "Python": {"found": True, "level": "HIGH"},
                        "SQL": {"found": True, "level": "MEDIUM"},
                    }
                },
            }
        ),
        json.dumps({"candidate_id": "C-2", "resume_text": "Python scripts, some pandas"}),
        json.dumps({"candidate_id": "C-3", "resume_text": "FAIL please"}),
        "not json",
        "",
        json.dumps(
            {
                "candidate_id": "C-5",
                "evidence": {"skillEvidence": {"Python": {"found": True, "level": "GURU"}}},
            }
        ),
    ]
    evidence_path = tmp_path / "evidence.jsonl"
    evidence_path.write_text("\n".join(lines), encoding="utf-8")
    return role_path, evidence_path


def test_pipeline_scores_extracts_and_audits(tmp_path: Path) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    output_path = tmp_path / "out" / "results.json"
    audit_path = tmp_path / "audit.jsonl"
    extractor = StubExtractor()

    pipeline = create_container().pipeline()
    results = pipeline.run(
        role_path=role_path,
        evidence_path=evidence_path,
        output_path=output_path,
        audit_logger=AuditLogger(audit_path),
        extractor=extractor,
    )

    by_id = {entry["candidate_id"]: entry for entry in results}
    assert list(by_id) == ["C-1", "C-2", "C-3", "C-5"]
    assert extractor.calls == ["Python scripts, some pandas", "FAIL please"]

    first = by_id["C-1"]
    assert first["evaluation"] == "evaluated"
    assert first["result"]["overall_score"] == 93
    assert first["table_view"]["candidate_name"] == "Grace Hopper"
    assert first["table_view"]["match_level"] == "PERFECT"
    assert first["expanded_view"]["applied_weights"] == {"skills": 100.0}
    assert [item["skill_name"] for item in first["expanded_view"]["skills_analysis"]] == ["Python", "SQL"]

    # (30 * 16 + 0 * 4) / 20 = 24
    assert by_id["C-2"]["result"]["overall_score"] == 24
    assert by_id["C-2"]["result"]["status"] == "NOT_QUALIFIED"

    assert by_id["C-3"]["evaluation"] == "unevaluated"
    assert "garbage" in by_id["C-3"]["error"]
    assert "result" not in by_id["C-3"]
    assert by_id["C-5"]["evaluation"] == "unevaluated"

    payload = json.loads(output_path.read_text(encoding="utf-8"))
    metadata = payload["metadata"]
    assert metadata["role_id"] == "R-PIPE"
    assert metadata["candidate_count"] == 4
    assert metadata["evaluated"] == 2
    assert metadata["unevaluated"] == 2
    assert len(metadata["errors"]) == 1
    assert metadata["errors"][0].startswith("line 4:")
    assert metadata["summary"]["average_score"] == 58.5
    assert metadata["summary"]["status_counts"] == {"NOT_QUALIFIED": 1, "QUALIFIED": 1}
    assert metadata["timestamp"]
    assert len(payload["results"]) == 4

    audit_lines = [json.loads(line) for line in audit_path.read_text(encoding="utf-8").splitlines()]
    assert [line["candidate_id"] for line in audit_lines] == ["C-1", "C-2", "C-3", "C-5"]
    assert audit_lines[0]["status"] == "QUALIFIED"
    assert audit_lines[2]["evaluation"] == "unevaluated"


def test_resume_text_without_extractor_is_unevaluated(tmp_path: Path) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    output_path = tmp_path / "results.json"

    results = create_container().pipeline().run(
        role_path=role_path,
        evidence_path=evidence_path,
        output_path=output_path,
    )

    evaluations = {entry["candidate_id"]: entry["evaluation"] for entry in results}
    assert evaluations == {
        "C-1": "evaluated",
        "C-2": "unevaluated",
        "C-3": "unevaluated",
        "C-5": "unevaluated",
    }


class ExplodingExtractor:
    def extract(self, role: RoleConfig, resume_text: str) -> EvidenceBundle:
        raise KeyError("choices")


def write_mixed_batch(tmp_path: Path) -> tuple[Path, Path]:
    role_path = tmp_path / "role.json"
    role_path.write_text(json.dumps(ROLE), encoding="utf-8")
    evidence_path = tmp_path / "evidence.jsonl"
    evidence_path.write_text(
        "\n".join(
            [
                json.dumps({"candidate_id": "A", "resume_text": "Python developer"}),
                json.dumps(
                    {
                        "candidate_id": "B",
                        "evidence": {"skillEvidence": {"Python": {"found": True, "level": "HIGH"}}},
                    }
                ),
            ]
        ),
        encoding="utf-8",
    )
    return role_path, evidence_path


def test_network_failure_leaves_rest_of_batch_scored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    role_path, evidence_path = write_mixed_batch(tmp_path)
    output_path = tmp_path / "results.json"

    def fake_urlopen(req, timeout):
        raise http.client.RemoteDisconnected("Remote end closed connection without response")

    monkeypatch.setattr("rolescreening.llm.request.urlopen", fake_urlopen)
    client = HTTPLLMClient("http://llm.local/extract", max_attempts=2, sleep=lambda _: None)

    results = create_container().pipeline().run(
        role_path=role_path,
        evidence_path=evidence_path,
        output_path=output_path,
        extractor=client,
    )

    by_id = {entry["candidate_id"]: entry for entry in results}
    assert by_id["A"]["evaluation"] == "unevaluated"
    assert "after 2 attempts" in by_id["A"]["error"]
    # (100 * 16 + 0 * 4) / 20 = 80
    assert by_id["B"]["result"]["overall_score"] == 80
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["metadata"]["evaluated"] == 1
    assert payload["metadata"]["unevaluated"] == 1


def test_unexpected_extractor_error_is_isolated(tmp_path: Path) -> None:
    role_path, evidence_path = write_mixed_batch(tmp_path)

    results = create_container().pipeline().run(
        role_path=role_path,
        evidence_path=evidence_path,
        output_path=tmp_path / "results.json",
        extractor=ExplodingExtractor(),
    )

    assert [entry["evaluation"] for entry in results] == ["unevaluated", "evaluated"]
    assert "KeyError" in results[0]["error"]
