from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from rolescreening.cli import app


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


ROLE = {
    "roleId": "R-CLI",
    "title": "Platform Engineer",
    "experienceRequirement": {"required": True, "description": "4+ years of platform work"},
    "skills": [
        {"name": "Terraform", "weight": 6, "mandatory": True},
        {"name": "Kubernetes", "weight": 6},
    ],
}

CANDIDATES = [
    {
        "candidate_id": "C-001",
        "candidate_name": "Alan Turing",
        "evidence": {
            "experienceMet": True,
            "experienceQuality": "MEETS",
            "skillEvidence": {
                "Terraform": {"found": True, "level": "HIGH"},
                "Kubernetes": {"found": True, "level": "HIGH"},
            },
        },
    },
    {
        "candidate_id": "C-002",
        "evidence": {
            "experienceMet": True,
            "skillEvidence": {"Kubernetes": {"found": True, "level": "HIGH"}},
        },
    },
]


def write_inputs(tmp_path: Path) -> tuple[Path, Path]:
    role_path = tmp_path / "role.yaml"
    role_path.write_text(yaml.safe_dump(ROLE), encoding="utf-8")
    evidence_path = tmp_path / "evidence.jsonl"
    evidence_path.write_text("\n".join(json.dumps(item) for item in CANDIDATES), encoding="utf-8")
    return role_path, evidence_path


def test_score_command_writes_results(tmp_path: Path, runner: CliRunner) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    output_path = tmp_path / "results.json"

    result = runner.invoke(
        app,
        [
            "score",
            "--role",
            str(role_path),
            "--evidence",
            str(evidence_path),
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Processed 2 candidates" in result.output

    payload = json.loads(output_path.read_text(encoding="utf-8"))
    first, second = payload["results"]
    # experience 30 / skills 25 renormalized: 80 * 30/55 + 100 * 25/55 = 89.09
    assert first["result"]["overall_score"] == 89
    assert first["result"]["status"] == "QUALIFIED"
    assert second["result"]["status"] == "REJECTED"
    assert second["result"]["rejection_reasons"] == ["mandatory skill missing: Terraform"]
    assert payload["metadata"]["summary"]["status_counts"] == {"QUALIFIED": 1, "REJECTED": 1}


def test_score_command_applies_yaml_config(tmp_path: Path, runner: CliRunner) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    output_path = tmp_path / "results.json"
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        yaml.safe_dump({"core": {"qualified_threshold": 95}}),
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        [
            "score",
            "--role",
            str(role_path),
            "--evidence",
            str(evidence_path),
            "--output",
            str(output_path),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["results"][0]["result"]["status"] == "NOT_QUALIFIED"


def test_score_command_rejects_invalid_config(tmp_path: Path, runner: CliRunner) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({"core": {"qualified_threshold": "high"}}), encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "score",
            "--role",
            str(role_path),
            "--evidence",
            str(evidence_path),
            "--output",
            str(tmp_path / "results.json"),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code == 2
    assert "--config" in result.output
    assert not (tmp_path / "results.json").exists()


def test_score_command_reports_invalid_role(tmp_path: Path, runner: CliRunner) -> None:
    _, evidence_path = write_inputs(tmp_path)
    role_path = tmp_path / "role.json"
    role_path.write_text(
        json.dumps({"skills": [{"name": "Go", "weight": 3}, {"name": "go", "weight": 4}]}),
        encoding="utf-8",
    )

    result = runner.invoke(
        app,
        [
            "score",
            "--role",
            str(role_path),
            "--evidence",
            str(evidence_path),
            "--output",
            str(tmp_path / "results.json"),
        ],
    )

    assert result.exit_code == 2
    assert "Invalid role configuration" in result.output


def test_validate_role_command(tmp_path: Path, runner: CliRunner) -> None:
    role_path, _ = write_inputs(tmp_path)

    result = runner.invoke(app, ["validate-role", "--role", str(role_path)])

    assert result.exit_code == 0, result.output
    assert "Role R-CLI is valid: 2 skills, 0 questions." in result.output


def test_validate_role_command_rejects_bad_weight(tmp_path: Path, runner: CliRunner) -> None:
    role_path = tmp_path / "role.json"
    role_path.write_text(json.dumps({"skills": [{"name": "Go", "weight": 0}]}), encoding="utf-8")

    result = runner.invoke(app, ["validate-role", "--role", str(role_path)])

    assert result.exit_code == 2
    assert "Invalid role configuration" in result.output


@pytest.mark.parametrize(
    "settings",
    [
        {"core": {"base_weights": {"skills": 0}}},
        {"scorers": {"skills": {"bogus": 1}}},
        {"scorers": {"level_scores": {"LOW": 90}}},
    ],
)
def test_score_command_rejects_unusable_scoring_settings(
    tmp_path: Path, runner: CliRunner, settings: dict
) -> None:
    role_path, evidence_path = write_inputs(tmp_path)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(settings), encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "score",
            "--role",
            str(role_path),
            "--evidence",
            str(evidence_path),
            "--output",
            str(tmp_path / "results.json"),
            "--config",
            str(config_path),
        ],
    )

    assert result.exit_code == 2
    assert "Invalid scoring settings" in result.output
    assert not (tmp_path / "results.json").exists()
