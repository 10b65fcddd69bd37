from __future__ import annotations

import http.client
import json
from urllib import error

import pytest

from rolescreening.errors import EvidenceExtractionError
from rolescreening.llm import HTTPLLMClient, build_extraction_prompt, parse_evidence_response
from rolescreening.schemas import RoleConfig

ROLE = RoleConfig(
    title="Data Engineer",
    experience_requirement={"required": True, "description": "Pipelines", "minimum_years": 4},
    skills=[
        {"name": "Spark", "weight": 7, "mandatory": True},
        {"name": "Airflow", "weight": 4},
    ],
    questions=[{"text": "Built streaming systems?", "weight": 5}],
    bonus_config={"items": [{"name": "Kaggle", "points": 3, "trigger_keywords": ["kaggle master"]}]},
    penalty_config={"job_stability": {"concern": "strict"}, "employment_gap": {"threshold": "6months"}},
)

LIST_SHAPED_REPLY = {
    "candidate_name": "Ada Lovelace",
    "experience_met": True,
    "experience_quality": "exceeds",
    "skills_analysis": [
        {"skill_name": "Spark", "found": True, "level": "HIGH", "evidence": "5y Spark"},
        {"skill_name": "Airflow", "found": False, "level": "NONE"},
    ],
    "questions_analysis": [
        {"question": "Built streaming systems?", "answer": "YES", "quality": "MEDIUM"},
    ],
    "bonus_triggers_matched": ["Kaggle"],
    "penalty_triggers_matched": [],
}


class FakeResponse:
    def __init__(self, payload: dict):
        self._body = json.dumps(payload).encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info) -> None:
        return None


def test_prompt_lists_role_configuration():
    prompt = build_extraction_prompt(ROLE, "Resume text here")

    assert "Spark (General) [MANDATORY]" in prompt
    assert "Built streaming systems?" in prompt
    assert "minimum 4 years" in prompt
    assert "Kaggle (keywords: kaggle master)" in prompt
    assert "more than 20% of positions" in prompt
    assert "longer than 6 months" in prompt
    assert prompt.rstrip().endswith("no additional text.")


def test_parse_list_shaped_reply_in_markdown_fence():
    text = "```json\n" + json.dumps(LIST_SHAPED_REPLY) + "\n```"

    bundle = parse_evidence_response(text)

    assert bundle.experience_quality == "EXCEEDS"
    assert bundle.skill("Spark").evidence == "5y Spark"
    assert bundle.skill("Airflow").found is False
    assert bundle.question("Built streaming systems?").quality == "MEDIUM"
    assert bundle.bonus_triggers_matched == ["Kaggle"]


def test_parse_bundle_shaped_reply():
    bundle = parse_evidence_response(
        json.dumps({"educationMet": True, "skillEvidence": {"Spark": {"found": True, "level": "LOW"}}})
    )

    assert bundle.education_met is True
    assert bundle.skill("spark").level == "LOW"


@pytest.mark.parametrize("text", ["not json at all", "[1, 2]", '{"skills_analysis": [{"skill_name": "Spark", "level": "GURU"}]}'])
def test_parse_rejects_bad_replies(text: str):
    with pytest.raises(EvidenceExtractionError):
        parse_evidence_response(text)


def test_http_client_retries_then_parses(monkeypatch: pytest.MonkeyPatch):
    calls: list[dict] = []
    failures = [error.URLError("connection reset"), error.URLError("timeout")]

    def fake_urlopen(req, timeout):
        calls.append(json.loads(req.data.decode("utf-8")))
        if failures:
            raise failures.pop(0)
        return FakeResponse({"success": True, "content": json.dumps(LIST_SHAPED_REPLY)})

    monkeypatch.setattr("rolescreening.llm.request.urlopen", fake_urlopen)
    delays: list[float] = []
    client = HTTPLLMClient("http://llm.local/extract", "secret", sleep=delays.append)

    bundle = client.extract(ROLE, "resume")

    assert len(calls) == 3
    assert "Data Engineer" in calls[0]["prompt"]
    assert delays == [1.0, 2.0]
    assert bundle.skill("Spark").level == "HIGH"


def test_http_client_gives_up_after_max_attempts(monkeypatch: pytest.MonkeyPatch):
    def fake_urlopen(req, timeout):
        raise error.URLError("down")

    monkeypatch.setattr("rolescreening.llm.request.urlopen", fake_urlopen)
    client = HTTPLLMClient("http://llm.local/extract", max_attempts=2, sleep=lambda _: None)

    with pytest.raises(EvidenceExtractionError) as exc:
        client.extract(ROLE, "resume")
    assert "after 2 attempts" in str(exc.value)


def test_http_client_reports_service_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        "rolescreening.llm.request.urlopen",
        lambda req, timeout: FakeResponse({"success": False, "error": "quota exceeded"}),
    )

    with pytest.raises(EvidenceExtractionError, match="quota exceeded"):
        HTTPLLMClient("http://llm.local/extract").extract(ROLE, "resume")


@pytest.mark.parametrize(("raw", "expected"), [("false", False), ("true", True), (None, False)])
def test_parse_keeps_string_booleans_honest(raw, expected):
    reply = {"skills_analysis": [{"skill_name": "Spark", "found": raw, "level": "HIGH"}]}

    bundle = parse_evidence_response(json.dumps(reply))

    assert bundle.skill("Spark").found is expected


def test_parse_rejects_unreadable_found_flag():
    reply = {"skills_analysis": [{"skill_name": "Spark", "found": "perhaps", "level": "HIGH"}]}

    with pytest.raises(EvidenceExtractionError):
        parse_evidence_response(json.dumps(reply))


@pytest.mark.parametrize(
    "failure",
    [
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("connection reset by peer"),
        http.client.IncompleteRead(b"{\"cont"),
    ],
)
def test_http_client_retries_read_failures(monkeypatch: pytest.MonkeyPatch, failure: Exception):
    attempts: list[int] = []

    def fake_urlopen(req, timeout):
        attempts.append(1)
        if len(attempts) == 1:
            raise failure
        return FakeResponse({"content": json.dumps(LIST_SHAPED_REPLY)})

    monkeypatch.setattr("rolescreening.llm.request.urlopen", fake_urlopen)

    bundle = HTTPLLMClient("http://llm.local/extract", sleep=lambda _: None).extract(ROLE, "resume")

    assert len(attempts) == 2
    assert bundle.skill("Spark").found is True


def test_http_client_wraps_persistent_disconnects(monkeypatch: pytest.MonkeyPatch):
    def fake_urlopen(req, timeout):
        raise http.client.RemoteDisconnected("closed")

    monkeypatch.setattr("rolescreening.llm.request.urlopen", fake_urlopen)
    client = HTTPLLMClient("http://llm.local/extract", max_attempts=3, sleep=lambda _: None)

    with pytest.raises(EvidenceExtractionError, match="after 3 attempts"):
        client.extract(ROLE, "resume")
