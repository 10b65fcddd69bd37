"""Helpers for requesting candidate evidence from an external LLM."""

from __future__ import annotations

import http.client
import json
import time
from typing import Any, Callable, Protocol, runtime_checkable
from urllib import request

import structlog

from .errors import EvidenceExtractionError, InvalidEvidenceError
from .schemas import EvidenceBundle, RoleConfig, load_evidence

_STABILITY_RULES = {
    "strict": "more than 20% of positions lasted under 2 years",
    "moderate": "more than 30% of positions lasted under 2 years",
    "lenient": "more than 50% of positions lasted under 2 years",
}

_GAP_RULES = {
    "6months": "6 months",
    "1year": "1 year",
    "2years": "2 years",
}


@runtime_checkable
class EvidenceExtractor(Protocol):
    """Produces an evidence bundle for a resume under a role."""

    def extract(self, role: RoleConfig, resume_text: str) -> EvidenceBundle:
        """Return structured evidence or raise ``EvidenceExtractionError``."""


def build_extraction_prompt(role: RoleConfig, resume_text: str) -> str:
    """Construct the evidence-extraction prompt for ``role`` and one resume."""

    skills = "\n".join(
        f"- {s.name} ({s.category or 'General'}){' [MANDATORY]' if s.mandatory else ''}"
        for s in role.skills
    ) or "No specific skills defined"
    questions = "\n".join(
        f"- {q.text} (Category: {q.category or 'General'})" for q in role.questions
    ) or "No specific questions defined"

    education = role.education_requirement
    experience = role.experience_requirement
    education_text = education.description if education else "No specific requirements"
    experience_text = experience.description if experience else "No specific requirements"
    if experience and experience.minimum_years is not None:
        experience_text += f" (minimum {experience.minimum_years:g} years)"

    return f"""You are an expert HR recruiter. Read the resume and report evidence only; do not score.

**ROLE:** {role.title or 'Untitled role'}

**SKILLS:**
{skills}

**QUESTIONS:**
{questions}

**EDUCATION REQUIREMENT:**
{education_text}

**EXPERIENCE REQUIREMENT:**
{experience_text}

**BONUS TRIGGERS:**
{_bonus_section(role)}

**PENALTY TRIGGERS:**
{_penalty_section(role)}

**CANDIDATE RESUME:**
{resume_text}

**RESPONSE FORMAT (JSON only):**
{{
  "candidate_name": "Full name extracted from resume",
  "education_met": boolean,
  "education_quality": "EXCEEDS|MEETS|BELOW",
  "experience_met": boolean,
  "experience_quality": "EXCEEDS|MEETS|BELOW",
  "skills_analysis": [
    {{"skill_name": "skill name", "found": boolean, "level": "HIGH|MEDIUM|LOW|NONE", "evidence": "text"}}
  ],
  "questions_analysis": [
    {{"question": "the question text", "answer": "YES|NO|PARTIAL", "quality": "HIGH|MEDIUM|LOW|NONE", "evidence": "text"}}
  ],
  "bonus_triggers_matched": ["bonus name"],
  "penalty_triggers_matched": ["job_stability", "employment_gap"]
}}

Respond with ONLY the JSON object, no additional text."""


def _bonus_section(role: RoleConfig) -> str:
    config = role.bonus_config
    if config is None or not config.active:
        return "No bonus configuration defined."
    lines = []
    for item in config.items:
        keywords = f" (keywords: {', '.join(item.trigger_keywords)})" if item.trigger_keywords else ""
        lines.append(f"- {item.name}{keywords}")
    return "\n".join(lines)


def _penalty_section(role: RoleConfig) -> str:
    config = role.penalty_config
    if config is None or not config.active:
        return "No penalty configuration defined."
    lines = []
    if config.job_stability is not None:
        rule = _STABILITY_RULES[config.job_stability.concern]
        lines.append(f"- job_stability: report once if {rule}")
    if config.employment_gap is not None:
        gap = _GAP_RULES[config.employment_gap.threshold]
        lines.append(f"- employment_gap: report once per unexplained gap longer than {gap}")
    return "\n".join(lines)


def parse_evidence_response(text: str) -> EvidenceBundle:
    """Parse the model's reply into an ``EvidenceBundle``.

    Accepts the bundle shape directly or the list-based ``skills_analysis`` /
    ``questions_analysis`` shape requested by ``build_extraction_prompt``.
    """
    raw = text.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else ""
        if raw.rstrip().endswith("```"):
            raw = raw.rstrip()[:-3]
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EvidenceExtractionError(f"Unparseable evidence response: {exc}") from exc
    if not isinstance(data, dict):
        raise EvidenceExtractionError("Evidence response must be a JSON object")

    try:
        return load_evidence(_to_bundle_payload(data))
    except InvalidEvidenceError as exc:
        raise EvidenceExtractionError(f"Malformed evidence response: {exc.errors}") from exc


_BUNDLE_KEYS = {
    "education_met",
    "experience_met",
    "education_quality",
    "experience_quality",
    "bonus_triggers_matched",
    "penalty_triggers_matched",
}


def _to_bundle_payload(data: dict[str, Any]) -> dict[str, Any]:
    if "skills_analysis" not in data and "questions_analysis" not in data:
        return {key: value for key, value in data.items() if key != "candidate_name"}

    payload: dict[str, Any] = {
        key: value for key, value in data.items() if key in _BUNDLE_KEYS and value is not None
    }
    payload["skill_evidence"] = {
        str(item.get("skill_name", "")): {
            "found": item.get("found") or False,
            "level": item.get("level") or "NONE",
            "evidence": item.get("evidence"),
        }
        for item in data.get("skills_analysis") or []
        if isinstance(item, dict) and item.get("skill_name")
    }
    payload["question_evidence"] = {
        str(item.get("question", "")): {
            "answer": item.get("answer") or "NO",
            "quality": item.get("quality") or "NONE",
            "evidence": item.get("evidence"),
        }
        for item in data.get("questions_analysis") or []
        if isinstance(item, dict) and item.get("question")
    }
    return payload


class HTTPLLMClient:
    """Simple HTTP client for the evidence-extraction API."""

    def __init__(
        self,
        endpoint: str | None,
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._logger = structlog.get_logger(__name__)

    def extract(self, role: RoleConfig, resume_text: str) -> EvidenceBundle:
        if not self._endpoint:
            raise EvidenceExtractionError("No evidence extraction endpoint configured")
        prompt = build_extraction_prompt(role, resume_text)
        body = self._post_with_retry({"prompt": prompt})
        content = body.get("content") if isinstance(body, dict) else None
        if not content:
            raise EvidenceExtractionError(
                str(body.get("error")) if isinstance(body, dict) and body.get("error")
                else "Invalid response from evidence extraction service"
            )
        return parse_evidence_response(str(content))

    def _post_with_retry(self, payload: dict[str, Any]) -> dict[str, Any]:
        delay = self._backoff_seconds
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._post(payload)
            except (OSError, http.client.HTTPException) as exc:
                # URLError, timeouts and errors raised while reading the body.
                self._logger.warning("llm.request_failed", error=str(exc), attempt=attempt)
                if attempt == self._max_attempts:
                    raise EvidenceExtractionError(
                        f"Evidence extraction failed after {attempt} attempts: {exc}"
                    ) from exc
                self._sleep(delay)
                delay *= 2
        raise EvidenceExtractionError("Evidence extraction failed")  # pragma: no cover

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        req = request.Request(self._endpoint, data=data, headers=headers, method="POST")
        with request.urlopen(req, timeout=self._timeout) as resp:
            body = resp.read().decode("utf-8")
        try:
            return json.loads(body) if body else {}
        except json.JSONDecodeError as exc:
            raise EvidenceExtractionError(f"Unparseable service response: {exc}") from exc
