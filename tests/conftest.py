"""Shared fixtures: sample payloads and an in-memory stand-in for AIClient."""

from __future__ import annotations

import copy
import json
import os
from typing import Any

import pytest

os.environ.setdefault("JOBCOPILOT_NO_FILE_LOG", "1")

from jobcopilot.config import Settings
from jobcopilot.errors import TransportError
from jobcopilot.models import JobPosting, Profile, SourceCitation

PROFILE_PAYLOAD: dict[str, Any] = {
    "contactInfo": {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 0000 0000",
        "location": "London, UK",
    },
    "summary": "Analytical engineer with a decade of data modelling experience.",
    "experience": [
        {
            "role": "Senior Data Scientist",
            "company": "Analytical Engines Ltd",
            "location": "London",
            "dates": "2019 - Present",
            "description": ["Built demand forecasting models", "Led a team of 4"],
        }
    ],
    "education": [
        {
            "degree": "BSc Mathematics",
            "institution": "University of London",
            "location": "London",
            "dates": "2010 - 2013",
        }
    ],
    "skills": {
        "programming": ["Python", "SQL"],
        "technical": ["Forecasting", "dbt"],
        "languages": ["English", "French"],
    },
}


def job_payload(job_id: str, score: float, **overrides: Any) -> dict[str, Any]:
    data = {
        "id": job_id,
        "title": f"Data Scientist {job_id}",
        "company": f"Company {job_id}",
        "location": "Berlin, Germany",
        "description": "Build models. Ship them. Measure impact.",
        "url": f"https://jobs.example.com/{job_id}",
        "relevanceScore": score,
        "visaSponsorship": False,
        "experienceLevel": "Mid-level",
    }
    data.update(overrides)
    return data


class FakeClient:
    """Records prompts and replays canned answers instead of calling the network."""

    def __init__(
        self,
        *,
        json_answer: str = "",
        text_answers: list[Any] | None = None,
        search_answer: str = "[]",
        citations: list[SourceCitation] | None = None,
        fail_with: Exception | None = None,
    ) -> None:
        self.settings = Settings(api_key="test-key")
        self.json_answer = json_answer
        self.text_answers = list(text_answers or [])
        self.search_answer = search_answer
        self.citations = citations or []
        self.fail_with = fail_with
        self.calls: list[dict[str, Any]] = []

    def generate_json(self, prompt: str, schema: dict, *, schema_name: str, model: str, document=None) -> str:
        self.calls.append({"kind": "json", "prompt": prompt, "model": model, "document": document})
        if self.fail_with:
            raise self.fail_with
        return self.json_answer

    def generate_text(self, prompt: str, *, model: str, max_tokens: int | None = None) -> str:
        self.calls.append({"kind": "text", "prompt": prompt, "model": model})
        if self.fail_with:
            raise self.fail_with
        answer = self.text_answers.pop(0) if self.text_answers else "Generated text."
        if isinstance(answer, Exception):
            raise answer
        return answer

    def search_web(self, prompt: str, *, model: str) -> tuple[str, list[SourceCitation]]:
        self.calls.append({"kind": "search", "prompt": prompt, "model": model})
        if self.fail_with:
            raise self.fail_with
        return self.search_answer, list(self.citations)


@pytest.fixture
def profile_payload() -> dict[str, Any]:
    return copy.deepcopy(PROFILE_PAYLOAD)


@pytest.fixture
def profile() -> Profile:
    return Profile.from_dict(copy.deepcopy(PROFILE_PAYLOAD))


@pytest.fixture
def make_job():
    def _make(job_id: str = "a", score: float = 50, **overrides: Any) -> JobPosting:
        return JobPosting.from_dict(job_payload(job_id, score, **overrides))

    return _make


@pytest.fixture
def transport_failure() -> TransportError:
    return TransportError("connection reset")


def jobs_json(*items: dict[str, Any]) -> str:
    return json.dumps(list(items))
