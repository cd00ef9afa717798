"""Tests for job discovery: prompt building, defensive parsing and ranking."""

from __future__ import annotations

import json

import pytest

from conftest import FakeClient, job_payload, jobs_json
from jobcopilot.config import Settings
from jobcopilot.discovery import (
    build_search_prompt,
    filter_clauses,
    find_jobs,
    parse_discovery_answer,
    parse_job_array,
    rank_jobs,
    strip_code_fences,
)
from jobcopilot.errors import DiscoveryError, TransportError
from jobcopilot.models import SearchFilters, SourceCitation


class TestParseJobArray:
    """Two-tier decoding of the model's answer."""

    def test_plain_array(self) -> None:
        assert parse_job_array('[{"id": "a"}]') == [{"id": "a"}]

    def test_code_fence_is_stripped(self) -> None:
        text = '```json\n[{"id": "a"}, {"id": "b"}]\n```'
        assert parse_job_array(text) == [{"id": "a"}, {"id": "b"}]

    def test_bare_fence_is_stripped(self) -> None:
        assert strip_code_fences("```\n[]\n```") == "[]"

    def test_fallback_extracts_bracketed_span(self) -> None:
        text = 'Here are the jobs I found:\n[{"id": "a"}]\nGood luck!'
        assert parse_job_array(text) == [{"id": "a"}]

    def test_no_array_anywhere_fails(self) -> None:
        with pytest.raises(DiscoveryError, match="invalid format"):
            parse_job_array("Sorry, I could not find any jobs today.")

    def test_bracketed_span_that_is_not_json_fails(self) -> None:
        with pytest.raises(DiscoveryError, match="invalid format"):
            parse_job_array("Results: [not, really, json]")

    def test_non_array_json_fails(self) -> None:
        with pytest.raises(DiscoveryError):
            parse_job_array('{"id": "a"}')

    def test_object_wrapping_array_falls_back_to_bracket_span(self) -> None:
        text = json.dumps({"jobs": [job_payload("a", 60), job_payload("b", 90)]})
        assert [item["id"] for item in parse_job_array(text)] == ["a", "b"]
        assert [j.id for j in parse_discovery_answer(text)] == ["b", "a"]


class TestValidationAndRanking:
    """All-or-nothing validation and stable relevance ordering."""

    def test_sorted_by_relevance_descending(self) -> None:
        text = jobs_json(job_payload("a", 60), job_payload("b", 90))
        jobs = parse_discovery_answer(text)
        assert [j.id for j in jobs] == ["b", "a"]

    def test_ties_keep_original_order(self) -> None:
        text = jobs_json(
            job_payload("a", 70),
            job_payload("b", 90),
            job_payload("c", 70),
            job_payload("d", 70),
        )
        assert [j.id for j in parse_discovery_answer(text)] == ["b", "a", "c", "d"]

    def test_rank_jobs_does_not_mutate_input(self, make_job) -> None:
        jobs = [make_job("a", 10), make_job("b", 20)]
        ranked = rank_jobs(jobs)
        assert [j.id for j in ranked] == ["b", "a"]
        assert [j.id for j in jobs] == ["a", "b"]

    def test_one_malformed_element_fails_whole_batch(self) -> None:
        broken = job_payload("b", 80)
        del broken["url"]
        with pytest.raises(DiscoveryError, match="url"):
            parse_discovery_answer(jobs_json(job_payload("a", 60), broken))

    def test_wrong_types_fail(self) -> None:
        with pytest.raises(DiscoveryError):
            parse_discovery_answer(jobs_json(job_payload("a", "high")))
        with pytest.raises(DiscoveryError):
            parse_discovery_answer(jobs_json(job_payload("a", 50, visaSponsorship="yes")))

    def test_score_out_of_range_fails(self) -> None:
        with pytest.raises(DiscoveryError):
            parse_discovery_answer(jobs_json(job_payload("a", 140)))

    def test_duplicate_ids_fail(self) -> None:
        with pytest.raises(DiscoveryError, match="duplicate"):
            parse_discovery_answer(jobs_json(job_payload("a", 60), job_payload("a", 70)))

    def test_empty_array_is_valid(self) -> None:
        assert parse_discovery_answer("[]") == []


class TestPrompt:
    """Filters translate into prompt clauses only when set."""

    def test_unconstrained_filters_add_nothing(self) -> None:
        assert filter_clauses(SearchFilters()) == []

    def test_each_filter_adds_its_clause(self) -> None:
        clauses = filter_clauses(
            SearchFilters(country="Germany", remote_only=True, visa_sponsorship=True, experience_level="Senior")
        )
        text = "\n".join(clauses)
        assert "Senior level" in text
        assert "located in Germany" in text
        assert "fully remote" in text
        assert "visa sponsorship" in text
        assert "verify" in text

    def test_any_level_is_unconstrained(self) -> None:
        assert not any("level" in c for c in filter_clauses(SearchFilters(experience_level="Any")))

    def test_blank_country_is_unconstrained(self) -> None:
        assert filter_clauses(SearchFilters(country="   ")) == []

    def test_prompt_embeds_count_schema_and_profile(self, profile) -> None:
        prompt = build_search_prompt(profile, SearchFilters(), Settings(api_key="k"))
        assert "find 8 currently open" in prompt
        assert "Data Scientist, Business Intelligence Engineer, and Data Analyst" in prompt
        assert '"relevanceScore"' in prompt
        assert "Ada Lovelace" in prompt
        assert prompt.index("Schema:") < prompt.index("Resume:")

    def test_prompt_uses_configured_count_and_roles(self, profile) -> None:
        settings = Settings(api_key="k", target_job_count=5, role_categories=("ML Engineer",))
        prompt = build_search_prompt(profile, SearchFilters(), settings)
        assert "find 5 currently open" in prompt
        assert "roles like ML Engineer on" in prompt


class TestFindJobs:
    """End-to-end discovery against a fake client."""

    def test_returns_ranked_jobs_and_sources(self, profile) -> None:
        citations = [SourceCitation(uri="https://boards.example.com/a", title="Board")]
        client = FakeClient(
            search_answer="```json\n" + jobs_json(job_payload("a", 60), job_payload("b", 90)) + "\n```",
            citations=citations,
        )
        result = find_jobs(client, profile, SearchFilters(country="USA"))
        assert [j.id for j in result.jobs] == ["b", "a"]
        assert result.sources == citations
        assert len(client.calls) == 1
        assert client.calls[0]["kind"] == "search"
        assert client.calls[0]["model"] == client.settings.discovery_model
        assert "located in USA" in client.calls[0]["prompt"]

    def test_invalid_answer_raises_without_partial_output(self, profile) -> None:
        client = FakeClient(search_answer="I found several jobs but cannot list them.")
        with pytest.raises(DiscoveryError):
            find_jobs(client, profile, SearchFilters())

    def test_transport_failure_propagates(self, profile, transport_failure) -> None:
        client = FakeClient(fail_with=transport_failure)
        with pytest.raises(TransportError):
            find_jobs(client, profile, SearchFilters())
