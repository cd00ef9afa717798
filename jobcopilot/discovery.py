"""Find live job postings for a profile with a web-search-augmented model.

The answer is free text that is supposed to be a JSON array. Decoding is
tried in two tiers: the whole (fence-stripped) text first, then the first
bracketed ``[...]`` span. A batch either decodes and validates completely or
the whole call fails with DiscoveryError.
"""
from __future__ import annotations

import json
import re
from typing import Any

from jobcopilot.client import AIClient
from jobcopilot.config import Settings
from jobcopilot.errors import DiscoveryError
from jobcopilot.log import get_logger
from jobcopilot.models import DiscoveryResult, JobPosting, Profile, SearchFilters
from jobcopilot.schemas import JOBS_SCHEMA

log = get_logger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")

# ── Prompt ───────────────────────────────────────────────────────────────


def _join_names(names: tuple[str, ...] | list[str]) -> str:
    names = list(names)
    if len(names) <= 2:
        return " and ".join(names)
    return ", ".join(names[:-1]) + f", and {names[-1]}"


def filter_clauses(filters: SearchFilters) -> list[str]:
    """Prompt sentences for the constraints the user actually set."""
    clauses: list[str] = []
    if filters.constrains_level:
        clauses.append(f"The job must be at the {filters.experience_level.strip()} level.")
    if filters.country.strip():
        clauses.append(f"The jobs must be located in {filters.country.strip()}.")
    if filters.remote_only:
        clauses.append("The job must be fully remote (work from anywhere).")
    if filters.visa_sponsorship:
        clauses.append(
            "CRITICAL: The company must offer visa sponsorship for international "
            "candidates. Use web search to verify this from the job posting, the "
            "company's career page, or other reliable online sources. Only include "
            "jobs where visa sponsorship is explicitly mentioned or highly probable."
        )
    return clauses


def build_search_prompt(profile: Profile, filters: SearchFilters, settings: Settings) -> str:
    prompt = (
        "Based on this resume JSON, act as an expert recruiter. Use web search to find "
        f"{settings.target_job_count} currently open, real job postings suitable for this "
        f"candidate. Search for roles like {_join_names(settings.role_categories)} on job "
        f"boards like {_join_names(settings.job_boards)}. Provide a diverse list from "
        "major tech companies."
    )
    for clause in filter_clauses(filters):
        prompt += f"\n{clause}"

    prompt += (
        "\n\nIMPORTANT: Respond with ONLY a valid JSON array that conforms to the "
        "following schema. Do not include any other text, markdown, or explanations "
        "before or after the JSON.\n\n"
        f"Schema:\n{json.dumps(JOBS_SCHEMA, indent=2)}\n\n"
        f"Resume:\n{json.dumps(profile.to_dict(), indent=2)}"
    )
    return prompt


# ── Parsing ──────────────────────────────────────────────────────────────


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_job_array(text: str) -> list[Any]:
    """Decode the answer into a JSON array, falling back to the first ``[...]`` span."""
    cleaned = strip_code_fences(text)
    try:
        decoded = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        log.warning("Direct JSON decode of job list failed (%s) — trying bracket extraction", exc.msg)
    else:
        if isinstance(decoded, list):
            return decoded
        log.warning("Job list decoded to %s, not an array — trying bracket extraction", type(decoded).__name__)

    match = _ARRAY_RE.search(cleaned)
    if not match:
        raise DiscoveryError(
            "The model did not return a valid JSON array for job listings (invalid format)."
        )
    try:
        decoded = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        log.error("Extracted job list is not valid JSON either: %s", exc.msg)
        raise DiscoveryError(
            "The model returned an invalid JSON format for job listings (invalid format)."
        ) from exc
    if not isinstance(decoded, list):
        raise DiscoveryError("The model did not return a JSON array for job listings (invalid format).")
    return decoded


def validate_jobs(items: list[Any]) -> list[JobPosting]:
    """Turn decoded items into postings; one malformed item fails the batch."""
    jobs: list[JobPosting] = []
    seen: set[str] = set()
    for i, item in enumerate(items):
        try:
            job = JobPosting.from_dict(item, f"jobs[{i}]")
        except ValueError as exc:
            raise DiscoveryError(f"Malformed job listing: {exc}") from exc
        if job.id in seen:
            raise DiscoveryError(f"Malformed job listing: duplicate id '{job.id}'")
        seen.add(job.id)
        jobs.append(job)
    return jobs


def rank_jobs(jobs: list[JobPosting]) -> list[JobPosting]:
    """Highest relevance first; ties keep their original order."""
    return sorted(jobs, key=lambda j: j.relevance_score, reverse=True)


def parse_discovery_answer(text: str) -> list[JobPosting]:
    return rank_jobs(validate_jobs(parse_job_array(text)))


# ── Public API ───────────────────────────────────────────────────────────


def find_jobs(client: AIClient, profile: Profile, filters: SearchFilters) -> DiscoveryResult:
    """Search the web for postings matching *profile* under *filters*.

    Raises DiscoveryError if the answer cannot be decoded into a complete,
    valid batch; transport failures propagate as TransportError.
    """
    prompt = build_search_prompt(profile, filters, client.settings)
    log.info(
        "Searching jobs — country=%s, remote=%s, visa=%s, level=%s",
        filters.country or "any",
        filters.remote_only,
        filters.visa_sponsorship,
        filters.experience_level,
    )
    text, sources = client.search_web(prompt, model=client.settings.discovery_model)
    jobs = parse_discovery_answer(text)
    log.info("Discovery complete — %d job(s), %d source(s)", len(jobs), len(sources))
    return DiscoveryResult(jobs=jobs, sources=sources)
