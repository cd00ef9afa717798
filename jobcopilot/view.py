"""Session-state and markup helpers behind the Streamlit pages.

Kept free of Streamlit imports so the page logic can be exercised with a plain
dict standing in for ``st.session_state``.
"""
from __future__ import annotations

import html
from typing import Any, MutableMapping

from jobcopilot.models import JobPosting

State = MutableMapping[str, Any]

BULK_QUEUE_KEY = "bulk_queue"


# ── Error banners ────────────────────────────────────────────────────────


def banner_key(page: str) -> str:
    return f"error_{page}"


def set_banner(state: State, page: str, message: str) -> None:
    state[banner_key(page)] = message


def clear_banner(state: State, page: str) -> None:
    state.pop(banner_key(page), None)


def banner(state: State, page: str) -> str | None:
    return state.get(banner_key(page))


# ── Bulk apply queue ─────────────────────────────────────────────────────


def queue_bulk_apply(state: State, job_ids: list[str]) -> None:
    state[BULK_QUEUE_KEY] = list(job_ids)


def bulk_pending(state: State) -> bool:
    """True while a queued bulk apply has not run yet; finder controls stay locked."""
    return bool(state.get(BULK_QUEUE_KEY))


def take_bulk_queue(state: State, jobs: list[JobPosting]) -> list[JobPosting]:
    """Pop the queue and return the queued jobs in listing order."""
    queued = set(state.pop(BULK_QUEUE_KEY, None) or [])
    return [j for j in jobs if j.id in queued]


# ── Markup ───────────────────────────────────────────────────────────────


def job_meta_html(job: JobPosting) -> str:
    # Fields come from the model's search answer; escape before raw HTML.
    badge = ' <span class="visa-badge">Visa Sponsorship</span>' if job.visa_sponsorship else ""
    return (
        f'<div class="job-meta">{html.escape(job.company)} · 📍 {html.escape(job.location)}'
        f" · {html.escape(job.experience_level)}{badge}</div>"
    )
