"""Track simulated applications in memory.

The ledger lives in the UI session and is lost on reload. All mutation runs on
the single script thread, so no locking is needed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Iterator

from jobcopilot.errors import GenerationError, TransportError
from jobcopilot.log import get_logger
from jobcopilot.models import Application, ApplicationStatus, JobPosting

log = get_logger(__name__)

SnippetFn = Callable[[JobPosting], str]
ProgressFn = Callable[[int, int, JobPosting], None]


def _today() -> str:
    return date.today().strftime("%Y-%m-%d")


@dataclass
class BulkApplyResult:
    attempted: int = 0
    succeeded: int = 0
    failed: list[tuple[JobPosting, str]] = field(default_factory=list)


class ApplicationLedger:
    """At most one Application per job id, in insertion order."""

    def __init__(self, today: Callable[[], str] = _today) -> None:
        self._apps: dict[str, Application] = {}
        self._today = today

    def __len__(self) -> int:
        return len(self._apps)

    def __iter__(self) -> Iterator[Application]:
        return iter(list(self._apps.values()))

    def has(self, job_id: str) -> bool:
        return job_id in self._apps

    def get(self, job_id: str) -> Application | None:
        return self._apps.get(job_id)

    def apply(self, job: JobPosting, snippet: str | None = None) -> Application | None:
        """Record an application with status Applied; no-op if the job is already tracked."""
        if job.id in self._apps:
            log.debug("Already tracked: %s — skipping", job.id)
            return None
        app = Application(
            job=job,
            status=ApplicationStatus.APPLIED,
            applied_date=self._today(),
            cover_letter_snippet=snippet,
        )
        self._apps[job.id] = app
        log.info("Tracked: %s @ %s [%s]", job.title, job.company, app.status.value)
        return app

    def set_status(self, job_id: str, status: ApplicationStatus | str) -> bool:
        """Update status of an existing application; returns False if absent."""
        app = self._apps.get(job_id)
        if app is None:
            return False
        app.status = ApplicationStatus(status)
        log.debug("Updated %s → %s", job_id, app.status.value)
        return True

    def bulk_apply(
        self,
        jobs: Iterable[JobPosting],
        snippet_fn: SnippetFn,
        on_progress: ProgressFn | None = None,
    ) -> BulkApplyResult:
        """Apply to each untracked job in order, one snippet call at a time.

        A failed snippet skips that job only; the rest of the batch continues.
        """
        # First occurrence wins when the same job id is passed twice.
        first: dict[str, JobPosting] = {}
        for job in jobs:
            first.setdefault(job.id, job)
        pending = [j for j in first.values() if j.id not in self._apps]
        result = BulkApplyResult(attempted=len(pending))
        for index, job in enumerate(pending, 1):
            if on_progress is not None:
                on_progress(index, len(pending), job)
            try:
                snippet = snippet_fn(job)
            except (GenerationError, TransportError) as exc:
                log.warning("[%d/%d] Failed to apply for %s: %s", index, len(pending), job.title, exc)
                result.failed.append((job, str(exc)))
                continue
            if self.apply(job, snippet) is not None:
                result.succeeded += 1
        log.info("Bulk apply finished — %d of %d succeeded", result.succeeded, result.attempted)
        return result

    def counts_by_status(self) -> dict[ApplicationStatus, int]:
        counts = {status: 0 for status in ApplicationStatus}
        for app in self._apps.values():
            counts[app.status] += 1
        return counts
