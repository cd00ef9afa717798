"""Draft a follow-up email for a tracked application."""
from __future__ import annotations

from jobcopilot.client import AIClient
from jobcopilot.errors import GenerationError, TransportError
from jobcopilot.log import get_logger
from jobcopilot.models import JobPosting

log = get_logger(__name__)

_FOLLOW_UP_PROMPT = """You are a professional communication assistant. Write a polite, concise, and professional follow-up email regarding a job application. The email should be sent about a week after applying.

Job Details:
- Position: {title}
- Company: {company}

Generate only the body of the email. Start with a professional greeting (e.g., "Dear [Hiring Manager name] or Hiring Team,") and end with a professional closing (e.g., "Sincerely,\n[Your Name]")."""


def generate_follow_up(client: AIClient, job: JobPosting) -> str:
    """Return the email body from greeting through closing."""
    prompt = _FOLLOW_UP_PROMPT.format(title=job.title, company=job.company)
    try:
        text = client.generate_text(prompt, model=client.settings.writing_model, max_tokens=500)
    except TransportError as exc:
        log.warning("Follow-up generation failed for %s @ %s: %s", job.title, job.company, exc)
        raise GenerationError(f"Could not generate a follow-up email: {exc}") from exc
    if not text:
        raise GenerationError("The model returned an empty follow-up email")
    log.info("Follow-up email generated for %s @ %s", job.title, job.company)
    return text
