"""Generate a two-sentence cover-letter opening for a job."""
from __future__ import annotations

import json

from jobcopilot.client import AIClient
from jobcopilot.errors import GenerationError, TransportError
from jobcopilot.log import get_logger
from jobcopilot.models import JobPosting, Profile

log = get_logger(__name__)

_SNIPPET_PROMPT = """You are a career coach. Based on the candidate's resume and this job description, write a compelling, concise, and professional two-sentence opening for a cover letter. This snippet will be used for an 'auto-apply' feature, so it must be impactful and highlight the most relevant skills and experience.

Candidate's Resume:
{resume_json}

Job Posting:
Title: {title}
Company: {company}
Description: {description}"""


def generate_snippet(client: AIClient, profile: Profile, job: JobPosting) -> str:
    """Return the trimmed snippet text, or raise GenerationError."""
    prompt = _SNIPPET_PROMPT.format(
        resume_json=json.dumps(profile.to_dict(), indent=2),
        title=job.title,
        company=job.company,
        description=job.description,
    )
    try:
        text = client.generate_text(prompt, model=client.settings.writing_model, max_tokens=300)
    except TransportError as exc:
        log.warning("Snippet generation failed for %s @ %s: %s", job.title, job.company, exc)
        raise GenerationError(f"Could not generate a cover letter snippet: {exc}") from exc
    if not text:
        raise GenerationError("The model returned an empty cover letter snippet")
    log.info("Cover letter snippet generated for %s @ %s", job.title, job.company)
    return text
