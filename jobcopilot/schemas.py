"""JSON schemas sent to the AI service.

``PROFILE_SCHEMA`` is used in structured-output mode, which requires every
object to list all of its properties as required and to forbid extras.
``JOBS_SCHEMA`` is only embedded in the discovery prompt as text.
"""
from __future__ import annotations

from typing import Any


def _object(properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


_STRING: dict[str, Any] = {"type": "string"}
_STRING_LIST: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

PROFILE_SCHEMA: dict[str, Any] = _object(
    {
        "contactInfo": _object(
            {
                "name": _STRING,
                "email": _STRING,
                "phone": _STRING,
                "location": _STRING,
            }
        ),
        "summary": {
            "type": "string",
            "description": (
                "A professional summary of 2-4 sentences. If not present in the "
                "resume, generate one based on the experience."
            ),
        },
        "experience": {
            "type": "array",
            "items": _object(
                {
                    "role": _STRING,
                    "company": _STRING,
                    "location": _STRING,
                    "dates": _STRING,
                    "description": _STRING_LIST,
                }
            ),
        },
        "education": {
            "type": "array",
            "items": _object(
                {
                    "degree": _STRING,
                    "institution": _STRING,
                    "location": _STRING,
                    "dates": _STRING,
                }
            ),
        },
        "skills": _object(
            {
                "programming": _STRING_LIST,
                "technical": _STRING_LIST,
                "languages": _STRING_LIST,
            }
        ),
    }
)

JOBS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "id": {"type": "string", "description": "A unique ID for the job posting."},
            "title": _STRING,
            "company": _STRING,
            "location": _STRING,
            "description": {
                "type": "string",
                "description": "A detailed job description of 3-5 sentences.",
            },
            "url": {"type": "string", "description": "The direct URL to the job posting."},
            "relevanceScore": {
                "type": "number",
                "description": (
                    "A score from 0 to 100 indicating how relevant this job is to the resume."
                ),
            },
            "visaSponsorship": {
                "type": "boolean",
                "description": (
                    "Whether the company is known to sponsor visas for this role. Set to "
                    "true if visa sponsorship is mentioned or likely, otherwise false."
                ),
            },
            "experienceLevel": {
                "type": "string",
                "description": (
                    "The experience level required for the job "
                    "(e.g., Entry-level, Mid-level, Senior)."
                ),
            },
        },
        "required": [
            "id",
            "title",
            "company",
            "location",
            "description",
            "url",
            "relevanceScore",
            "visaSponsorship",
            "experienceLevel",
        ],
    },
}
