"""Extract a structured profile from an uploaded resume image or PDF.

The document is sent inline to the AI service in structured-output mode with
the strict profile schema. The service is not trusted to obey the schema, so
the decoded payload is validated key by key before a Profile is returned.
"""
from __future__ import annotations

import base64
import json
import mimetypes

from jobcopilot.client import AIClient
from jobcopilot.errors import ParseError, UnsupportedDocumentError
from jobcopilot.log import get_logger
from jobcopilot.models import Profile
from jobcopilot.schemas import PROFILE_SCHEMA

log = get_logger(__name__)

SUPPORTED_IMAGE_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp", "image/gif")
PDF_TYPE = "application/pdf"
UPLOAD_EXTENSIONS: list[str] = ["png", "jpg", "jpeg", "webp", "gif", "pdf"]

_EXTRACT_PROMPT = (
    "Parse the provided resume image and extract the information into a "
    "structured JSON format. Act as an expert HR professional. Ensure all "
    "fields in the schema are populated accurately."
)

# ── Upload handling ──────────────────────────────────────────────────────


def detect_media_type(filename: str, declared: str | None = None) -> str:
    """Resolve the media type of an upload, preferring the browser's claim."""
    media = (declared or "").split(";")[0].strip().lower()
    if not media or media == "application/octet-stream":
        media = (mimetypes.guess_type(filename)[0] or "").lower()
    if media == "image/jpg":
        media = "image/jpeg"
    if media != PDF_TYPE and media not in SUPPORTED_IMAGE_TYPES:
        raise UnsupportedDocumentError(
            f"Unsupported file type for {filename or 'upload'}: {media or 'unknown'}. "
            "Upload an image or a PDF."
        )
    return media


def encode_upload(data: bytes) -> str:
    """Base64-encode the whole upload for inline transmission."""
    if not data:
        raise UnsupportedDocumentError("The uploaded file is empty")
    return base64.b64encode(data).decode("ascii")


# ── Extraction ───────────────────────────────────────────────────────────


def decode_profile(raw: str) -> Profile:
    """Decode and validate the service's JSON answer; partial payloads fail."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"The model returned invalid JSON for the resume: {exc.msg}") from exc
    try:
        return Profile.from_dict(payload)
    except ValueError as exc:
        raise ParseError(f"The extracted resume is incomplete: {exc}") from exc


def extract_profile(client: AIClient, mime_type: str, data_b64: str) -> Profile:
    """Send the document to the AI service and return the parsed Profile.

    Raises ParseError when the answer cannot be decoded into a complete
    profile; transport failures propagate as TransportError. No retry.
    """
    if mime_type != PDF_TYPE and mime_type not in SUPPORTED_IMAGE_TYPES:
        raise UnsupportedDocumentError(f"Unsupported media type: {mime_type}")
    if not data_b64:
        raise UnsupportedDocumentError("The uploaded file is empty")

    raw = client.generate_json(
        _EXTRACT_PROMPT,
        PROFILE_SCHEMA,
        schema_name="resume_profile",
        model=client.settings.extraction_model,
        document=(mime_type, data_b64),
    )
    if not raw:
        raise ParseError("The model returned an empty answer for the resume")

    profile = decode_profile(raw)
    log.info(
        "Resume parsed — name=%s, experience=%d, education=%d",
        profile.contact.name,
        len(profile.experience),
        len(profile.education),
    )
    return profile
