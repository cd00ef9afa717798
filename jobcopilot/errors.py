"""Error types raised by the assistant's services."""
from __future__ import annotations


class JobCopilotError(Exception):
    """Base class for every error the services raise on purpose."""


class ConfigError(JobCopilotError):
    """Settings are missing or malformed."""


class MissingCredentialError(ConfigError):
    """The API credential is not set; the app cannot start without it."""


class TransportError(JobCopilotError):
    """The remote AI service could not be reached or rejected the call."""


class ParseError(JobCopilotError):
    """Profile extraction produced an undecodable or incomplete payload."""


class UnsupportedDocumentError(ParseError):
    """The uploaded file is empty or is neither an image nor a PDF."""


class DiscoveryError(JobCopilotError):
    """The job-search answer could not be decoded into job postings."""


class GenerationError(JobCopilotError):
    """A text-generation call (snippet or follow-up) failed."""
