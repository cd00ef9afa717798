"""Data models for profiles, job postings and applications.

Each model decodes itself from the JSON shape the AI service returns
(``from_dict``) and validates every required key on the way in; a missing or
mistyped field raises ``ValueError`` naming the offending path.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

EXPERIENCE_LEVELS: list[str] = ["Any", "Entry-level", "Junior", "Mid-level", "Senior"]


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be an object")
    if key not in data or data[key] is None:
        raise ValueError(f"{where}.{key} is missing")
    return data[key]


def _str(data: Any, key: str, where: str) -> str:
    value = _require(data, key, where)
    if not isinstance(value, str):
        raise ValueError(f"{where}.{key} must be a string")
    return value


def _str_list(data: Any, key: str, where: str) -> list[str]:
    value = _require(data, key, where)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{where}.{key} must be a list of strings")
    return list(value)


def _obj_list(data: Any, key: str, where: str) -> list[Any]:
    value = _require(data, key, where)
    if not isinstance(value, list):
        raise ValueError(f"{where}.{key} must be a list")
    return value


# ── Profile ──────────────────────────────────────────────────────────────


@dataclass
class ContactInfo:
    name: str
    email: str
    phone: str
    location: str

    @classmethod
    def from_dict(cls, data: Any, where: str = "contactInfo") -> ContactInfo:
        return cls(
            name=_str(data, "name", where),
            email=_str(data, "email", where),
            phone=_str(data, "phone", where),
            location=_str(data, "location", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "location": self.location,
        }


@dataclass
class Experience:
    role: str
    company: str
    location: str
    dates: str
    description: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, where: str = "experience") -> Experience:
        return cls(
            role=_str(data, "role", where),
            company=_str(data, "company", where),
            location=_str(data, "location", where),
            dates=_str(data, "dates", where),
            description=_str_list(data, "description", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "company": self.company,
            "location": self.location,
            "dates": self.dates,
            "description": list(self.description),
        }


@dataclass
class Education:
    degree: str
    institution: str
    location: str
    dates: str

    @classmethod
    def from_dict(cls, data: Any, where: str = "education") -> Education:
        return cls(
            degree=_str(data, "degree", where),
            institution=_str(data, "institution", where),
            location=_str(data, "location", where),
            dates=_str(data, "dates", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "degree": self.degree,
            "institution": self.institution,
            "location": self.location,
            "dates": self.dates,
        }


@dataclass
class Skills:
    programming: list[str] = field(default_factory=list)
    technical: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, where: str = "skills") -> Skills:
        return cls(
            programming=_str_list(data, "programming", where),
            technical=_str_list(data, "technical", where),
            languages=_str_list(data, "languages", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "programming": list(self.programming),
            "technical": list(self.technical),
            "languages": list(self.languages),
        }


@dataclass
class Profile:
    contact: ContactInfo
    summary: str
    experience: list[Experience]
    education: list[Education]
    skills: Skills

    @classmethod
    def from_dict(cls, data: Any) -> Profile:
        where = "profile"
        experience = _obj_list(data, "experience", where)
        education = _obj_list(data, "education", where)
        return cls(
            contact=ContactInfo.from_dict(_require(data, "contactInfo", where)),
            summary=_str(data, "summary", where),
            experience=[
                Experience.from_dict(e, f"experience[{i}]") for i, e in enumerate(experience)
            ],
            education=[
                Education.from_dict(e, f"education[{i}]") for i, e in enumerate(education)
            ],
            skills=Skills.from_dict(_require(data, "skills", where)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "contactInfo": self.contact.to_dict(),
            "summary": self.summary,
            "experience": [e.to_dict() for e in self.experience],
            "education": [e.to_dict() for e in self.education],
            "skills": self.skills.to_dict(),
        }


# ── Jobs ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class JobPosting:
    id: str
    title: str
    company: str
    location: str
    description: str
    url: str
    relevance_score: float
    visa_sponsorship: bool
    experience_level: str

    @classmethod
    def from_dict(cls, data: Any, where: str = "job") -> JobPosting:
        job_id = _str(data, "id", where)
        if not job_id.strip():
            raise ValueError(f"{where}.id must not be empty")

        score = _require(data, "relevanceScore", where)
        # bool is an int subclass; reject it explicitly
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ValueError(f"{where}.relevanceScore must be a number")
        if not 0 <= score <= 100:
            raise ValueError(f"{where}.relevanceScore must be between 0 and 100")

        visa = _require(data, "visaSponsorship", where)
        if not isinstance(visa, bool):
            raise ValueError(f"{where}.visaSponsorship must be a boolean")

        return cls(
            id=job_id,
            title=_str(data, "title", where),
            company=_str(data, "company", where),
            location=_str(data, "location", where),
            description=_str(data, "description", where),
            url=_str(data, "url", where),
            relevance_score=score,
            visa_sponsorship=visa,
            experience_level=_str(data, "experienceLevel", where),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "description": self.description,
            "url": self.url,
            "relevanceScore": self.relevance_score,
            "visaSponsorship": self.visa_sponsorship,
            "experienceLevel": self.experience_level,
        }

    @property
    def has_web_url(self) -> bool:
        """True when ``url`` is an absolute http(s) link safe to render."""
        parsed = urlparse(self.url.strip())
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class SearchFilters:
    country: str = ""
    remote_only: bool = False
    visa_sponsorship: bool = False
    experience_level: str = "Any"

    @property
    def constrains_level(self) -> bool:
        level = self.experience_level.strip()
        return bool(level) and level != "Any"


@dataclass(frozen=True)
class SourceCitation:
    uri: str
    title: str = ""


@dataclass
class DiscoveryResult:
    jobs: list[JobPosting]
    sources: list[SourceCitation] = field(default_factory=list)


# ── Applications ─────────────────────────────────────────────────────────


class ApplicationStatus(str, Enum):
    WISHLIST = "Wishlist"
    APPLIED = "Applied"
    INTERVIEWING = "Interviewing"
    OFFER = "Offer"
    REJECTED = "Rejected"


@dataclass
class Application:
    job: JobPosting
    status: ApplicationStatus
    applied_date: str
    cover_letter_snippet: str | None = None
