"""Load environment and settings configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobcopilot.errors import ConfigError, MissingCredentialError
from jobcopilot.log import get_logger

log = get_logger(__name__)

load_dotenv()

CONFIG_DIR: Path = Path(__file__).resolve().parent.parent / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"

API_KEY_VAR = "OPENAI_API_KEY"

DEFAULT_MODELS: dict[str, str] = {
    "extraction": "gpt-4o-mini",
    "discovery": "gpt-4o",
    "writing": "gpt-4o-mini",
}
DEFAULT_TARGET_JOB_COUNT = 8
DEFAULT_ROLE_CATEGORIES: list[str] = [
    "Data Scientist",
    "Business Intelligence Engineer",
    "Data Analyst",
]
DEFAULT_JOB_BOARDS: list[str] = ["LinkedIn", "Greenhouse", "Indeed"]


@dataclass(frozen=True)
class Settings:
    api_key: str = field(repr=False)
    base_url: str | None = None
    extraction_model: str = DEFAULT_MODELS["extraction"]
    discovery_model: str = DEFAULT_MODELS["discovery"]
    writing_model: str = DEFAULT_MODELS["writing"]
    target_job_count: int = DEFAULT_TARGET_JOB_COUNT
    role_categories: tuple[str, ...] = tuple(DEFAULT_ROLE_CATEGORIES)
    job_boards: tuple[str, ...] = tuple(DEFAULT_JOB_BOARDS)


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def load_settings_file(path: Path | None = None) -> dict[str, Any]:
    """Read the YAML settings file; a missing file means all defaults."""
    path = path or SETTINGS_PATH
    if not path.exists():
        log.debug("No settings file at %s — using defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the top level")
    return data


def _str_list(value: Any, key: str, default: list[str]) -> tuple[str, ...]:
    if value is None:
        return tuple(default)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    items = [v.strip() for v in value if v.strip()]
    return tuple(items or default)


def load_settings(path: Path | None = None) -> Settings:
    """Build the process-wide Settings.

    Raises MissingCredentialError immediately when the API key is absent, so
    the caller can refuse to start rather than fail on first use.
    """
    api_key = get_env(API_KEY_VAR)
    if not api_key:
        log.error("%s is not set — cannot start", API_KEY_VAR)
        raise MissingCredentialError(f"{API_KEY_VAR} environment variable is not set")

    data = load_settings_file(path)
    models = data.get("models") or {}
    if not isinstance(models, dict):
        raise ConfigError("'models' must be a mapping")

    def _model(kind: str) -> str:
        return (
            get_env(f"JOBCOPILOT_{kind.upper()}_MODEL")
            or str(models.get(kind) or "").strip()
            or DEFAULT_MODELS[kind]
        )

    discovery = data.get("discovery") or {}
    try:
        target = int(discovery.get("target_job_count", DEFAULT_TARGET_JOB_COUNT))
    except (TypeError, ValueError) as exc:
        raise ConfigError("'discovery.target_job_count' must be an integer") from exc
    if target < 1:
        raise ConfigError("'discovery.target_job_count' must be at least 1")

    settings = Settings(
        api_key=api_key,
        base_url=get_env("OPENAI_BASE_URL") or None,
        extraction_model=_model("extraction"),
        discovery_model=_model("discovery"),
        writing_model=_model("writing"),
        target_job_count=target,
        role_categories=_str_list(
            discovery.get("role_categories"), "discovery.role_categories", DEFAULT_ROLE_CATEGORIES
        ),
        job_boards=_str_list(
            discovery.get("job_boards"), "discovery.job_boards", DEFAULT_JOB_BOARDS
        ),
    )
    log.info(
        "Settings loaded — extraction=%s, discovery=%s, writing=%s",
        settings.extraction_model,
        settings.discovery_model,
        settings.writing_model,
    )
    return settings
