"""Thin wrapper around the OpenAI SDK — the only place that talks to the network.

One ``AIClient`` is built at startup from ``Settings`` and handed to every
service function; nothing reads the credential from global state.
"""
from __future__ import annotations

from typing import Any

from openai import OpenAI, OpenAIError

from jobcopilot.config import Settings
from jobcopilot.errors import TransportError
from jobcopilot.log import get_logger
from jobcopilot.models import SourceCitation

log = get_logger(__name__)

WEB_SEARCH_TOOL: dict[str, str] = {"type": "web_search_preview"}


def document_part(mime_type: str, data_b64: str) -> dict[str, Any]:
    """Chat content part carrying an uploaded image or PDF inline."""
    data_url = f"data:{mime_type};base64,{data_b64}"
    if mime_type == "application/pdf":
        return {"type": "file", "file": {"filename": "resume.pdf", "file_data": data_url}}
    return {"type": "image_url", "image_url": {"url": data_url}}


def collect_citations(response: Any) -> list[SourceCitation]:
    """Pull ``url_citation`` annotations out of a Responses API result.

    Citations without a URL are dropped and repeated URLs collapse to the
    first occurrence.
    """
    citations: list[SourceCitation] = []
    seen: set[str] = set()
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for part in getattr(item, "content", None) or []:
            for ann in getattr(part, "annotations", None) or []:
                if getattr(ann, "type", None) != "url_citation":
                    continue
                uri = (getattr(ann, "url", "") or "").strip()
                if not uri or uri in seen:
                    continue
                seen.add(uri)
                citations.append(SourceCitation(uri=uri, title=(getattr(ann, "title", "") or "").strip()))
    return citations


class AIClient:
    """Issues the three kinds of calls the assistant needs.

    The SDK's own retries are disabled: a failed call surfaces immediately and
    the user re-triggers the action.
    """

    def __init__(self, settings: Settings, sdk: OpenAI | None = None) -> None:
        self.settings = settings
        self._sdk = sdk or OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            max_retries=0,
        )

    def generate_json(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        schema_name: str,
        model: str,
        document: tuple[str, str] | None = None,
    ) -> str:
        """Structured-output call; returns the raw JSON text of the answer."""
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        if document is not None:
            content.append(document_part(*document))
        log.info("Structured call (%s) with schema '%s'", model, schema_name)
        try:
            resp = self._sdk.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema, "strict": True},
                },
            )
        except OpenAIError as exc:
            log.error("Structured call failed: %s", exc)
            raise TransportError(str(exc)) from exc
        return _first_choice_text(resp)

    def generate_text(self, prompt: str, *, model: str, max_tokens: int | None = None) -> str:
        """Free-text call; returns the answer stripped of surrounding whitespace."""
        log.info("Text call (%s)", model)
        kwargs: dict[str, Any] = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        try:
            resp = self._sdk.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except OpenAIError as exc:
            log.error("Text call failed: %s", exc)
            raise TransportError(str(exc)) from exc
        return _first_choice_text(resp)

    def search_web(self, prompt: str, *, model: str) -> tuple[str, list[SourceCitation]]:
        """Web-search-augmented call; returns the answer text and its citations."""
        log.info("Web search call (%s)", model)
        try:
            resp = self._sdk.responses.create(
                model=model,
                tools=[WEB_SEARCH_TOOL],
                input=prompt,
            )
        except OpenAIError as exc:
            log.error("Web search call failed: %s", exc)
            raise TransportError(str(exc)) from exc
        text = (getattr(resp, "output_text", "") or "").strip()
        citations = collect_citations(resp)
        log.info("Web search answered — %d chars, %d citation(s)", len(text), len(citations))
        return text, citations


def _first_choice_text(resp: Any) -> str:
    choice = resp.choices[0] if resp.choices else None
    if not choice or not choice.message:
        return ""
    return (choice.message.content or "").strip()
