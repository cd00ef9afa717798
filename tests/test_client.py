"""Tests for the OpenAI SDK wrapper, using a stand-in SDK object."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from openai import OpenAIError

from jobcopilot.client import AIClient, collect_citations, document_part
from jobcopilot.config import Settings
from jobcopilot.errors import TransportError
from jobcopilot.models import SourceCitation


class _Recorder:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.kwargs: dict = {}

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.result


def _chat_result(content: str | None):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _sdk(chat=None, responses=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=chat or _Recorder()),
        responses=responses or _Recorder(),
    )


def _citation(url: str, title: str = ""):
    return SimpleNamespace(type="url_citation", url=url, title=title)


SETTINGS = Settings(api_key="k")


class TestDocumentPart:
    def test_image_is_data_url(self) -> None:
        part = document_part("image/png", "QUJD")
        assert part == {"type": "image_url", "image_url": {"url": "data:image/png;base64,QUJD"}}

    def test_pdf_is_file_part(self) -> None:
        part = document_part("application/pdf", "QUJD")
        assert part["type"] == "file"
        assert part["file"]["file_data"] == "data:application/pdf;base64,QUJD"


class TestCollectCitations:
    """Citations come from url_citation annotations on output messages."""

    def test_collects_and_dedupes(self) -> None:
        response = SimpleNamespace(
            output=[
                SimpleNamespace(type="web_search_call"),
                SimpleNamespace(
                    type="message",
                    content=[
                        SimpleNamespace(
                            annotations=[
                                _citation("https://a.example.com", "A"),
                                _citation("https://b.example.com", "B"),
                                _citation("https://a.example.com", "A again"),
                                _citation("", "no url"),
                                SimpleNamespace(type="file_citation"),
                            ]
                        )
                    ],
                ),
            ]
        )
        assert collect_citations(response) == [
            SourceCitation(uri="https://a.example.com", title="A"),
            SourceCitation(uri="https://b.example.com", title="B"),
        ]

    def test_no_output_means_no_citations(self) -> None:
        assert collect_citations(SimpleNamespace(output=None)) == []


class TestAIClient:
    """Each call kind maps to one SDK request; SDK errors become TransportError."""

    def test_generate_json_requests_strict_schema(self) -> None:
        chat = _Recorder(result=_chat_result('  {"a": 1} '))
        client = AIClient(SETTINGS, sdk=_sdk(chat=chat))
        out = client.generate_json(
            "parse", {"type": "object"}, schema_name="resume_profile", model="m", document=("image/png", "QUJD")
        )
        assert out == '{"a": 1}'
        fmt = chat.kwargs["response_format"]
        assert fmt["type"] == "json_schema"
        assert fmt["json_schema"]["strict"] is True
        assert fmt["json_schema"]["name"] == "resume_profile"
        content = chat.kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "parse"}
        assert content[1]["type"] == "image_url"

    def test_generate_text_strips_answer(self) -> None:
        chat = _Recorder(result=_chat_result("\n Hello there. \n"))
        client = AIClient(SETTINGS, sdk=_sdk(chat=chat))
        assert client.generate_text("hi", model="m") == "Hello there."
        assert chat.kwargs["model"] == "m"
        assert "max_tokens" not in chat.kwargs

    def test_empty_choice_is_empty_text(self) -> None:
        client = AIClient(SETTINGS, sdk=_sdk(chat=_Recorder(result=_chat_result(None))))
        assert client.generate_text("hi", model="m") == ""

    def test_search_web_uses_web_search_tool(self) -> None:
        response = SimpleNamespace(
            output_text=' [{"id": "a"}] ',
            output=[
                SimpleNamespace(
                    type="message",
                    content=[SimpleNamespace(annotations=[_citation("https://x.example.com", "X")])],
                )
            ],
        )
        responses = _Recorder(result=response)
        client = AIClient(SETTINGS, sdk=_sdk(responses=responses))
        text, sources = client.search_web("find", model="search-model")
        assert text == '[{"id": "a"}]'
        assert sources == [SourceCitation(uri="https://x.example.com", title="X")]
        assert responses.kwargs["tools"] == [{"type": "web_search_preview"}]
        assert responses.kwargs["input"] == "find"

    @pytest.mark.parametrize("method", ["json", "text", "search"])
    def test_sdk_errors_become_transport_errors(self, method) -> None:
        boom = OpenAIError("network down")
        client = AIClient(SETTINGS, sdk=_sdk(chat=_Recorder(error=boom), responses=_Recorder(error=boom)))
        with pytest.raises(TransportError, match="network down"):
            if method == "json":
                client.generate_json("p", {}, schema_name="s", model="m")
            elif method == "text":
                client.generate_text("p", model="m")
            else:
                client.search_web("p", model="m")
