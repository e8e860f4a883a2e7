"""Tests for the Gemini REST client, with the HTTP layer mocked by httpx.MockTransport."""

import json

import httpx
import pytest
from fakes import StaticCredentials, gemini_payload, mock_http_client

from tabsense.classification.models import FailureReason, RemoteFailure, RemoteSuccess
from tabsense.classification.topics import Topic
from tabsense.config import PIPELINE_PROMPT_TEXT_CHARS
from tabsense.llm.gemini import GeminiClient, build_request_body, extract_candidate_text
from tabsense.observability.telemetry import get_counter

TEXT = "Some page text. " * 20


def make_client(handler, api_key="test-key"):
    return GeminiClient(
        credentials=StaticCredentials(api_key),
        http_client=mock_http_client(handler),
        model="gemini-test",
        api_base="https://gemini.invalid/v1beta",
    )


def json_response(text):
    def handler(request):
        return httpx.Response(200, json=gemini_payload(text))

    return handler


class TestRequestShape:
    def test_generation_config(self):
        body = build_request_body("prompt")
        assert body["contents"] == [{"parts": [{"text": "prompt"}]}]
        assert body["generationConfig"] == {
            "temperature": 0.3,
            "topK": 1,
            "topP": 1.0,
            "maxOutputTokens": 500,
        }

    @pytest.mark.asyncio
    async def test_posts_prompt_with_key_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=gemini_payload('{"summary": "S.", "topic": "news"}'))

        client = make_client(handler)
        await client.classify(TEXT, "My Title", "https://example.com/a")

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://gemini.invalid/v1beta/models/gemini-test:generateContent"
        assert request.headers["x-goog-api-key"] == "test-key"
        prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        assert "Title: My Title" in prompt
        assert "URL: https://example.com/a" in prompt
        assert '"topic": "category_name"' in prompt

    def test_prompt_truncates_text(self):
        client = make_client(json_response("{}"))
        prompt = client.build_prompt("x" * (PIPELINE_PROMPT_TEXT_CHARS + 500), "T", "https://e.com")
        assert "x" * PIPELINE_PROMPT_TEXT_CHARS in prompt
        assert "x" * (PIPELINE_PROMPT_TEXT_CHARS + 1) not in prompt


class TestExtractCandidateText:
    @pytest.mark.parametrize(
        "payload",
        [{}, {"candidates": []}, {"candidates": [{"content": {}}]}, None, "text", {"candidates": [{"content": {"parts": [{"text": 5}]}}]}],
    )
    def test_missing_path_is_empty(self, payload):
        assert extract_candidate_text(payload) == ""

    def test_reads_first_part(self):
        assert extract_candidate_text(gemini_payload("hello")) == "hello"


class TestClassify:
    @pytest.mark.asyncio
    async def test_success(self):
        client = make_client(json_response('{"summary": "A news site.", "topic": "News"}'))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert isinstance(result, RemoteSuccess)
        assert result.classification.summary == "A news site."
        assert result.classification.topic is Topic.NEWS
        assert get_counter("llm.success") == 1

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        client = make_client(handler, api_key=None)
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result == RemoteFailure.missing_credential()
        assert calls == []

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = make_client(lambda request: httpx.Response(429, json={"error": "quota"}))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert isinstance(result, RemoteFailure)
        assert result.reason is FailureReason.HTTP_STATUS
        assert "429" in result.detail
        assert get_counter("llm.failure.http-status") == 1

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result.reason is FailureReason.NETWORK

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result.reason is FailureReason.MALFORMED_JSON

    @pytest.mark.asyncio
    async def test_empty_body(self):
        client = make_client(lambda request: httpx.Response(200, content=b""))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result.reason is FailureReason.EMPTY_RESPONSE
        assert get_counter("llm.failure.empty-response") == 1

    @pytest.mark.asyncio
    async def test_empty_candidate(self):
        client = make_client(lambda request: httpx.Response(200, json={"candidates": []}))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result.reason is FailureReason.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_unparseable_candidate_text(self):
        client = make_client(json_response("I cannot help with that."))
        result = await client.classify(TEXT, "T", "https://example.com")

        assert result.reason is FailureReason.MALFORMED_JSON
        assert get_counter("llm.failure.malformed-json") == 1

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http = mock_http_client(json_response("{}"))
        client = GeminiClient(credentials=StaticCredentials(), http_client=http)
        await client.aclose()
        assert not http.is_closed
        await http.aclose()
