"""
Gemini client for tab summarization and topic classification.

Calls the public generateContent REST endpoint with the key the user stored
through ``setApiKey``. Every failure mode (no key, transport error, non-2xx,
empty candidate, unparseable JSON) is returned as a RemoteFailure so the
orchestrator can fall back to the local classifier; nothing raises past
``classify``.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from tabsense.classification.models import (
    FailureReason,
    RemoteFailure,
    RemoteResult,
    RemoteSuccess,
)
from tabsense.config import (
    GEMINI_API_BASE,
    GEMINI_MAX_OUTPUT_TOKENS,
    GEMINI_MODEL,
    GEMINI_TEMPERATURE,
    GEMINI_TIMEOUT_SECONDS,
    GEMINI_TOP_K,
    GEMINI_TOP_P,
    PIPELINE_PROMPT_TEXT_CHARS,
)
from tabsense.llm.parsing import MalformedResponseError, parse_classification
from tabsense.llm.prompts import get_classifier_prompt
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)


class CredentialProvider(Protocol):
    async def get_api_key(self) -> str | None: ...


def build_request_body(prompt: str) -> dict[str, Any]:
    """generateContent payload with the fixed generation settings."""
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": GEMINI_TEMPERATURE,
            "topK": GEMINI_TOP_K,
            "topP": GEMINI_TOP_P,
            "maxOutputTokens": GEMINI_MAX_OUTPUT_TOKENS,
        },
    }


def extract_candidate_text(payload: Any) -> str:
    """Text at candidates[0].content.parts[0].text, or "" if the path is missing."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


class GeminiClient:
    """
    Remote classifier backed by the Gemini REST API.

    Example:
        >>> client = GeminiClient(credentials=store)
        >>> result = await client.classify(text, "Title", "https://example.com")
        >>> isinstance(result, (RemoteSuccess, RemoteFailure))
        True
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        http_client: httpx.AsyncClient | None = None,
        model: str = GEMINI_MODEL,
        api_base: str = GEMINI_API_BASE,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
    ):
        self._credentials = credentials
        self._http = http_client
        self._owns_http = http_client is None
        self.model = model
        self.endpoint = f"{api_base.rstrip('/')}/models/{model}:generateContent"
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._timeout)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def build_prompt(self, text: str, title: str, url: str) -> str:
        return get_classifier_prompt(
            title=title or "",
            url=url or "",
            content=(text or "")[:PIPELINE_PROMPT_TEXT_CHARS],
        )

    async def classify(self, text: str, title: str, url: str) -> RemoteResult:
        """
        Summarize and classify a page remotely.

        Returns:
            RemoteSuccess with a validated Classification, or RemoteFailure

        Side Effects:
            - Reads the API key from the credential provider
            - POSTs the prompt to Gemini
            - Increments llm.* telemetry counters
        """
        api_key = await self._credentials.get_api_key()
        if not api_key:
            counter("llm.missing_credential")
            logger.info("Gemini API key not set, skipping remote classification")
            return RemoteFailure.missing_credential()

        body = build_request_body(self.build_prompt(text, title, url))

        try:
            with time_block("llm.gemini.latency"):
                response = await self._client().post(
                    self.endpoint,
                    json=body,
                    headers={"x-goog-api-key": api_key},
                )
        except httpx.HTTPError as e:
            return self._failure(FailureReason.NETWORK, f"{type(e).__name__}: {e}")

        if not response.is_success:
            return self._failure(
                FailureReason.HTTP_STATUS,
                f"{response.status_code} {response.reason_phrase}",
            )

        if not response.content.strip():
            return self._failure(FailureReason.EMPTY_RESPONSE, "Empty response body")

        try:
            payload = response.json()
        except ValueError:
            return self._failure(FailureReason.MALFORMED_JSON, "Response body is not JSON")

        response_text = extract_candidate_text(payload)
        if not response_text.strip():
            return self._failure(FailureReason.EMPTY_RESPONSE, "No candidate text")

        try:
            classification = parse_classification(response_text)
        except MalformedResponseError as e:
            return self._failure(FailureReason.MALFORMED_JSON, str(e))

        counter("llm.success")
        log_event("llm.gemini.result", topic=classification.topic.value, model=self.model)
        return RemoteSuccess(classification)

    def _failure(self, reason: FailureReason, detail: str) -> RemoteFailure:
        counter(f"llm.failure.{reason.value}")
        logger.warning("Gemini classification failed (%s): %s", reason.value, detail)
        log_event("llm.gemini.failure", reason=reason.value, model=self.model)
        return RemoteFailure(reason=reason, detail=detail)
