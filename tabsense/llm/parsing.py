"""
Parsing of free-form Gemini output into a Classification.

The model is asked for bare JSON but often wraps it in prose or a markdown
fence. Extraction tries the greedy outermost ``{...}`` span first and, if that
does not parse, the body of a fenced ```json block.
"""

from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from tabsense.classification.models import MISSING_SUMMARY, Classification
from tabsense.classification.topics import validate_topic
from tabsense.observability.logging import get_logger

logger = get_logger(__name__)

# Greedy so nested objects stay intact; output is capped by maxOutputTokens
OUTER_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
FENCED_OBJECT_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


class MalformedResponseError(ValueError):
    """Raised when no JSON object can be recovered from model output."""


class RemoteClassificationSchema(BaseModel):
    """Shape of the JSON object the prompt asks for."""

    model_config = ConfigDict(extra="ignore")

    summary: str | None = None
    topic: str | None = None


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(text: str) -> dict[str, Any]:
    """
    Recover the JSON object embedded in model output.

    Raises:
        MalformedResponseError: If neither the greedy span nor a fenced block parses
    """
    match = OUTER_OBJECT_RE.search(text)
    if match:
        data = _loads_object(match.group(0))
        if data is not None:
            return data
        logger.debug("Greedy JSON span did not parse, trying fenced block")

    fenced = FENCED_OBJECT_RE.search(text)
    if fenced:
        data = _loads_object(fenced.group(1))
        if data is not None:
            return data

    raise MalformedResponseError("No parseable JSON object in model response")


def parse_classification(text: str) -> Classification:
    """
    Turn raw model text into a validated Classification.

    Unknown topics normalize to ``other``; a missing or blank summary becomes
    the fixed placeholder.

    Raises:
        MalformedResponseError: If the text has no usable JSON object
    """
    data = extract_json_object(text)
    try:
        validated = RemoteClassificationSchema.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected field types: {e.error_count()} errors") from e

    summary = (validated.summary or "").strip() or MISSING_SUMMARY
    return Classification(summary=summary, topic=validate_topic(validated.topic))
