"""Validation layer for raw LLM entity-extraction output.

Models are not guaranteed to answer with bare JSON, so parsing runs in
two stages: locate the first balanced ``{...}`` span in the response,
then decode that span into the RawExtraction schema and clean it up.
"""

import json
import math
from typing import Any, List, Optional

from pydantic import ValidationError

from llm_synthesis.schema import (
    DEFAULT_SEARCH_PHRASE,
    DEFAULT_SUMMARY,
    ENTITY_CATEGORIES,
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    EntityExtraction,
    ExtractedEntity,
    RawExtraction,
)

_CATEGORY_LOOKUP = {category.lower(): category for category in ENTITY_CATEGORIES}


class ExtractionError(Exception):
    """Raised when LLM output cannot be turned into an EntityExtraction.

    Attributes:
        stage: Which step failed ("json_locate", "json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"LLM output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def locate_json_object(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span in ``text``.

    Braces inside JSON string literals are ignored, including escaped
    quotes, so values such as ``"a {b}"`` do not break the count.

    Args:
        text: Raw model response.

    Returns:
        The span including both outer braces, or None when no opening
        brace exists or it is never closed.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def clamp_confidence(value: float) -> int:
    """Clamp a model confidence into the accepted [60, 95] band."""
    return int(round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, value))))


def normalize_category(value: Any) -> str:
    """Map a model category onto the known set, defaulting to Other."""
    if not isinstance(value, str):
        return "Other"
    return _CATEGORY_LOOKUP.get(value.strip().lower(), "Other")


def _clean_entities(items: List[Any]) -> List[ExtractedEntity]:
    entities: List[ExtractedEntity] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        confidence = item.get("confidence")
        if not isinstance(name, str) or not name.strip():
            continue
        if not _is_number(confidence):
            continue
        entities.append(
            ExtractedEntity(
                name=name.strip(),
                confidence=clamp_confidence(confidence),
                category=normalize_category(item.get("category")),
            )
        )
    return entities


def _text_or_default(value: Optional[str], default: str) -> str:
    if value is None or not value.strip():
        return default
    return value.strip()


def validate_extraction_output(raw_response: str) -> EntityExtraction:
    """Parse and validate a raw LLM response string.

    Steps:
        1. Locate the first balanced JSON object span.
        2. Parse the span as JSON.
        3. Decode into the RawExtraction schema.
        4. Drop unusable entities, clamp confidences, fill defaults.

    Args:
        raw_response: The raw string returned by the LLM adapter.

    Returns:
        A validated EntityExtraction instance.

    Raises:
        ExtractionError: If no JSON object is found, it does not parse,
            or it does not match the schema.
    """
    span = locate_json_object(raw_response or "")
    if span is None:
        raise ExtractionError(
            stage="json_locate",
            errors=["No JSON found in response"],
            raw_response=raw_response,
        )

    try:
        data = json.loads(span)
    except json.JSONDecodeError as exc:
        raise ExtractionError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    if not isinstance(data, dict):
        raise ExtractionError(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=raw_response,
        )

    try:
        raw = RawExtraction.model_validate(data)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise ExtractionError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        ) from exc

    return EntityExtraction(
        entities=_clean_entities(raw.entities),
        summary=_text_or_default(raw.summary, DEFAULT_SUMMARY),
        search_phrase=_text_or_default(raw.search_phrase, DEFAULT_SEARCH_PHRASE),
    )
