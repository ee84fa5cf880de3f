"""Validation layer for raw provider output.

This is the only place that trusts the shape of what a text-generation backend
returns. parse_answer_response() never raises: malformed output degrades to a
low-confidence passthrough answer.
"""

import json

from shared.models.knowledge import AnswerResult, ConfidenceLevel

PARSE_FAILURE_GAP = "Unable to parse structured response"


def find_json_object(text: str) -> str | None:
    """Return the first balanced {...} substring of text.

    Braces inside JSON string literals are ignored.

    Args:
        text (str): Raw provider output.

    Returns:
        str | None: The candidate object text, or None if no balanced object exists.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        char = text[pos]
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
                return text[start:pos + 1]
    return None


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _index_list(value) -> list[int]:
    if not isinstance(value, list):
        return []
    indices: list[int] = []
    for item in value:
        # bool is an int subclass
        if isinstance(item, bool):
            continue
        if isinstance(item, int):
            indices.append(item)
        elif isinstance(item, float) and item.is_integer():
            indices.append(int(item))
    return indices


def _confidence(value) -> ConfidenceLevel:
    try:
        return ConfidenceLevel(value)
    except (ValueError, TypeError):
        return ConfidenceLevel.LOW


def fallback_answer(raw_text: str) -> AnswerResult:
    """The degraded answer used when provider output cannot be parsed."""
    return AnswerResult(
        answer=raw_text,
        confidence=ConfidenceLevel.LOW,
        key_points=[],
        gaps=[PARSE_FAILURE_GAP],
        sources_used=[],
    )


def parse_answer_response(raw_text: str) -> AnswerResult:
    """Extract and coerce a structured answer from raw provider text.

    Args:
        raw_text (str): The provider's reply.

    Returns:
        AnswerResult: The coerced answer, or the fallback answer on any parse failure.
    """
    raw_text = raw_text if isinstance(raw_text, str) else ""
    candidate = find_json_object(raw_text)
    if candidate is None:
        return fallback_answer(raw_text)

    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError):
        # json raises RecursionError on pathologically nested arrays
        return fallback_answer(raw_text)
    if not isinstance(parsed, dict):
        return fallback_answer(raw_text)

    answer = parsed.get("answer")
    return AnswerResult(
        answer=answer if isinstance(answer, str) and answer else raw_text,
        confidence=_confidence(parsed.get("confidence")),
        key_points=_string_list(parsed.get("key_points")),
        gaps=_string_list(parsed.get("gaps")),
        sources_used=_index_list(parsed.get("sources_used")),
    )
