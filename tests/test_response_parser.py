"""Tests for the provider output validation layer."""

import json

import pytest

from server.core.ResponseParser import (
    PARSE_FAILURE_GAP,
    find_json_object,
    parse_answer_response,
)
from shared.models.knowledge import ConfidenceLevel


class TestFindJsonObject:
    def test_no_brace(self):
        assert find_json_object("just prose") is None

    def test_object_embedded_in_prose(self):
        text = 'Sure! Here it is: {"a": 1} Hope that helps. {"b": 2}'
        assert find_json_object(text) == '{"a": 1}'

    def test_nested_objects(self):
        text = 'x {"a": {"b": {"c": 1}}, "d": 2} y'
        assert find_json_object(text) == '{"a": {"b": {"c": 1}}, "d": 2}'

    def test_braces_inside_strings_are_ignored(self):
        text = '{"answer": "use {curly} braces and a \\" quote }"}'
        assert find_json_object(text) == text

    def test_unbalanced(self):
        assert find_json_object('{"answer": "cut off') is None


class TestParseAnswerResponse:
    def test_valid_json(self):
        raw = json.dumps(
            {
                "answer": "Refunds take 14 days [Source: faq.pdf, Refunds].",
                "confidence": "high",
                "key_points": ["14 days"],
                "gaps": [],
                "sources_used": [0, 2],
            }
        )

        result = parse_answer_response(raw)

        assert result.answer.startswith("Refunds take 14 days")
        assert result.confidence == ConfidenceLevel.HIGH
        assert result.key_points == ["14 days"]
        assert result.gaps == []
        assert result.sources_used == [0, 2]

    def test_json_inside_markdown_fence(self):
        raw = '```json\n{"answer": "A", "confidence": "medium", "sources_used": [1]}\n```'

        result = parse_answer_response(raw)

        assert result.answer == "A"
        assert result.confidence == ConfidenceLevel.MEDIUM
        assert result.sources_used == [1]

    def test_plain_prose_falls_back(self):
        raw = "The refund policy is not described in these documents."

        result = parse_answer_response(raw)

        assert result.answer == raw
        assert result.confidence == ConfidenceLevel.LOW
        assert result.key_points == []
        assert result.gaps == [PARSE_FAILURE_GAP]
        assert result.sources_used == []

    def test_invalid_json_falls_back(self):
        raw = "{answer: 'not json', confidence: high}"

        result = parse_answer_response(raw)

        assert result.answer == raw
        assert result.gaps == [PARSE_FAILURE_GAP]

    def test_invalid_confidence_is_coerced_to_low(self):
        raw = json.dumps({"answer": "A", "confidence": "urgent", "sources_used": [0]})

        result = parse_answer_response(raw)

        assert result.confidence == ConfidenceLevel.LOW
        assert result.answer == "A"
        assert result.sources_used == [0]

    def test_wrong_field_types_default_to_empty(self):
        raw = json.dumps({"answer": "A", "confidence": "high", "key_points": "one", "gaps": None, "sources_used": "0,1"})

        result = parse_answer_response(raw)

        assert result.key_points == []
        assert result.gaps == []
        assert result.sources_used == []

    def test_missing_answer_uses_raw_text(self):
        raw = '{"confidence": "medium", "sources_used": [0]}'

        result = parse_answer_response(raw)

        assert result.answer == raw
        assert result.confidence == ConfidenceLevel.MEDIUM

    def test_non_integer_source_entries_are_dropped(self):
        raw = json.dumps({"answer": "A", "sources_used": [0, "1", 2.0, 2.5, True, None, -1]})

        result = parse_answer_response(raw)

        assert result.sources_used == [0, 2, -1]

    @pytest.mark.parametrize("raw", ["", "{", "}", "[1, 2, 3]", "null", '{"a": }', "\x00\x01"])
    def test_never_raises(self, raw):
        result = parse_answer_response(raw)

        assert result.confidence == ConfidenceLevel.LOW
        assert result.gaps == [PARSE_FAILURE_GAP]

    def test_deeply_nested_json_falls_back(self):
        raw = '{"answer": "x", "key_points": ' + "[" * 100000 + "]" * 100000 + "}"

        result = parse_answer_response(raw)

        assert result.answer == raw
        assert result.confidence == ConfidenceLevel.LOW
        assert result.gaps == [PARSE_FAILURE_GAP]
