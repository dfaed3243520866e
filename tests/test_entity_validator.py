import json

import pytest

from llm_synthesis.adapter import MockLLMAdapter, build_llm_adapter
from llm_synthesis.prompt_builder import EntityPromptBuilder
from llm_synthesis.schema import DEFAULT_SEARCH_PHRASE, DEFAULT_SUMMARY
from llm_synthesis.validator import (
    ExtractionError,
    locate_json_object,
    validate_extraction_output,
)


def _payload(**overrides) -> dict:
    data = {
        "entities": [
            {"name": "Payments API", "confidence": 90, "category": "Technology"},
        ],
        "summary": "Acme sells payment tooling.",
        "searchPhrase": "payment api platform",
    }
    data.update(overrides)
    return data


class TestLocateJsonObject:
    def test_returns_first_balanced_span(self) -> None:
        text = 'Sure! {"a": {"b": 1}} and then {"c": 2}'
        assert locate_json_object(text) == '{"a": {"b": 1}}'

    def test_ignores_braces_inside_strings(self) -> None:
        text = 'prefix {"summary": "uses {curly} and \\"quoted }\\" text"} suffix'
        span = locate_json_object(text)
        assert span is not None
        assert json.loads(span)["summary"] == 'uses {curly} and "quoted }" text'

    def test_none_without_opening_brace(self) -> None:
        assert locate_json_object("no json here") is None

    def test_none_when_never_closed(self) -> None:
        assert locate_json_object('{"entities": [') is None


class TestValidateExtractionOutput:
    def test_clamps_confidence_into_band(self) -> None:
        raw = json.dumps(
            _payload(
                entities=[
                    {"name": "High", "confidence": 150, "category": "Product"},
                    {"name": "Low", "confidence": 10, "category": "Product"},
                    {"name": "Fractional", "confidence": 72.6, "category": "Product"},
                ]
            )
        )
        result = validate_extraction_output(raw)
        assert [entity.confidence for entity in result.entities] == [95, 60, 73]

    def test_accepts_json_wrapped_in_prose(self) -> None:
        raw = "Here is the analysis:\n```json\n" + json.dumps(_payload()) + "\n```\nThanks!"
        result = validate_extraction_output(raw)
        assert result.entities[0].name == "Payments API"
        assert result.search_phrase == "payment api platform"
        assert result.summary == "Acme sells payment tooling."

    def test_no_json_raises_locate_error(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            validate_extraction_output("I could not analyze this page.")
        assert exc_info.value.stage == "json_locate"
        assert exc_info.value.errors == ["No JSON found in response"]

    def test_malformed_json_raises_parse_error(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            validate_extraction_output('{"entities": [}')
        assert exc_info.value.stage == "json_parse"
        assert exc_info.value.raw_response == '{"entities": [}'

    def test_wrong_shape_raises_schema_error(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            validate_extraction_output('{"entities": "none"}')
        assert exc_info.value.stage == "schema"

    def test_drops_unusable_entities(self) -> None:
        raw = json.dumps(
            _payload(
                entities=[
                    {"confidence": 80, "category": "Product"},
                    {"name": "   ", "confidence": 80},
                    {"name": "No Confidence"},
                    {"name": "Text Confidence", "confidence": "80"},
                    {"name": "Bool Confidence", "confidence": True},
                    "not an object",
                    {"name": "  Kept  ", "confidence": 80},
                ]
            )
        )
        result = validate_extraction_output(raw)
        assert [entity.name for entity in result.entities] == ["Kept"]

    def test_missing_fields_use_defaults(self) -> None:
        result = validate_extraction_output('{"entities": null, "summary": "  "}')
        assert result.entities == []
        assert result.summary == DEFAULT_SUMMARY
        assert result.search_phrase == DEFAULT_SEARCH_PHRASE

    def test_category_is_normalized(self) -> None:
        raw = json.dumps(
            _payload(
                entities=[
                    {"name": "A", "confidence": 80, "category": "technology"},
                    {"name": "B", "confidence": 80, "category": "Marketing"},
                    {"name": "C", "confidence": 80},
                ]
            )
        )
        result = validate_extraction_output(raw)
        assert [entity.category for entity in result.entities] == [
            "Technology",
            "Other",
            "Other",
        ]


def test_mock_adapter_output_validates() -> None:
    result = validate_extraction_output(MockLLMAdapter().generate("ignored"))
    assert len(result.entities) == 3
    assert result.search_phrase == "customer analytics cloud platform"


def test_build_llm_adapter_rejects_unknown_name() -> None:
    assert isinstance(build_llm_adapter("MOCK"), MockLLMAdapter)
    with pytest.raises(ValueError):
        build_llm_adapter("gemini")


def test_prompt_truncates_content_and_names_site() -> None:
    prompt = EntityPromptBuilder(content_length=10).build_prompt("0123456789ABCDEF", "https://acme.io")
    assert "0123456789" in prompt
    assert "ABCDEF" not in prompt
    assert prompt.endswith("Website: https://acme.io")
    assert '"searchPhrase"' in prompt
