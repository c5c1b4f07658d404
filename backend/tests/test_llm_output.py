"""
Unit tests for sanitizing and parsing collaborator replies.
"""

import json

import pytest

from kltransit.exceptions import EmptyModelError, ModelFormatError
from kltransit.llm_output import (
    coerce_number,
    parse_correction,
    parse_fare_model,
    parse_json_object,
    strip_code_fences,
)

MODEL = {
    "currency": "MYR",
    "lines": {"KJ": {"base": 1.0, "per_km": 0.15, "min_fare": 1.2, "max_fare": 5.7}},
}


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_single_line_fence(self):
        assert strip_code_fences('```{"a": 1}```') == '{"a": 1}'

    def test_unfenced_is_trimmed(self):
        assert strip_code_fences('  {"a": 1}\n') == '{"a": 1}'


@pytest.mark.parametrize(
    "text",
    [
        json.dumps(MODEL),
        "```json\n" + json.dumps(MODEL, indent=2) + "\n```",
        "```\n" + json.dumps(MODEL) + "\n```",
        "Here is the fare model:\n```json\n" + json.dumps(MODEL) + "\n```",
        "Sure! " + json.dumps(MODEL) + " Let me know if you need anything else.",
    ],
)
def test_wrapped_replies_parse_identically(text):
    model = parse_fare_model(text)
    assert model.model_dump() == MODEL


@pytest.mark.parametrize(
    "text", ["", "   ", None, "not json", "[1, 2]", "Here is the model: {oops}", "Here is the model: [1]"]
)
def test_unparseable_reply_raises_format_error(text):
    with pytest.raises(ModelFormatError):
        parse_json_object(text)


def test_empty_lines_raises_empty_model():
    with pytest.raises(EmptyModelError):
        parse_fare_model('{"currency": "MYR", "lines": {}}')


def test_missing_lines_raises_empty_model():
    with pytest.raises(EmptyModelError):
        parse_fare_model('{"currency": "MYR"}')


def test_numeric_strings_are_coerced():
    text = json.dumps({
        "currency": "MYR",
        "lines": {"KJ": {"base": "1.0", "per_km": "0.15", "min_fare": 1.2, "max_fare": "5.7"}},
    })
    model = parse_fare_model(text)
    assert model.lines["KJ"].base == 1.0
    assert model.lines["KJ"].max_fare == 5.7


def test_invalid_lines_are_dropped():
    text = json.dumps({
        "currency": "MYR",
        "lines": {
            "KJ": {"base": 1.0, "per_km": 0.15, "min_fare": 1.2, "max_fare": 5.7},
            "AG": {"base": "cheap", "per_km": 0.1, "min_fare": 1.0, "max_fare": 4.0},
            "SP": {"base": 1.0},
            "MR": 3.5,
        },
    })
    model = parse_fare_model(text)
    assert list(model.lines) == ["KJ"]


def test_all_lines_invalid_raises_empty_model():
    with pytest.raises(EmptyModelError):
        parse_fare_model('{"lines": {"KJ": {"base": null}}}')


def test_missing_currency_defaults_to_myr():
    model = parse_fare_model(json.dumps({"lines": MODEL["lines"]}))
    assert model.currency == "MYR"


def test_inverted_bounds_are_swapped():
    text = json.dumps({"lines": {"KJ": {"base": 1, "per_km": 0.1, "min_fare": 6, "max_fare": 1.2}}})
    line = parse_fare_model(text).lines["KJ"]
    assert (line.min_fare, line.max_fare) == (1.2, 6.0)


class TestCoerceNumber:
    @pytest.mark.parametrize("value,expected", [(1, 1.0), (0.5, 0.5), ("0.2", 0.2), (" -0.1 ", -0.1)])
    def test_numbers(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc", [1], {}, float("inf"), "nan", 10**400])
    def test_non_numbers(self, value):
        assert coerce_number(value) is None


def test_parse_correction_keeps_known_numeric_fields():
    text = json.dumps({
        "time_adjust_transit": 0.1,
        "fare_adjust_transit": "0",
        "time_adjust_grab": "fast",
        "comfort_adjust": -0.05,
        "mood": 1.0,
    })
    assert parse_correction(text) == {
        "time_adjust_transit": 0.1,
        "fare_adjust_transit": 0.0,
        "comfort_adjust": -0.05,
    }


def test_parse_correction_without_fields_raises():
    with pytest.raises(ModelFormatError):
        parse_correction('{"answer": "sunny"}')


def test_line_with_oversized_number_is_dropped():
    text = json.dumps({
        "lines": {
            "KJ": {"base": 1, "per_km": 0.15, "min_fare": 1.2, "max_fare": 5.7},
            "AG": {"base": 10**400, "per_km": 0.18, "min_fare": 1.1, "max_fare": 4.9},
        }
    })
    assert set(parse_fare_model(text).lines) == {"KJ"}


def test_object_is_extracted_from_surrounding_prose():
    assert parse_json_object('Adjustments follow.\n{"comfort_adjust": -0.1}\nHope this helps.') == {
        "comfort_adjust": -0.1
    }
