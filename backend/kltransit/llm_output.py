"""
Sanitize-then-parse for collaborator replies.

The LLM is asked for bare JSON but regularly wraps it in markdown fences or
returns numbers as strings. Nothing it returns is trusted: fences are
stripped, the object is parsed, and numeric fields are coerced or dropped.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Optional

from kltransit.exceptions import EmptyModelError, ModelFormatError
from kltransit.models import EstimateCorrection, FareModel, LineFare

logger = logging.getLogger("kltransit.llm_output")

DEFAULT_CURRENCY = "MYR"

_FENCE = re.compile(r"^\s*```[\w-]*[ \t]*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove an enclosing ```/```json fence, if any."""
    stripped = text.strip()
    match = _FENCE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def _extract_object(text: str, error: ValueError) -> Any:
    """Fall back to the outermost {...} span when the reply has prose around it."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ModelFormatError(f"Collaborator reply is not valid JSON: {error}") from error
    try:
        return json.loads(text[start : end + 1])
    except ValueError as e:
        raise ModelFormatError(f"Collaborator reply is not valid JSON: {e}") from e


def parse_json_object(text: Optional[str]) -> dict[str, Any]:
    """Parse the collaborator reply as exactly one JSON object."""
    if not text or not text.strip():
        raise ModelFormatError("Collaborator returned an empty reply")
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        data = _extract_object(cleaned, e)
    if not isinstance(data, dict):
        raise ModelFormatError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def coerce_number(value: Any) -> Optional[float]:
    """Finite float from a number or numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _repair_line(line_id: str, raw: Any) -> Optional[LineFare]:
    if not isinstance(raw, dict):
        logger.warning(f"[FareModel] Dropping line {line_id}: expected an object, got {type(raw).__name__}")
        return None

    values = {}
    for name in LineFare.model_fields:
        number = coerce_number(raw.get(name))
        if number is None:
            logger.warning(f"[FareModel] Dropping line {line_id}: {name}={raw.get(name)!r} is not numeric")
            return None
        values[name] = number

    if values["min_fare"] > values["max_fare"]:
        values["min_fare"], values["max_fare"] = values["max_fare"], values["min_fare"]
    return LineFare(**values)


def parse_fare_model(text: Optional[str]) -> FareModel:
    """
    Turn a raw collaborator reply into a validated FareModel.

    Raises:
        ModelFormatError: reply is not a JSON object
        EmptyModelError: no line survived validation
    """
    data = parse_json_object(text)

    currency = data.get("currency")
    if not isinstance(currency, str) or not currency.strip():
        currency = DEFAULT_CURRENCY

    raw_lines = data.get("lines")
    if not isinstance(raw_lines, dict) or not raw_lines:
        raise EmptyModelError("Fare model has no 'lines' mapping")

    lines = {}
    for line_id, raw in raw_lines.items():
        repaired = _repair_line(str(line_id), raw)
        if repaired is not None:
            lines[str(line_id)] = repaired

    if not lines:
        raise EmptyModelError(f"None of the {len(raw_lines)} lines in the fare model are usable")

    return FareModel(currency=currency.strip(), lines=lines)


def parse_correction(text: Optional[str]) -> dict[str, float]:
    """Keep the known adjustment fields that carry numeric values."""
    data = parse_json_object(text)
    correction = {}
    for name in EstimateCorrection.model_fields:
        number = coerce_number(data.get(name))
        if number is not None:
            correction[name] = number
    if not correction:
        raise ModelFormatError("Estimate reply has no numeric adjustment fields")
    return correction
