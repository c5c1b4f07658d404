"""
Canonical forms for station names and line identifiers.

fares.json and station.json come from different upstream sources and spell
the same station differently ("KL Sentral", "KL-SENTRAL", "kl sentral'").
Both sides of the join go through ``normalize_name`` before matching.
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger("kltransit.normalize")

_APOSTROPHES = re.compile(r"['’]")
_WHITESPACE = re.compile(r"\s+")

# Line code normalization mapping (variant -> canonical code)
DEFAULT_LINE_ALIASES: dict[str, str] = {
    # LRT Kelana Jaya / Ampang / Sri Petaling, "L"-suffixed variants
    "KJL": "KJ", "AGL": "AG", "SPL": "SP",
    # KL Monorail
    "MRL": "MR", "MONO": "MR",
    # MRT Kajang line, including the legacy Sungai Buloh-Kajang codes
    "KGL": "KG", "SBK": "KG", "MRT1": "KG",
    # MRT Putrajaya line, including the legacy Sungai Buloh-Serdang-Putrajaya codes
    "PYL": "PY", "SSP": "PY", "MRT2": "PY",
    # BRT Sunway
    "BRT": "BRT", "SBRT": "BRT", "BRTL": "BRT",
}


def normalize_name(raw: Optional[str]) -> str:
    """
    Canonicalize a station name for joining.

    Uppercases, strips apostrophes, turns hyphens into spaces and collapses
    whitespace. Idempotent: normalize_name(normalize_name(x)) == normalize_name(x).
    """
    if raw is None:
        return ""
    name = _APOSTROPHES.sub("", str(raw).upper())
    name = name.replace("-", " ")
    return _WHITESPACE.sub(" ", name).strip()


def normalize_line_id(raw: Optional[str], aliases: Optional[dict[str, str]] = None) -> Optional[str]:
    """Map a raw line id onto its canonical code, or None when there is no id."""
    if raw is None:
        return None
    line_id = str(raw).strip().upper()
    if not line_id:
        return None
    table = DEFAULT_LINE_ALIASES if aliases is None else aliases
    return table.get(line_id, line_id)


def load_line_aliases(path: Optional[Path]) -> dict[str, str]:
    """Default alias table merged with overrides from a JSON object file."""
    aliases = dict(DEFAULT_LINE_ALIASES)
    if path is None:
        return aliases

    if not path.exists():
        logger.warning(f"Line alias file {path} not found, using built-in aliases")
        return aliases

    try:
        overrides = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read line aliases from {path}: {e}. Using built-in aliases")
        return aliases

    if not isinstance(overrides, dict):
        logger.warning(f"Line alias file {path} is not a JSON object, ignoring it")
        return aliases

    for variant, canonical in overrides.items():
        if not isinstance(canonical, str) or not canonical.strip():
            logger.warning(f"Ignoring alias {variant!r}: canonical code must be a non-empty string")
            continue
        aliases[str(variant).strip().upper()] = canonical.strip().upper()

    logger.info(f"Loaded {len(overrides)} line alias overrides from {path}")
    return aliases
