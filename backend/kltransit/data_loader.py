import json
import logging
import math
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from kltransit.exceptions import DataLoadError
from kltransit.models import Station

logger = logging.getLogger("kltransit.data")


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise DataLoadError(f"{path.name} not found at {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(f"Failed to parse {path}: {e}") from e


def load_fares(path: Path) -> dict[str, Any]:
    """Load fares.json: line id -> {"FROM||TO": fare}."""
    fares = _read_json(path)
    if not isinstance(fares, dict):
        raise DataLoadError(f"{path.name} must be a JSON object keyed by line id")
    logger.info(f"Loaded fares for {len(fares)} lines from {path}")
    return fares


def load_stations(path: Path) -> list[Station]:
    """Load station.json, dropping records without a name or usable coordinates."""
    raw = _read_json(path)
    if not isinstance(raw, list):
        raise DataLoadError(f"{path.name} must be a JSON array of stations")

    stations = []
    dropped = 0
    for record in raw:
        if not isinstance(record, dict) or not record.get("name"):
            dropped += 1
            continue
        try:
            st = Station(name=str(record["name"]), lat=record.get("lat"), lng=record.get("lng"))
        except ValidationError:
            dropped += 1
            continue
        if not (math.isfinite(st.lat) and math.isfinite(st.lng)):
            dropped += 1
            continue
        stations.append(st)

    if dropped:
        logger.warning(f"Dropped {dropped} station records without a name or valid coordinates")
    logger.info(f"Loaded {len(stations)} stations from {path}")
    return stations
