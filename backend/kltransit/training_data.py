"""
Per-line training samples for the fare model.

Joins fares.json (line -> {"FROM||TO": fare}) to station.json coordinates by
normalized station name and turns every usable pair into a
(distance_km, fare) observation. Bad records are skipped, never raised:
each skip is returned in ``TrainingSetResult.skipped`` and logged.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional

from kltransit.geo import haversine
from kltransit.models import Station, TrainingSample
from kltransit.normalize import normalize_line_id, normalize_name

logger = logging.getLogger("kltransit.training_data")

KEY_SEPARATOR = "||"

TrainingSet = dict[str, list[TrainingSample]]


class SkipReason(str, Enum):
    INVALID_LINE = "invalid_line"
    NON_NUMERIC_FARE = "non_numeric_fare"
    MALFORMED_KEY = "malformed_key"
    UNKNOWN_STATION = "unknown_station"
    INVALID_DISTANCE = "invalid_distance"


@dataclass(frozen=True)
class SkippedEntry:
    line: str
    key: Optional[str]
    reason: SkipReason
    detail: str = ""


@dataclass
class TrainingSetResult:
    samples: TrainingSet = field(default_factory=dict)
    skipped: list[SkippedEntry] = field(default_factory=list)

    @property
    def sample_count(self) -> int:
        return sum(len(s) for s in self.samples.values())

    def skip_counts(self) -> dict[str, int]:
        return dict(Counter(s.reason.value for s in self.skipped))


def index_stations(stations: Iterable[Station]) -> dict[str, Station]:
    """Index stations by normalized name. Later duplicates overwrite earlier ones."""
    index: dict[str, Station] = {}
    for st in stations:
        key = normalize_name(st.name)
        if not key:
            continue
        if key in index:
            logger.warning(
                f"Duplicate station name after normalization: {key!r} "
                f"({index[key].lat}, {index[key].lng}) replaced by ({st.lat}, {st.lng})"
            )
        index[key] = st
    return index


def _is_numeric_fare(fare: Any) -> bool:
    if isinstance(fare, bool) or not isinstance(fare, (int, float)):
        return False
    try:
        return math.isfinite(fare)
    except OverflowError:
        return False


def build_training_set(
    fares: Mapping[str, Any],
    stations: Iterable[Station],
    aliases: Optional[dict[str, str]] = None,
    on_skip: Optional[Callable[[SkippedEntry], None]] = None,
) -> TrainingSetResult:
    """Build the TrainingSet, grouping samples under canonical line ids."""
    result = TrainingSetResult()
    station_index = index_stations(stations)

    def skip(line: str, key: Optional[str], reason: SkipReason, detail: str = "") -> None:
        entry = SkippedEntry(line=line, key=key, reason=reason, detail=detail)
        result.skipped.append(entry)
        logger.debug(f"Skipping {line}/{key}: {reason.value} {detail}".rstrip())
        if on_skip is not None:
            on_skip(entry)

    for raw_line, pairs in fares.items():
        line_id = normalize_line_id(raw_line, aliases)
        if line_id is None:
            skip(str(raw_line), None, SkipReason.INVALID_LINE, "line id is empty")
            continue
        if not isinstance(pairs, Mapping):
            skip(str(raw_line), None, SkipReason.INVALID_LINE, f"expected an object, got {type(pairs).__name__}")
            continue

        samples: list[TrainingSample] = []
        for key, fare in pairs.items():
            if not _is_numeric_fare(fare):
                skip(raw_line, key, SkipReason.NON_NUMERIC_FARE, f"fare={fare!r}")
                continue

            parts = str(key).split(KEY_SEPARATOR)
            if len(parts) != 2:
                skip(raw_line, key, SkipReason.MALFORMED_KEY)
                continue

            from_name = normalize_name(parts[0])
            to_name = normalize_name(parts[1])
            from_st = station_index.get(from_name)
            to_st = station_index.get(to_name)
            if from_st is None or to_st is None:
                missing = [n for n, st in ((from_name, from_st), (to_name, to_st)) if st is None]
                skip(raw_line, key, SkipReason.UNKNOWN_STATION, f"no coordinates for {', '.join(missing)}")
                continue

            dist = haversine(from_st.lat, from_st.lng, to_st.lat, to_st.lng)
            if not math.isfinite(dist) or dist <= 0:
                skip(raw_line, key, SkipReason.INVALID_DISTANCE, f"distance_km={dist}")
                continue

            samples.append(
                TrainingSample(
                    from_=from_name,
                    to=to_name,
                    distance_km=round(dist, 3),
                    fare=fare,
                )
            )

        if samples:
            result.samples.setdefault(line_id, []).extend(samples)

    logger.info(
        f"[FareModel] Built {result.sample_count} training samples across "
        f"{len(result.samples)} lines ({len(result.skipped)} skipped: {result.skip_counts()})"
    )
    return result


def training_set_payload(samples: TrainingSet) -> dict[str, list[dict]]:
    """JSON-ready TrainingSet using the public 'from' key."""
    return {
        line_id: [s.model_dump(by_alias=True) for s in line_samples]
        for line_id, line_samples in samples.items()
    }
