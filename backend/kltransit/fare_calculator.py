import logging
from typing import Optional

import numpy as np
from sklearn.metrics import mean_absolute_error

from kltransit.models import FareModel, LineEvaluation, LineFare
from kltransit.normalize import normalize_line_id
from kltransit.training_data import TrainingSet

logger = logging.getLogger("kltransit.fare_calculator")


def line_fare(line: LineFare, distance_km: float) -> float:
    """base + per_km * distance, clamped to the line's fare bounds."""
    fare = line.base + line.per_km * max(distance_km, 0.0)
    return round(min(max(fare, line.min_fare), line.max_fare), 2)


def find_line(model: FareModel, line_id: str, aliases: Optional[dict[str, str]] = None) -> Optional[tuple[str, LineFare]]:
    """Look a line up by raw id first, then by canonical id."""
    if line_id in model.lines:
        return line_id, model.lines[line_id]
    canonical = normalize_line_id(line_id, aliases)
    if canonical is not None and canonical in model.lines:
        return canonical, model.lines[canonical]
    return None


def quote_fare(
    model: FareModel,
    line_id: str,
    distance_km: float,
    aliases: Optional[dict[str, str]] = None,
) -> Optional[tuple[str, float]]:
    """Calculate a fare for a trip on one line. None when the line is unknown."""
    found = find_line(model, line_id, aliases)
    if found is None:
        return None
    canonical, line = found
    return canonical, line_fare(line, distance_km)


def evaluate_fare_model(model: FareModel, samples: TrainingSet) -> dict[str, LineEvaluation]:
    """Score the model against the observations it was fitted on."""
    results = {}
    for line_id, line_samples in samples.items():
        line = model.lines.get(line_id)
        if line is None or not line_samples:
            logger.info(f"[FareModel] No model for line {line_id} ({len(line_samples)} samples)")
            continue

        distances = np.array([s.distance_km for s in line_samples], dtype=float)
        observed = np.array([s.fare for s in line_samples], dtype=float)
        predicted = np.clip(line.base + line.per_km * distances, line.min_fare, line.max_fare)
        errors = np.abs(observed - predicted)
        in_bounds = (observed >= line.min_fare) & (observed <= line.max_fare)

        results[line_id] = LineEvaluation(
            samples=len(line_samples),
            mae=round(float(mean_absolute_error(observed, predicted)), 4),
            max_abs_error=round(float(errors.max()), 4),
            within_bounds=round(float(in_bounds.mean()), 4),
        )
    return results
