"""Honest evaluation of the persisted fare model.

Rebuilds the training samples from fares.json/station.json and compares the
LLM-derived model per line against a least-squares baseline fitted locally
on the same samples.
"""

import logging
import os
import sys

import numpy as np
from dotenv import load_dotenv
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_absolute_error

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

from kltransit.config import Settings
from kltransit.data_loader import load_fares, load_stations
from kltransit.exceptions import DataLoadError
from kltransit.fare_calculator import evaluate_fare_model
from kltransit.fare_store import load_fare_model
from kltransit.normalize import load_line_aliases
from kltransit.training_data import TrainingSet, build_training_set

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("kltransit.ml.evaluate")


def fit_baseline(samples: TrainingSet) -> dict[str, dict]:
    """Ordinary least squares fare ~ distance per line."""
    baseline = {}
    for line_id, line_samples in samples.items():
        if len(line_samples) < 2:
            continue
        X = np.array([[s.distance_km] for s in line_samples])
        y = np.array([s.fare for s in line_samples])
        reg = LinearRegression().fit(X, y)
        baseline[line_id] = {
            "base": float(reg.intercept_),
            "per_km": float(reg.coef_[0]),
            "mae": float(mean_absolute_error(y, reg.predict(X))),
        }
    return baseline


def evaluate() -> int:
    settings = Settings.from_env()

    model = load_fare_model(settings.fare_model_path)
    if model is None:
        logger.error(f"No fare model found at {settings.fare_model_path}. Train first.")
        return 1

    try:
        fares = load_fares(settings.fares_path)
        stations = load_stations(settings.stations_path)
    except DataLoadError as e:
        logger.error(f"Failed to load training data: {e}")
        return 1

    training = build_training_set(fares, stations, aliases=load_line_aliases(settings.line_aliases_path))
    evaluation = evaluate_fare_model(model, training.samples)
    baseline = fit_baseline(training.samples)

    logger.info("=" * 60)
    logger.info(f"FARE MODEL EVALUATION ({model.currency})")
    logger.info("=" * 60)

    for line_id in training.samples:
        result = evaluation.get(line_id)
        if result is None:
            logger.info(f"{line_id}: not in model")
            continue
        line = model.lines[line_id]
        logger.info(
            f"{line_id}: base={line.base:.2f} per_km={line.per_km:.3f} "
            f"MAE={result.mae:.3f} max_err={result.max_abs_error:.3f} "
            f"in_bounds={result.within_bounds:.0%} n={result.samples}"
        )
        ols = baseline.get(line_id)
        if ols:
            logger.info(
                f"{'':>{len(line_id)}}  OLS: base={ols['base']:.2f} per_km={ols['per_km']:.3f} MAE={ols['mae']:.3f}"
            )

    extra = sorted(set(model.lines) - set(training.samples))
    if extra:
        logger.info(f"Lines in model without samples: {', '.join(extra)}")
    return 0


if __name__ == "__main__":
    sys.exit(evaluate())
