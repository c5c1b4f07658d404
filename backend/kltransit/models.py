from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Station(BaseModel):
    name: str
    lat: float
    lng: float


class TrainingSample(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")  # normalized station name
    to: str
    distance_km: float  # rounded to 3 dp
    fare: float


class LineFare(BaseModel):
    base: float
    per_km: float
    min_fare: float
    max_fare: float


class FareModel(BaseModel):
    currency: str = "MYR"
    lines: dict[str, LineFare] = Field(default_factory=dict)


class EstimateCorrection(BaseModel):
    """Adjustment fields the estimator is asked to return."""
    time_adjust_transit: Optional[float] = None
    fare_adjust_transit: Optional[float] = None
    time_adjust_grab: Optional[float] = None
    fare_adjust_grab: Optional[float] = None
    time_adjust_walk: Optional[float] = None
    comfort_adjust: Optional[float] = None


class LineEvaluation(BaseModel):
    samples: int
    mae: float
    max_abs_error: float
    within_bounds: float  # share of observed fares inside [min_fare, max_fare]


class TrainingOutcome(BaseModel):
    model: FareModel
    sample_count: int
    skipped: int
    persisted: bool
    evaluation: dict[str, LineEvaluation] = Field(default_factory=dict)
