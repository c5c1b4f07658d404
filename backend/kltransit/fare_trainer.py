import asyncio
import logging
from pathlib import Path
from typing import Optional

from kltransit.data_loader import load_fares, load_stations
from kltransit.exceptions import EmptyTrainingSetError
from kltransit.fare_calculator import evaluate_fare_model
from kltransit.fare_store import FareModelStore, save_fare_model
from kltransit.llm_client import LLMCollaborator
from kltransit.llm_output import DEFAULT_CURRENCY, parse_fare_model
from kltransit.models import TrainingOutcome
from kltransit.prompts import build_fare_model_prompt
from kltransit.training_data import build_training_set, training_set_payload

logger = logging.getLogger("kltransit.trainer")


class FareModelTrainer:
    """
    Regenerates the per-line fare model.

    Loads fares.json and station.json, builds training samples, asks the LLM
    to fit ``fare = base + per_km * distance_km`` per line, validates the
    reply, installs it in the store and writes fare-model.json.

    Runs are serialised; the last run to commit wins. A failed run leaves the
    store untouched. A failed write after a successful install is logged only:
    the new model stays live in memory even if it could not be persisted.
    """

    def __init__(
        self,
        store: FareModelStore,
        collaborator: LLMCollaborator,
        fares_path: Path,
        stations_path: Path,
        model_path: Path,
        aliases: Optional[dict[str, str]] = None,
        currency: str = DEFAULT_CURRENCY,
    ):
        self.store = store
        self.collaborator = collaborator
        self.fares_path = fares_path
        self.stations_path = stations_path
        self.model_path = model_path
        self.aliases = aliases
        self.currency = currency
        self._lock = asyncio.Lock()

    async def train(self) -> TrainingOutcome:
        async with self._lock:
            return await self._train()

    async def _train(self) -> TrainingOutcome:
        logger.info("[FareModel] Training started")

        fares = load_fares(self.fares_path)
        stations = load_stations(self.stations_path)

        training = build_training_set(fares, stations, aliases=self.aliases)
        if not training.samples:
            raise EmptyTrainingSetError(
                f"No usable training samples ({len(training.skipped)} fare entries skipped)"
            )

        prompt = build_fare_model_prompt(training_set_payload(training.samples), currency=self.currency)
        logger.info(
            f"[FareModel] Requesting fit from {self.collaborator.name} for "
            f"{len(training.samples)} lines, {training.sample_count} samples"
        )
        text = await self.collaborator.complete(prompt)

        model = parse_fare_model(text)
        missing = [line_id for line_id in training.samples if line_id not in model.lines]
        if missing:
            logger.warning(f"[FareModel] Model has no entry for trained lines: {', '.join(missing)}")

        self.store.replace(model)

        persisted = True
        try:
            save_fare_model(self.model_path, model)
        except Exception as e:
            persisted = False
            logger.error(f"[FareModel] Trained model installed but not saved to {self.model_path}: {e}")
        else:
            logger.info("[FareModel] Trained and saved to fare-model.json")

        try:
            evaluation = evaluate_fare_model(model, training.samples)
        except Exception as e:
            evaluation = {}
            logger.error(f"[FareModel] Trained model installed but evaluation failed: {e}")
        for line_id, result in evaluation.items():
            logger.info(
                f"[FareModel] {line_id}: {result.samples} samples, MAE {result.mae:.2f} {model.currency}, "
                f"{result.within_bounds:.0%} within bounds"
            )

        return TrainingOutcome(
            model=model,
            sample_count=training.sample_count,
            skipped=len(training.skipped),
            persisted=persisted,
            evaluation=evaluation,
        )
