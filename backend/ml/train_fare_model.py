"""Offline fare-model training.

Same pipeline as POST /ai/train-fare-model, for cron jobs or a first
bootstrap before the server has ever run.
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

from kltransit.config import Settings
from kltransit.exceptions import FareModelError
from kltransit.fare_store import FareModelStore, load_fare_model
from kltransit.fare_trainer import FareModelTrainer
from kltransit.llm_client import create_collaborator
from kltransit.normalize import load_line_aliases

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("kltransit.ml.train")


async def train() -> int:
    settings = Settings.from_env()
    store = FareModelStore(load_fare_model(settings.fare_model_path))
    trainer = FareModelTrainer(
        store=store,
        collaborator=create_collaborator(settings),
        fares_path=settings.fares_path,
        stations_path=settings.stations_path,
        model_path=settings.fare_model_path,
        aliases=load_line_aliases(settings.line_aliases_path),
    )

    try:
        outcome = await trainer.train()
    except FareModelError as e:
        logger.error(f"Training failed: {e}")
        return 1

    logger.info(
        f"Trained {len(outcome.model.lines)} lines from {outcome.sample_count} samples "
        f"({outcome.skipped} fare entries skipped)"
    )
    if not outcome.persisted:
        logger.error(f"Model was not written to {settings.fare_model_path}")
        return 1
    logger.info(f"Model saved to {settings.fare_model_path}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(train()))
