"""
Fare model cache and its on-disk form (fare/fare-model.json).

``FareModelStore`` holds one reference. ``replace`` swaps it wholesale, so a
concurrent reader sees either the old or the new model, never a mix. The
training orchestrator is its only writer.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from kltransit.models import FareModel

logger = logging.getLogger("kltransit.fare_store")


class FareModelStore:
    def __init__(self, model: Optional[FareModel] = None):
        self._model = model

    def get(self) -> Optional[FareModel]:
        return self._model

    def replace(self, model: FareModel) -> None:
        if not model.lines:
            raise ValueError("Refusing to install a fare model without lines")
        self._model = model


def load_fare_model(path: Path) -> Optional[FareModel]:
    """Read the persisted model. A missing or unreadable file yields None."""
    if not path.exists():
        logger.info("[FareModel] fare-model.json not found yet")
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        model = FareModel.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        logger.error(f"[FareModel] Failed to load {path}: {e}")
        return None

    if not model.lines:
        logger.warning(f"[FareModel] {path} has no lines, ignoring it")
        return None

    logger.info(f"[FareModel] Loaded fare-model.json ({len(model.lines)} lines)")
    return model


def save_fare_model(path: Path, model: FareModel) -> None:
    """Write the model atomically: temp file in the same directory, then rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(model.model_dump(), indent=2, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
