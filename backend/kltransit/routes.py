import logging
from typing import Any

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from kltransit.estimator import estimate_adjustments
from kltransit.exceptions import FareModelError
from kltransit.fare_calculator import quote_fare

logger = logging.getLogger("kltransit.routes")

router = APIRouter()


def _get_state(request: Request):
    return request.app.state


@router.get("/health")
async def health(request: Request):
    state = _get_state(request)
    return {
        "status": "ok",
        "service": "KL Transit AI API",
        "fare_model_loaded": state.fare_store.get() is not None,
    }


@router.post("/ai/estimate")
async def estimate(request: Request, baseline: Any = Body(None)):
    """Relay baseline travel figures to the LLM for realism adjustments."""
    state = _get_state(request)
    return await estimate_adjustments(baseline, state.collaborator)


@router.post("/ai/train-fare-model")
async def train_fare_model(request: Request):
    """Regenerate the per-line fare model from fares.json and station.json."""
    state = _get_state(request)
    try:
        outcome = await state.trainer.train()
    except FareModelError as e:
        logger.error(f"[FareModel] Training failed: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})
    except Exception as e:
        logger.exception(f"[FareModel] Training failed: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "error": "Training failed"})

    return {"ok": True, "model": outcome.model.model_dump()}


@router.get("/fare-model")
async def get_fare_model(request: Request):
    """Return the installed fare model, or model=null before any training."""
    model = _get_state(request).fare_store.get()
    if model is None:
        return {"ok": False, "model": None}
    return {"ok": True, "model": model.model_dump()}


@router.get("/fare-model/quote")
async def get_fare_quote(
    request: Request,
    line: str = Query(..., min_length=1, description="Line id, e.g. KJ"),
    distance_km: float = Query(..., ge=0),
):
    """Calculate a fare from the installed model."""
    state = _get_state(request)
    model = state.fare_store.get()
    if model is None:
        return JSONResponse(status_code=404, content={"ok": False, "error": "Fare model not trained yet"})

    quote = quote_fare(model, line, distance_km, state.line_aliases)
    if quote is None:
        return JSONResponse(status_code=404, content={"ok": False, "error": f"No fare model for line {line}"})

    line_id, fare = quote
    return {
        "ok": True,
        "line": line_id,
        "distance_km": distance_km,
        "fare": fare,
        "currency": model.currency,
    }
