import logging
from typing import Any

from kltransit.exceptions import FareModelError
from kltransit.llm_client import LLMCollaborator
from kltransit.llm_output import parse_correction
from kltransit.prompts import build_estimate_prompt

logger = logging.getLogger("kltransit.estimator")

FALLBACK_RESPONSE = {"ok": False, "error": "AI call failed", "fallback": True}


async def estimate_adjustments(baseline: Any, collaborator: LLMCollaborator) -> dict:
    """
    Ask the LLM to adjust baseline travel figures for KL conditions.

    Best effort: any failure returns the fallback body instead of raising,
    and callers keep their baseline. No retries.
    """
    prompt = build_estimate_prompt(baseline)
    try:
        text = await collaborator.complete(prompt)
        correction = parse_correction(text)
    except FareModelError as e:
        logger.error(f"AI error: {e}")
        return dict(FALLBACK_RESPONSE)
    except Exception as e:
        logger.exception(f"AI error: {e}")
        return dict(FALLBACK_RESPONSE)

    return {"ok": True, "correction": correction}
