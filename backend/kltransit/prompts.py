import json
from typing import Any

ESTIMATE_PROMPT = """You are a transport realism estimator for Kuala Lumpur.

Given baseline values:
{baseline}

Return ONLY this JSON:
{{
  "time_adjust_transit": number,
  "fare_adjust_transit": number,
  "time_adjust_grab": number,
  "fare_adjust_grab": number,
  "time_adjust_walk": number,
  "comfort_adjust": number
}}

Rules:
- Max adjustment: +-20%
- Transit fare rarely changes
- Walking time can change +-10%
- Grab fare may increase due to surge
- There is a comfort baseline. Adjust it using Kuala Lumpur crowd patterns.
- Interchanges (KL Sentral, Masjid Jamek, Pasar Seni) are especially crowded.
- Peak hours increase discomfort.
- Walking becomes more uncomfortable in rain or when sidewalks are crowded.
- Do NOT output anything except valid JSON."""

FARE_MODEL_PROMPT = """You are a fare modeller for Kuala Lumpur rail and BRT.

You receive training samples per line. Each sample has:
- distance_km
- fare

Your job: derive a SIMPLE fare model for each line:

fare = base + per_km * distance_km

Also infer reasonable min_fare and max_fare for the line.

IMPORTANT:
- Return ONLY pure JSON
- NO markdown
- NO code fences
- NO comments
- The JSON must be directly parseable by a strict JSON parser

The required JSON structure is exactly:

{{
  "currency": "{currency}",
  "lines": {{
    "<LINE_ID>": {{
      "base": 1.0,
      "per_km": 0.2,
      "min_fare": 1.1,
      "max_fare": 6.0
    }}
  }}
}}

Use exactly these line ids: {line_ids}

Now generate this JSON based on the following training data:

{training_data}"""


def build_estimate_prompt(baseline: Any) -> str:
    return ESTIMATE_PROMPT.format(baseline=json.dumps(baseline, indent=2, ensure_ascii=False))


def build_fare_model_prompt(training_data: dict[str, list[dict]], currency: str = "MYR") -> str:
    return FARE_MODEL_PROMPT.format(
        currency=currency,
        line_ids=", ".join(training_data),
        training_data=json.dumps(training_data, separators=(",", ":")),
    )
