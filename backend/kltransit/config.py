"""
Environment configuration, read once at process start.

Call ``load_dotenv()`` before ``Settings.from_env()`` so backend/.env values
are visible.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Repository root: backend/kltransit/config.py -> ../../
DEFAULT_DATA_ROOT = Path(__file__).resolve().parents[2]

STATIC_DIRS = ("fare", "output", "data.gov.my", "gtfs")


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    return Path(value) if value else default


@dataclass(frozen=True)
class Settings:
    port: int = 3000
    host: str = "0.0.0.0"
    llm_provider: str = "gemini"
    llm_model: Optional[str] = None
    llm_timeout_seconds: float = 60.0
    gemini_api_key: str = ""
    anthropic_api_key: str = ""
    data_root: Path = DEFAULT_DATA_ROOT
    fares_path: Path = DEFAULT_DATA_ROOT / "fare" / "fares.json"
    stations_path: Path = DEFAULT_DATA_ROOT / "output" / "station.json"
    fare_model_path: Path = DEFAULT_DATA_ROOT / "fare" / "fare-model.json"
    line_aliases_path: Optional[Path] = None
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        data_root = _env_path("DATA_ROOT", DEFAULT_DATA_ROOT)
        aliases = os.getenv("LINE_ALIASES_PATH")
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            port=int(os.getenv("PORT", "3000")),
            host=os.getenv("HOST", "0.0.0.0"),
            llm_provider=os.getenv("LLM_PROVIDER", "gemini").strip().lower(),
            llm_model=os.getenv("LLM_MODEL") or None,
            llm_timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            data_root=data_root,
            fares_path=_env_path("FARES_PATH", data_root / "fare" / "fares.json"),
            stations_path=_env_path("STATIONS_PATH", data_root / "output" / "station.json"),
            fare_model_path=_env_path("FARE_MODEL_PATH", data_root / "fare" / "fare-model.json"),
            line_aliases_path=Path(aliases) if aliases else None,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
