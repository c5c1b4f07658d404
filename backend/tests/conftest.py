"""
Pytest configuration and shared fixtures.

Provides station/fare reference data laid out the way the server expects it
on disk, a scripted LLM collaborator, and a FastAPI test client.
"""

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from kltransit.config import Settings
from kltransit.exceptions import CollaboratorCallError
from kltransit.models import Station


class FakeCollaborator:
    """Returns canned replies in order and records every prompt it receives."""

    name = "fake"
    model_name = "fake-1"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.replies:
            raise CollaboratorCallError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


MODEL_REPLY = json.dumps({
    "currency": "MYR",
    "lines": {
        "KJ": {"base": 1.0, "per_km": 0.15, "min_fare": 1.2, "max_fare": 5.7},
        "AG": {"base": 0.9, "per_km": 0.18, "min_fare": 1.1, "max_fare": 4.9},
    },
})


@pytest.fixture
def kl_stations():
    return [
        Station(name="KL Sentral", lat=3.1347, lng=101.6869),
        Station(name="Pasar Seni", lat=3.1425, lng=101.6952),
        Station(name="Masjid Jamek", lat=3.1496, lng=101.6964),
        Station(name="Hang Tuah", lat=3.1400, lng=101.7060),
    ]


@pytest.fixture
def kl_fares():
    return {
        "KJ": {
            "KL SENTRAL||PASAR SENI": 2.1,
            "Pasar-Seni||Masjid Jamek": 1.6,
        },
        "agl": {
            "MASJID JAMEK||HANG TUAH": 1.4,
        },
    }


@pytest.fixture
def data_root(tmp_path, kl_stations, kl_fares) -> Path:
    """A DATA_ROOT with fare/fares.json and output/station.json."""
    (tmp_path / "fare").mkdir()
    (tmp_path / "output").mkdir()
    (tmp_path / "fare" / "fares.json").write_text(json.dumps(kl_fares), encoding="utf-8")
    (tmp_path / "output" / "station.json").write_text(
        json.dumps([s.model_dump() for s in kl_stations]), encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def settings(data_root) -> Settings:
    return Settings(
        data_root=data_root,
        fares_path=data_root / "fare" / "fares.json",
        stations_path=data_root / "output" / "station.json",
        fare_model_path=data_root / "fare" / "fare-model.json",
        gemini_api_key="",
    )


@pytest.fixture
def make_client(settings):
    """Factory for a TestClient around a fresh app and scripted collaborator."""
    from kltransit.main import create_app

    def _make(*replies):
        collaborator = FakeCollaborator(*replies)
        client = TestClient(create_app(settings, collaborator=collaborator))
        return client, collaborator

    return _make
