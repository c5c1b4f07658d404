import json

import pytest

from kltransit.fare_store import FareModelStore, load_fare_model, save_fare_model
from kltransit.models import FareModel, LineFare


@pytest.fixture
def fare_model():
    return FareModel(
        currency="MYR",
        lines={"KJ": LineFare(base=1.0, per_km=0.15, min_fare=1.2, max_fare=5.7)},
    )


def test_store_starts_empty():
    assert FareModelStore().get() is None


def test_replace_swaps_whole_model(fare_model):
    store = FareModelStore(fare_model)
    newer = FareModel(lines={"AG": LineFare(base=0.9, per_km=0.2, min_fare=1.0, max_fare=4.0)})

    store.replace(newer)

    assert store.get() is newer
    assert "KJ" not in store.get().lines


def test_replace_rejects_empty_model(fare_model):
    store = FareModelStore(fare_model)
    with pytest.raises(ValueError):
        store.replace(FareModel(lines={}))
    assert store.get() is fare_model


def test_save_then_load(tmp_path, fare_model):
    path = tmp_path / "fare" / "fare-model.json"

    save_fare_model(path, fare_model)

    assert json.loads(path.read_text(encoding="utf-8"))["lines"]["KJ"]["per_km"] == 0.15
    assert load_fare_model(path) == fare_model
    assert [p.name for p in path.parent.iterdir()] == ["fare-model.json"]


def test_load_missing_file_is_none(tmp_path):
    assert load_fare_model(tmp_path / "fare-model.json") is None


@pytest.mark.parametrize("content", ["{oops", '{"lines": {"KJ": {"base": "x"}}}', '{"lines": {}}'])
def test_load_invalid_file_is_none(tmp_path, content):
    path = tmp_path / "fare-model.json"
    path.write_text(content, encoding="utf-8")
    assert load_fare_model(path) is None
