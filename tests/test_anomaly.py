from unittest.mock import MagicMock

import pytest

from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.models import Category, Entry, Item
from budget_intelligence.services.anomaly import AnomalyDetector
from budget_intelligence.storage.base import StoragePort, StorageUnavailableError
from budget_intelligence.storage.json_store import JsonFileStore


@pytest.fixture
def store():
    store = JsonFileStore()
    store.add_category(Category(id=5, name="Lazer", type="expense"))
    store.add_category(Category(id=6, name="Moradia", type="expense"))
    store.add_item(Item(id=50, category_id=5))
    store.add_item(Item(id=60, category_id=6))
    return store


def _seed(store, values_by_month, item_id=50, user_id=1):
    for (month, year), value in values_by_month.items():
        store.add_entry(user_id, month, year, Entry(item_id=item_id, actual_value=value))


def test_flags_amount_above_threshold(store):
    _seed(store, {(6, 2024): 1000, (5, 2024): 1100, (4, 2024): 900, (3, 2024): 1050})

    result = AnomalyDetector(store).detect(1, 5, 2500, 7, 2024)

    assert result.is_anomalous is True
    assert result.average == pytest.approx(1012.5)


def test_amount_equal_to_threshold_is_not_anomalous(store):
    _seed(store, {(6, 2024): 1000, (5, 2024): 1000, (4, 2024): 1000})

    result = AnomalyDetector(store).detect(1, 5, 2000, 7, 2024, threshold=2)

    assert result.is_anomalous is False
    assert result.average == 1000


def test_insufficient_samples(store):
    _seed(store, {(6, 2024): 1000, (5, 2024): 1000})

    result = AnomalyDetector(store).detect(1, 5, 999999, 7, 2024)

    assert result.is_anomalous is False
    assert result.average == 0


def test_lookback_wraps_year_and_skips_current_month(store):
    _seed(store, {(1, 2024): 100, (12, 2023): 100, (11, 2023): 100, (2, 2024): 100000})

    result = AnomalyDetector(store).detect(1, 5, 250, 2, 2024)

    assert result.average == 100
    assert result.is_anomalous is True


def test_only_six_months_back(store):
    _seed(store, {(1, 2024): 100, (12, 2023): 100, (8, 2023): 100})

    result = AnomalyDetector(store).detect(1, 5, 1000, 7, 2024)

    assert result.average == 0


def test_ignores_other_categories_users_and_empty_values(store):
    _seed(store, {(6, 2024): 1000, (5, 2024): 1000})
    _seed(store, {(4, 2024): 1000, (3, 2024): 1000}, item_id=60)
    _seed(store, {(4, 2024): 1000, (3, 2024): 1000}, user_id=2)
    store.add_entry(1, 2, 2024, Entry(item_id=50, actual_value=0))
    store.add_entry(1, 2, 2024, Entry(item_id=50, actual_value=None))

    result = AnomalyDetector(store).detect(1, 5, 5000, 7, 2024)

    assert result.average == 0


def test_missing_item_is_skipped(store):
    _seed(store, {(6, 2024): 1000, (5, 2024): 1000, (4, 2024): 1000})
    store.add_entry(1, 6, 2024, Entry(item_id=404, actual_value=10))

    result = AnomalyDetector(store).detect(1, 5, 1500, 7, 2024)

    assert result.average == 1000
    assert result.is_anomalous is False


def test_tuning_controls_defaults(store):
    _seed(store, {(6, 2024): 1000})
    tuning = EngineTuning(anomaly_min_samples=1, anomaly_threshold=1.5)

    result = AnomalyDetector(store, tuning).detect(1, 5, 1600, 7, 2024)

    assert result.is_anomalous is True


def test_unavailable_store_gives_no_signal():
    store = MagicMock(spec=StoragePort)
    store.get_entries_by_month.side_effect = StorageUnavailableError("down")

    result = AnomalyDetector(store).detect(1, 5, 1000, 7, 2024)

    assert result.is_anomalous is False
    assert result.average == 0
