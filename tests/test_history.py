import threading
from unittest.mock import MagicMock

import pytest

from budget_intelligence.classifiers.history import HistoryMatcher
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.models import Category, ClassificationRecord, Transaction
from budget_intelligence.storage.base import StoragePort, StorageUnavailableError
from budget_intelligence.storage.json_store import JsonFileStore


@pytest.fixture
def store(tmp_path):
    store = JsonFileStore(data_path=str(tmp_path / "intelligence.json"))
    store.add_category(Category(id=7, name="Combustível", type="expense"))
    store.add_category(Category(id=8, name="Transporte por App", type="expense"))
    return store


@pytest.fixture
def matcher(store):
    return HistoryMatcher(store)


def _record(description: str, amount: int, category_id: int = 7) -> ClassificationRecord:
    return ClassificationRecord(user_id=1, description=description, amount=amount, category_id=category_id)


def test_learn_twice_bumps_single_record(matcher, store):
    tx = Transaction(description="posto shell", amount=-20000)
    matcher.learn(1, tx, 7, "manual")
    matcher.learn(1, tx, 7, "manual")

    history = store.list_classification_history(1)
    assert len(history) == 1
    assert history[0].confirmations == 2
    assert history[0].confidence == 60


def test_learn_confirmed_starts_higher(matcher, store):
    matcher.learn(1, Transaction(description="Uber Trip", amount=-1500), 8, "confirmed")

    record = store.list_classification_history(1)[0]
    assert record.confidence == 60
    assert record.source == "confirmed"
    assert record.description == "uber trip"


def test_learn_normalizes_description(matcher, store):
    matcher.learn(1, Transaction(description="  Posto SHELL ", amount=-20000), 7)
    matcher.learn(1, Transaction(description="posto shell", amount=-18000), 7)

    history = store.list_classification_history(1)
    assert len(history) == 1
    assert history[0].description == "posto shell"
    assert history[0].confirmations == 2


def test_repeated_learn_saturates_confidence(matcher, store):
    tx = Transaction(description="posto shell", amount=-20000)
    previous = 0
    for call in range(1, 10):
        matcher.learn(1, tx, 7)
        record = store.list_classification_history(1)[0]
        assert previous <= record.confidence <= 100
        assert record.confirmations == call
        previous = record.confidence
    assert previous == 100


def test_score_exact_description():
    matcher = HistoryMatcher(JsonFileStore())
    assert matcher.score("posto shell", -100, _record("posto shell", -99999)) == 100


def test_score_word_overlap_with_amount_bonus():
    matcher = HistoryMatcher(JsonFileStore())
    record = _record("uber viagem", -2000)

    far = matcher.score("uber viagem centro", -9000, record)
    near = matcher.score("uber viagem centro", -2100, record)

    assert far == pytest.approx(2 / 3 * 80)
    assert near == pytest.approx(2 / 3 * 80 + 20)


def test_score_zero_amounts_get_no_bonus():
    matcher = HistoryMatcher(JsonFileStore())
    assert matcher.score("abc", 0, _record("xyz", 0)) == 0


def test_classify_exact_history_match(matcher):
    matcher.learn(1, Transaction(description="posto shell", amount=-20000), 7)

    suggestions = matcher.classify(1, Transaction(description="Posto Shell", amount=-20000))

    assert len(suggestions) == 1
    assert suggestions[0].category_name == "Combustível"
    assert suggestions[0].category_type == "expense"
    assert suggestions[0].confidence == 50


def test_amount_bonus_alone_is_not_a_match(matcher):
    matcher.learn(1, Transaction(description="netflix", amount=-1000), 7)

    assert matcher.classify(1, Transaction(description="padaria", amount=-1000)) == []


def test_best_record_per_category_and_ranking(matcher):
    for _ in range(4):
        matcher.learn(1, Transaction(description="uber centro", amount=-1500), 8)
    matcher.learn(1, Transaction(description="uber posto", amount=-20000), 7)

    suggestions = matcher.classify(1, Transaction(description="uber centro", amount=-1500))

    assert [s.category_name for s in suggestions] == ["Transporte por App", "Combustível"]
    assert suggestions[0].confidence == 80


def test_history_is_scoped_per_user(matcher):
    matcher.learn(1, Transaction(description="posto shell", amount=-20000), 7)

    assert matcher.classify(2, Transaction(description="posto shell", amount=-20000)) == []


def test_unknown_category_is_skipped(matcher):
    matcher.learn(1, Transaction(description="posto shell", amount=-20000), 99)

    assert matcher.classify(1, Transaction(description="posto shell", amount=-20000)) == []


def test_unavailable_store_degrades_silently():
    store = MagicMock(spec=StoragePort)
    store.list_classification_history.side_effect = StorageUnavailableError("down")
    store.upsert_classification_record.side_effect = StorageUnavailableError("down")
    matcher = HistoryMatcher(store)
    tx = Transaction(description="posto shell", amount=-20000)

    matcher.learn(1, tx, 7)
    assert matcher.classify(1, tx) == []
    store.insert_classification_record.assert_not_called()


class _SimultaneousStore(JsonFileStore):
    """Holds every learn write until all parties arrive at the barrier."""

    def __init__(self, parties: int):
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=5)

    def upsert_classification_record(self, record, **kwargs):
        self.barrier.wait()
        return super().upsert_classification_record(record, **kwargs)


def test_concurrent_first_learns_share_one_record():
    store = _SimultaneousStore(parties=2)
    engine = IntelligenceEngine(store)
    threads = [
        threading.Thread(target=engine.learn, args=(1, "posto shell", -20000, 7, "manual"))
        for _ in range(2)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    history = store.list_classification_history(1)
    assert [(r.confirmations, r.confidence) for r in history] == [(2, 60)]


def test_concurrent_learns_count_every_confirmation(matcher, store):
    tx = Transaction(description="posto shell", amount=-20000)
    start = threading.Barrier(8, timeout=5)

    def confirm_repeatedly():
        start.wait()
        for _ in range(5):
            matcher.learn(1, tx, 7, "manual")

    threads = [threading.Thread(target=confirm_repeatedly) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    (record,) = store.list_classification_history(1)
    assert record.confirmations == 40
    assert record.confidence == 100
