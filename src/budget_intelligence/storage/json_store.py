import json
import os
import threading
from typing import Any

from budget_intelligence.logger import get_logger
from budget_intelligence.models import Category, ClassificationRecord, Entry, Item

from .base import StoragePort, StorageUnavailableError

logger = get_logger(__name__)


class JsonFileStore(StoragePort):
    """Storage port backed by a single JSON document.

    ``data_path=None`` keeps everything in memory. Categories, items and
    entries are normally owned by the budgeting application; the ``add_*``
    helpers exist to seed them.
    """

    def __init__(self, data_path: str | None = None):
        self.data_path = data_path
        self._lock = threading.Lock()
        self.categories: dict[int, Category] = {}
        self.items: dict[int, Item] = {}
        self.entries: dict[tuple[int, int, int], list[Entry]] = {}
        self.history: list[ClassificationRecord] = []
        self._next_record_id = 1
        self.load()

    def load(self) -> None:
        if not self.data_path or not os.path.exists(self.data_path):
            return
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("[STORE] Unreadable store at %s; starting empty.", self.data_path)
            return
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

        with self._lock:
            self.categories = {
                c["id"]: Category.model_validate(c) for c in data.get("categories", [])
            }
            self.items = {i["id"]: Item.model_validate(i) for i in data.get("items", [])}
            self.entries = {}
            for row in data.get("entries", []):
                key = (row["user_id"], row["month"], row["year"])
                self.entries.setdefault(key, []).append(Entry.model_validate(row))
            self.history = [
                ClassificationRecord.model_validate(r) for r in data.get("history", [])
            ]
            self._next_record_id = max((r.id or 0 for r in self.history), default=0) + 1

    def save(self) -> None:
        if not self.data_path:
            return
        entries: list[dict[str, Any]] = []
        for (user_id, month, year), rows in self.entries.items():
            for entry in rows:
                entries.append({"user_id": user_id, "month": month, "year": year, **entry.model_dump()})
        payload = {
            "categories": [c.model_dump() for c in self.categories.values()],
            "items": [i.model_dump() for i in self.items.values()],
            "entries": entries,
            "history": [r.model_dump() for r in self.history],
        }
        try:
            with open(self.data_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StorageUnavailableError(str(e)) from e

    # Seeding helpers

    def add_category(self, category: Category) -> None:
        with self._lock:
            self.categories[category.id] = category
            self.save()

    def add_item(self, item: Item) -> None:
        with self._lock:
            self.items[item.id] = item
            self.save()

    def add_entry(self, user_id: int, month: int, year: int, entry: Entry) -> None:
        with self._lock:
            self.entries.setdefault((user_id, month, year), []).append(entry)
            self.save()

    # StoragePort

    def get_category_by_id(self, category_id: int) -> Category | None:
        return self.categories.get(category_id)

    def get_item_by_id(self, item_id: int) -> Item | None:
        return self.items.get(item_id)

    def get_entries_by_month(self, user_id: int, month: int, year: int) -> list[Entry]:
        return list(self.entries.get((user_id, month, year), []))

    def list_classification_history(self, user_id: int) -> list[ClassificationRecord]:
        with self._lock:
            records = [r.model_copy() for r in self.history if r.user_id == user_id]
        return sorted(records, key=lambda r: r.confidence, reverse=True)

    def insert_classification_record(self, record: ClassificationRecord) -> ClassificationRecord:
        with self._lock:
            stored = record.model_copy(update={"id": self._next_record_id})
            self._next_record_id += 1
            self.history.append(stored)
            self.save()
        return stored.model_copy()

    def upsert_classification_record(
        self,
        record: ClassificationRecord,
        *,
        confidence_step: int,
        max_confidence: int,
    ) -> ClassificationRecord:
        with self._lock:
            for index, current in enumerate(self.history):
                if (
                    current.user_id == record.user_id
                    and current.description == record.description
                    and current.category_id == record.category_id
                ):
                    bumped = min(max_confidence, current.confidence + confidence_step)
                    stored = current.model_copy(
                        update={
                            "confidence": max(current.confidence, bumped),
                            "confirmations": current.confirmations + 1,
                        }
                    )
                    self.history[index] = stored
                    break
            else:
                stored = record.model_copy(update={"id": self._next_record_id, "confirmations": 1})
                self._next_record_id += 1
                self.history.append(stored)
            self.save()
        return stored.model_copy()

    def update_classification_record(
        self, record_id: int, *, confidence: int, confirmations: int
    ) -> None:
        with self._lock:
            for index, current in enumerate(self.history):
                if current.id != record_id:
                    continue
                self.history[index] = current.model_copy(
                    update={
                        "confidence": max(current.confidence, confidence),
                        "confirmations": max(current.confirmations, confirmations),
                    }
                )
                self.save()
                return
        logger.debug("[STORE] Classification record %s not found for update.", record_id)
