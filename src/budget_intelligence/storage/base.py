from abc import ABC, abstractmethod

from budget_intelligence.models import Category, ClassificationRecord, Entry, Item


class StorageUnavailableError(Exception):
    """Raised by a storage port when its backend cannot be reached."""


class StoragePort(ABC):
    """Narrow contract the engine needs from the budget storage.

    Every method may raise :class:`StorageUnavailableError`; the engine turns
    that into an empty read or a skipped write.
    """

    @abstractmethod
    def get_category_by_id(self, category_id: int) -> Category | None:
        pass

    @abstractmethod
    def get_item_by_id(self, item_id: int) -> Item | None:
        pass

    @abstractmethod
    def get_entries_by_month(self, user_id: int, month: int, year: int) -> list[Entry]:
        pass

    @abstractmethod
    def list_classification_history(self, user_id: int) -> list[ClassificationRecord]:
        """Records of one user, preferably ordered by confidence descending."""
        pass

    @abstractmethod
    def insert_classification_record(self, record: ClassificationRecord) -> ClassificationRecord:
        pass

    @abstractmethod
    def upsert_classification_record(
        self,
        record: ClassificationRecord,
        *,
        confidence_step: int,
        max_confidence: int,
    ) -> ClassificationRecord:
        """Atomically bump the record with the same (user, description, category) or insert ``record``.

        An existing record gains one confirmation and ``confidence_step``
        confidence, capped at ``max_confidence`` and never lowered.
        Concurrent calls for the same key must each count.
        """
        pass

    @abstractmethod
    def update_classification_record(
        self, record_id: int, *, confidence: int, confirmations: int
    ) -> None:
        """Store new counters. Must never lower the stored values."""
        pass
