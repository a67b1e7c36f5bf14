from dataclasses import dataclass, field

from budget_intelligence.logger import get_logger
from budget_intelligence.models import Category, Entry
from budget_intelligence.storage.base import StoragePort, StorageUnavailableError

logger = get_logger(__name__)


@dataclass(frozen=True)
class CategorizedEntry:
    entry: Entry
    category: Category

    @property
    def actual(self) -> int:
        return self.entry.actual_value or 0


@dataclass
class MonthScan:
    month: int
    year: int
    entries: list[CategorizedEntry] = field(default_factory=list)
    skipped: int = 0


def scan_month(store: StoragePort, user_id: int, month: int, year: int) -> MonthScan:
    """Join a month of entries to their categories, skipping what cannot be resolved.

    Entries whose item or category is missing, or whose lookup hits an
    unavailable store, are counted in ``skipped`` rather than failing the scan.
    """
    scan = MonthScan(month=month, year=year)
    try:
        entries = store.get_entries_by_month(user_id, month, year)
    except StorageUnavailableError as e:
        logger.warning("[ENTRIES] Entries for %02d/%s unavailable: %s", month, year, e)
        return scan

    for entry in entries:
        try:
            item = store.get_item_by_id(entry.item_id)
            category = store.get_category_by_id(item.category_id) if item else None
        except StorageUnavailableError as e:
            logger.debug("[ENTRIES] Lookup failed for item %s: %s", entry.item_id, e)
            scan.skipped += 1
            continue
        if category is None:
            scan.skipped += 1
            continue
        scan.entries.append(CategorizedEntry(entry=entry, category=category))

    if scan.skipped:
        logger.debug(
            "[ENTRIES] user=%s %02d/%s: skipped %d of %d entries",
            user_id, month, year, scan.skipped, len(entries),
        )
    return scan
