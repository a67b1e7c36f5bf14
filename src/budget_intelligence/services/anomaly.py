from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.domain.months import months_back
from budget_intelligence.logger import get_logger
from budget_intelligence.models import AnomalyResult
from budget_intelligence.storage.base import StoragePort

from .entries import scan_month

logger = get_logger(__name__)


class AnomalyDetector:
    def __init__(self, store: StoragePort, tuning: EngineTuning | None = None):
        self.store = store
        self.tuning = tuning or EngineTuning()

    def trailing_amounts(
        self, user_id: int, category_id: int, month: int, year: int, lookback_months: int
    ) -> list[int]:
        """Actual amounts of the category in the months before ``(month, year)``."""
        amounts: list[int] = []
        for past_month, past_year in months_back(month, year, lookback_months, include_start=False):
            scan = scan_month(self.store, user_id, past_month, past_year)
            amounts.extend(
                item.entry.actual_value
                for item in scan.entries
                if item.category.id == category_id and item.entry.actual_value
            )
        return amounts

    def detect(
        self,
        user_id: int,
        category_id: int,
        amount: int,
        month: int,
        year: int,
        *,
        threshold: float | None = None,
        min_samples: int | None = None,
        lookback_months: int | None = None,
    ) -> AnomalyResult:
        threshold = self.tuning.anomaly_threshold if threshold is None else threshold
        min_samples = self.tuning.anomaly_min_samples if min_samples is None else min_samples
        lookback = self.tuning.anomaly_lookback_months if lookback_months is None else lookback_months

        history = self.trailing_amounts(user_id, category_id, month, year, lookback)
        if not history or len(history) < min_samples:
            logger.debug(
                "[ANOMALY] user=%s category=%s: %d samples, need %d",
                user_id, category_id, len(history), min_samples,
            )
            return AnomalyResult(is_anomalous=False, average=0)

        average = sum(history) / len(history)
        is_anomalous = amount > average * threshold
        if is_anomalous:
            logger.info(
                "[ANOMALY] user=%s category=%s amount=%s exceeds %.2f x average %.2f",
                user_id, category_id, amount, threshold, average,
            )
        return AnomalyResult(is_anomalous=is_anomalous, average=average)
