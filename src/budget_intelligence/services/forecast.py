from datetime import date

from budget_intelligence.domain.months import months_ahead, months_back, round_half_up
from budget_intelligence.logger import get_logger
from budget_intelligence.models import ForecastPoint
from budget_intelligence.storage.base import StoragePort

from .entries import scan_month

logger = get_logger(__name__)


class CashFlowForecaster:
    """Flat projection of the average monthly net cash flow.

    Deliberately no trend or seasonality: the projected number is always the
    plain mean of the observed months, so it can be explained to the user.
    """

    def __init__(self, store: StoragePort):
        self.store = store

    def net_history(self, user_id: int, n_months: int, today: date) -> tuple[list[int], int]:
        """Net values from the oldest to the current month, and how many entries backed them."""
        nets: list[int] = []
        observed = 0
        for month, year in months_back(today.month, today.year, n_months):
            scan = scan_month(self.store, user_id, month, year)
            income = sum(e.actual for e in scan.entries if e.category.type == "income")
            outflow = sum(e.actual for e in scan.entries if e.category.type in {"expense", "investment"})
            nets.append(income - outflow)
            observed += len(scan.entries)
        nets.reverse()
        return nets, observed

    def forecast(self, user_id: int, n_months: int, today: date | None = None) -> list[ForecastPoint]:
        if n_months <= 0:
            return []
        today = today or date.today()

        nets, observed = self.net_history(user_id, n_months, today)
        if not observed:
            logger.debug("[FORECAST] user=%s has no entries in the last %d months", user_id, n_months)
            return []

        average = round_half_up(sum(nets) / len(nets))
        logger.debug("[FORECAST] user=%s nets=%s average=%s", user_id, nets, average)
        return [
            ForecastPoint(month=month, year=year, predicted_balance=average)
            for month, year in months_ahead(today.month, today.year, n_months)
        ]
