from datetime import date

from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.domain.months import months_back
from budget_intelligence.logger import get_logger
from budget_intelligence.storage.base import StoragePort

from .entries import scan_month
from .forecast import CashFlowForecaster

logger = get_logger(__name__)


def format_reais(cents: int) -> str:
    return f"R$ {cents / 100:.2f}"


class RecommendationGenerator:
    def __init__(
        self,
        store: StoragePort,
        forecaster: CashFlowForecaster,
        tuning: EngineTuning | None = None,
    ):
        self.store = store
        self.forecaster = forecaster
        self.tuning = tuning or EngineTuning()

    def category_averages(self, user_id: int, today: date) -> dict[int, float]:
        """Mean actual value per entry and category over the trailing window."""
        totals: dict[int, int] = {}
        counts: dict[int, int] = {}
        window = self.tuning.recommendation_window_months
        for month, year in months_back(today.month, today.year, window):
            for item in scan_month(self.store, user_id, month, year).entries:
                category_id = item.category.id
                totals[category_id] = totals.get(category_id, 0) + item.actual
                counts[category_id] = counts.get(category_id, 0) + 1
        return {
            category_id: totals[category_id] / count
            for category_id, count in counts.items()
            if count > 0
        }

    def generate(self, user_id: int, today: date | None = None) -> list[str]:
        today = today or date.today()
        recommendations: list[str] = []
        averages = self.category_averages(user_id, today)
        multiplier = self.tuning.recommendation_spend_multiplier

        for item in scan_month(self.store, user_id, today.month, today.year).entries:
            average = averages.get(item.category.id, 0)
            if average > 0 and item.actual > multiplier * average:
                name = item.category.name or "Categoria"
                recommendations.append(
                    f'O gasto em "{name}" neste mês ({format_reais(item.actual)}) excede o dobro '
                    "da média histórica. Considere revisar esta categoria."
                )

        forecast = self.forecaster.forecast(
            user_id, self.tuning.recommendation_forecast_months, today=today
        )
        if forecast and forecast[0].predicted_balance < 0:
            recommendations.append(
                "Prevemos que o saldo do próximo mês pode ficar negativo "
                f"({format_reais(forecast[0].predicted_balance)}). "
                "Considere reduzir gastos ou aumentar receitas."
            )

        logger.debug("[RECOMMEND] user=%s produced %d recommendations", user_id, len(recommendations))
        return recommendations
