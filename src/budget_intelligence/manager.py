import os
from datetime import date

from budget_intelligence.classifiers.history import HistoryMatcher
from budget_intelligence.classifiers.keywords import (
    DEFAULT_KEYWORD_RULES,
    KeywordRuleTable,
    load_keyword_rules,
)
from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.domain.text import infer_category_type, mentions_investment
from budget_intelligence.logger import get_logger
from budget_intelligence.models import (
    AnomalyResult,
    ClassificationStats,
    ForecastPoint,
    LearnSource,
    Suggestion,
    Transaction,
)
from budget_intelligence.services.anomaly import AnomalyDetector
from budget_intelligence.services.forecast import CashFlowForecaster
from budget_intelligence.services.recommendations import RecommendationGenerator
from budget_intelligence.services.stats import build_classification_stats
from budget_intelligence.storage.base import StoragePort

logger = get_logger(__name__)

INCOME_FALLBACK = "Receita"
INVESTMENT_FALLBACK = "Investimento"
EXPENSE_FALLBACK = "Despesa"


class IntelligenceEngine:
    """Entry point for classification, learning, anomaly checks and forecasts.

    Holds no per-user state; everything is read from ``store`` on each call,
    so one engine can serve concurrent requests for different users.
    """

    def __init__(
        self,
        store: StoragePort,
        keywords: KeywordRuleTable | None = None,
        tuning: EngineTuning | None = None,
    ):
        self.store = store
        self.tuning = tuning or EngineTuning()
        self.keywords = keywords or KeywordRuleTable(confidence=self.tuning.keyword_confidence)
        self.history = HistoryMatcher(store, self.tuning)
        self.anomalies = AnomalyDetector(store, self.tuning)
        self.forecaster = CashFlowForecaster(store)
        self.recommender = RecommendationGenerator(store, self.forecaster, self.tuning)

    @classmethod
    def from_env(cls, store: StoragePort) -> "IntelligenceEngine":
        tuning = EngineTuning.from_env()
        rules_file = os.getenv("KEYWORD_RULES_FILE")
        rules = load_keyword_rules(rules_file) if rules_file else DEFAULT_KEYWORD_RULES
        return cls(store, KeywordRuleTable(rules, confidence=tuning.keyword_confidence), tuning)

    def _override(self, provided_category: str, amount: int) -> Suggestion:
        name = provided_category.strip()
        return Suggestion(
            category_name=name,
            category_type=infer_category_type(name, amount),
            confidence=self.tuning.override_confidence,
        )

    def _fallback(self, description: str, amount: int) -> Suggestion:
        if amount > 0:
            return Suggestion(
                category_name=INCOME_FALLBACK,
                category_type="income",
                confidence=self.tuning.fallback_confidence,
            )
        if mentions_investment(description):
            return Suggestion(
                category_name=INVESTMENT_FALLBACK,
                category_type="investment",
                confidence=self.tuning.fallback_confidence,
            )
        return Suggestion(
            category_name=EXPENSE_FALLBACK,
            category_type="expense",
            confidence=self.tuning.fallback_confidence,
        )

    def classify(
        self,
        user_id: int,
        description: str,
        amount: int,
        provided_category: str | None = None,
    ) -> list[Suggestion]:
        if provided_category and provided_category.strip():
            return [self._override(provided_category, amount)]

        transaction = Transaction(description=description, amount=amount)
        suggestions: list[Suggestion] = []
        seen: set[str] = set()
        for classifier in (self.history, self.keywords):
            classifier_name = classifier.__class__.__name__
            found = classifier.classify(user_id, transaction)
            logger.debug(f"{classifier_name} returned {len(found)} suggestion(s) for: '{description[:50]}'")
            for suggestion in found:
                if suggestion.category_name not in seen:
                    seen.add(suggestion.category_name)
                    suggestions.append(suggestion)

        if not suggestions:
            suggestions.append(self._fallback(description, amount))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        return suggestions[: self.tuning.max_suggestions]

    def classify_simple(
        self,
        description: str,
        amount: int,
        provided_category: str | None = None,
    ) -> Suggestion:
        """Single best guess without per-user history."""
        if provided_category and provided_category.strip():
            return self._override(provided_category, amount)

        name = self.keywords.first_match(description)
        if name is not None:
            return Suggestion(
                category_name=name,
                category_type=infer_category_type(name, amount),
                confidence=self.keywords.confidence,
            )
        return self._fallback(description, amount)

    def learn(
        self,
        user_id: int,
        description: str,
        amount: int,
        category_id: int,
        source: LearnSource = "manual",
    ) -> None:
        self.history.learn(user_id, Transaction(description=description, amount=amount), category_id, source)

    def detect_anomaly(
        self,
        user_id: int,
        category_id: int,
        amount: int,
        month: int,
        year: int,
        *,
        threshold: float | None = None,
        min_samples: int | None = None,
    ) -> AnomalyResult:
        return self.anomalies.detect(
            user_id, category_id, amount, month, year,
            threshold=threshold, min_samples=min_samples,
        )

    def forecast_cash_flow(
        self, user_id: int, n_months: int, today: date | None = None
    ) -> list[ForecastPoint]:
        return self.forecaster.forecast(user_id, n_months, today=today)

    def generate_recommendations(self, user_id: int, today: date | None = None) -> list[str]:
        return self.recommender.generate(user_id, today=today)

    def get_classification_stats(self, user_id: int) -> ClassificationStats:
        return build_classification_stats(self.store, user_id, self.tuning)
