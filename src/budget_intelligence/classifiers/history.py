from dataclasses import dataclass

from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.domain.months import round_half_up
from budget_intelligence.domain.text import normalize_description, tokenize
from budget_intelligence.logger import get_logger
from budget_intelligence.models import (
    Category,
    ClassificationRecord,
    LearnSource,
    Suggestion,
    Transaction,
)
from budget_intelligence.storage.base import StoragePort, StorageUnavailableError

from .base import Classifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class HistoryMatch:
    category: Category
    score: int
    confidence: int

    @property
    def combined_score(self) -> float:
        return self.score * self.confidence / 100


class HistoryMatcher(Classifier):
    """Suggests categories from the user's own past classifications."""

    def __init__(self, store: StoragePort, tuning: EngineTuning | None = None):
        self.store = store
        self.tuning = tuning or EngineTuning()

    def score(self, description: str, amount: int, record: ClassificationRecord) -> float:
        """Similarity of a normalized description/amount pair to a stored record."""
        if record.description == description:
            return float(self.tuning.exact_match_score)

        words = tokenize(description)
        record_words = tokenize(record.description)
        longest = max(len(words), len(record_words))
        common = [word for word in words if word in record_words]
        score = (len(common) / longest) * self.tuning.word_overlap_weight if longest else 0.0

        amount_scale = max(abs(amount), abs(record.amount))
        if amount_scale and abs(amount - record.amount) / amount_scale < self.tuning.amount_proximity_band:
            score += self.tuning.amount_proximity_bonus
        return score

    def find_matches(self, user_id: int, transaction: Transaction) -> list[HistoryMatch]:
        try:
            history = self.store.list_classification_history(user_id)
        except StorageUnavailableError as e:
            logger.warning("[CLASSIFY] History unavailable for user %s: %s", user_id, e)
            return []

        description = normalize_description(transaction.description)
        resolved: dict[int, Category | None] = {}
        best: dict[int, HistoryMatch] = {}

        for record in sorted(history, key=lambda r: r.confidence, reverse=True):
            if record.user_id != user_id:
                continue
            score = self.score(description, transaction.amount, record)
            if score <= self.tuning.min_match_score:
                continue
            current = best.get(record.category_id)
            if current is not None and score <= current.score:
                continue
            if record.category_id not in resolved:
                resolved[record.category_id] = self._resolve_category(record.category_id)
            category = resolved[record.category_id]
            if category is None:
                continue
            best[record.category_id] = HistoryMatch(
                category=category,
                score=round_half_up(score),
                confidence=record.confidence,
            )

        ranked = sorted(best.values(), key=lambda m: m.combined_score, reverse=True)
        return ranked[: self.tuning.max_suggestions]

    def _resolve_category(self, category_id: int) -> Category | None:
        try:
            return self.store.get_category_by_id(category_id)
        except StorageUnavailableError as e:
            logger.warning("[CLASSIFY] Category %s lookup failed: %s", category_id, e)
            return None

    def classify(self, user_id: int, transaction: Transaction) -> list[Suggestion]:
        return [
            Suggestion(
                category_name=match.category.name,
                category_type=match.category.type,
                confidence=min(100, round_half_up(match.confidence * match.score / 100)),
            )
            for match in self.find_matches(user_id, transaction)
        ]

    def learn(
        self,
        user_id: int,
        transaction: Transaction,
        category_id: int,
        source: LearnSource = "manual",
    ) -> None:
        initial = (
            self.tuning.confirmed_initial_confidence
            if source == "confirmed"
            else self.tuning.manual_initial_confidence
        )
        candidate = ClassificationRecord(
            user_id=user_id,
            description=normalize_description(transaction.description),
            amount=transaction.amount,
            category_id=category_id,
            confidence=initial,
            confirmations=1,
            source=source,
        )
        try:
            stored = self.store.upsert_classification_record(
                candidate,
                confidence_step=self.tuning.confidence_step,
                max_confidence=self.tuning.max_confidence,
            )
        except StorageUnavailableError as e:
            logger.warning("[LEARN] Skipped learning for user %s: %s", user_id, e)
            return
        logger.debug(
            "[LEARN] user=%s '%s' -> %s confidence=%s confirmations=%s",
            user_id, stored.description, category_id, stored.confidence, stored.confirmations,
        )
