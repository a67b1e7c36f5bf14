from abc import ABC, abstractmethod

from budget_intelligence.models import LearnSource, Suggestion, Transaction


class Classifier(ABC):
    @abstractmethod
    def classify(self, user_id: int, transaction: Transaction) -> list[Suggestion]:
        """Return candidate categories for the transaction, best first."""
        pass

    @abstractmethod
    def learn(
        self,
        user_id: int,
        transaction: Transaction,
        category_id: int,
        source: LearnSource = "manual",
    ) -> None:
        """Learn from a user-chosen transaction-category pair."""
        pass
