from budget_intelligence.core.tuning import EngineTuning
from budget_intelligence.logger import get_logger
from budget_intelligence.models import ClassificationStats, TopCategory
from budget_intelligence.storage.base import StoragePort, StorageUnavailableError

logger = get_logger(__name__)

UNKNOWN_CATEGORY_NAME = "Desconhecida"


def build_classification_stats(
    store: StoragePort, user_id: int, tuning: EngineTuning | None = None
) -> ClassificationStats:
    tuning = tuning or EngineTuning()
    try:
        history = [r for r in store.list_classification_history(user_id) if r.user_id == user_id]
    except StorageUnavailableError as e:
        logger.warning("[STATS] History unavailable for user %s: %s", user_id, e)
        return ClassificationStats()

    confirmations: dict[int, int] = {}
    for record in history:
        confirmations[record.category_id] = confirmations.get(record.category_id, 0) + record.confirmations

    ranked = sorted(confirmations.items(), key=lambda pair: pair[1], reverse=True)
    top_categories: list[TopCategory] = []
    for category_id, count in ranked[: tuning.top_categories_limit]:
        try:
            category = store.get_category_by_id(category_id)
        except StorageUnavailableError:
            category = None
        top_categories.append(
            TopCategory(category_name=category.name if category else UNKNOWN_CATEGORY_NAME, count=count)
        )

    return ClassificationStats(
        total_classifications=len(history),
        high_confidence_count=sum(1 for r in history if r.confidence >= tuning.high_confidence_threshold),
        top_categories=top_categories,
    )
