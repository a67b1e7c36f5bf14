import asyncio
from datetime import date

from budget_intelligence.integration.llm import InsightPhraser
from budget_intelligence.logger import get_logger
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.models import InsightReport

logger = get_logger(__name__)


class InsightService:
    def __init__(self, engine: IntelligenceEngine, phraser: InsightPhraser | None = None) -> None:
        self.engine = engine
        self.phraser = phraser

    async def build(self, user_id: int, today: date | None = None) -> InsightReport:
        recommendations = await asyncio.to_thread(
            self.engine.generate_recommendations, user_id, today
        )
        summary = None
        if self.phraser and recommendations:
            try:
                summary = await asyncio.to_thread(self.phraser.phrase, recommendations)
            except Exception as e:
                logger.error("[INSIGHTS] Phrasing failed for user %s: %s", user_id, e)
                summary = None
        return InsightReport(recommendations=recommendations, summary=summary)
