import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from budget_intelligence.api.routes import classification, insights
from budget_intelligence.core import settings
from budget_intelligence.integration.llm import InsightPhraser
from budget_intelligence.logger import get_logger, setup_logging
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.services.insights import InsightService
from budget_intelligence.storage.json_store import JsonFileStore

logger = get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        store = JsonFileStore(data_path=os.path.join(settings.DATA_DIR, settings.STORE_FILENAME))
        engine = IntelligenceEngine.from_env(store)
        phraser = InsightPhraser.from_env()
        if phraser is None:
            logger.info("OPENAI_API_KEY not set. Insight phrasing will be disabled.")

        app.state.store = store
        app.state.engine = engine
        app.state.insights = InsightService(engine=engine, phraser=phraser)

        logger.info("Services initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Budget Intelligence", lifespan=lifespan)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(classification.router)
    app.include_router(insights.router)

    return app


app = create_app()
