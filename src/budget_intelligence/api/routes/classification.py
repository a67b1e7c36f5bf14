import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends

from budget_intelligence.api.dependencies import get_engine, get_user_id
from budget_intelligence.api.schemas import ClassifyRequest, LearnRequest
from budget_intelligence.logger import get_logger
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.models import ClassificationStats, Suggestion

logger = get_logger(__name__)

router = APIRouter()


@router.post("/classify", response_model=list[Suggestion])
async def classify_transaction(
    req: ClassifyRequest,
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> list[Suggestion]:
    return await asyncio.to_thread(
        engine.classify, user_id, req.description, req.amount, req.category
    )


@router.post("/classify/simple", response_model=Suggestion)
async def classify_transaction_simple(
    req: ClassifyRequest,
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> Suggestion:
    return engine.classify_simple(req.description, req.amount, req.category)


@router.post("/learn")
async def learn_classification(
    req: LearnRequest,
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> dict[str, bool]:
    await asyncio.to_thread(
        engine.learn, user_id, req.description, req.amount, req.category_id, req.source
    )
    logger.info("[LEARN] user=%s '%s' -> category %s (%s)", user_id, req.description, req.category_id, req.source)
    return {"success": True}


@router.get("/classification-stats", response_model=ClassificationStats)
async def classification_stats(
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> ClassificationStats:
    return await asyncio.to_thread(engine.get_classification_stats, user_id)
