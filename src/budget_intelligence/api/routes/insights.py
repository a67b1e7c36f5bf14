import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from budget_intelligence.api.dependencies import get_engine, get_insights, get_user_id
from budget_intelligence.api.schemas import AnomalyRequest
from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.models import AnomalyResult, ForecastPoint, InsightReport
from budget_intelligence.services.insights import InsightService

router = APIRouter()


@router.post("/anomaly", response_model=AnomalyResult)
async def detect_anomaly(
    req: AnomalyRequest,
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> AnomalyResult:
    return await asyncio.to_thread(
        lambda: engine.detect_anomaly(
            user_id,
            req.category_id,
            req.amount,
            req.month,
            req.year,
            threshold=req.threshold,
            min_samples=req.min_samples,
        )
    )


@router.get("/forecast", response_model=list[ForecastPoint])
async def forecast_cash_flow(
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
    months: Annotated[int, Query(ge=1, le=12)] = 3,
) -> list[ForecastPoint]:
    return await asyncio.to_thread(engine.forecast_cash_flow, user_id, months)


@router.get("/recommendations", response_model=list[str])
async def recommendations(
    user_id: Annotated[int, Depends(get_user_id)],
    engine: Annotated[IntelligenceEngine, Depends(get_engine)],
) -> list[str]:
    return await asyncio.to_thread(engine.generate_recommendations, user_id)


@router.get("/insights", response_model=InsightReport)
async def insights(
    user_id: Annotated[int, Depends(get_user_id)],
    service: Annotated[InsightService, Depends(get_insights)],
) -> InsightReport:
    return await service.build(user_id)
