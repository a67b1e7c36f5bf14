from typing import Annotated

from fastapi import Header, HTTPException, Request

from budget_intelligence.manager import IntelligenceEngine
from budget_intelligence.services.insights import InsightService


def get_engine(request: Request) -> IntelligenceEngine:
    engine = getattr(request.app.state, "engine", None)
    if not engine:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return engine


def get_insights(request: Request) -> InsightService:
    insights = getattr(request.app.state, "insights", None)
    if not insights:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return insights


def get_user_id(x_user_id: Annotated[int, Header(gt=0)]) -> int:
    # Authentication happens upstream; the gateway forwards the user id.
    return x_user_id
