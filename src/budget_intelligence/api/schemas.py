from pydantic import BaseModel, Field

from budget_intelligence.models import LearnSource


class ClassifyRequest(BaseModel):
    description: str
    amount: int
    category: str | None = None


class LearnRequest(BaseModel):
    description: str
    amount: int
    category_id: int
    source: LearnSource = "manual"


class AnomalyRequest(BaseModel):
    category_id: int
    amount: int
    month: int = Field(ge=1, le=12)
    year: int
    threshold: float | None = Field(default=None, gt=0)
    min_samples: int | None = Field(default=None, ge=1)
