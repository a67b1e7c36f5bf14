from typing import Literal, Optional

from pydantic import BaseModel, Field

CategoryType = Literal["income", "expense", "investment"]
LearnSource = Literal["manual", "confirmed"]


class Transaction(BaseModel):
    description: str
    amount: int # cents; positive is money coming in


class Category(BaseModel):
    id: int
    name: str
    type: CategoryType


class Item(BaseModel):
    id: int
    category_id: int


class Entry(BaseModel):
    item_id: int
    actual_value: Optional[int] = None # cents
    planned_value: Optional[int] = None


class ClassificationRecord(BaseModel):
    id: Optional[int] = None # assigned by the store on insert
    user_id: int
    description: str # normalized: trimmed, lower-cased
    amount: int # cents, signed
    category_id: int
    confidence: int = Field(default=50, ge=0, le=100)
    confirmations: int = Field(default=1, ge=1)
    source: LearnSource = "manual"


class Suggestion(BaseModel):
    category_name: str
    category_type: CategoryType
    confidence: int = Field(ge=0, le=100)


class ForecastPoint(BaseModel):
    month: int
    year: int
    predicted_balance: int


class AnomalyResult(BaseModel):
    is_anomalous: bool
    average: float


class TopCategory(BaseModel):
    category_name: str
    count: int


class ClassificationStats(BaseModel):
    total_classifications: int = 0
    high_confidence_count: int = 0
    top_categories: list[TopCategory] = Field(default_factory=list)


class InsightReport(BaseModel):
    recommendations: list[str] = Field(default_factory=list)
    summary: Optional[str] = None # phrased by the optional LLM collaborator
