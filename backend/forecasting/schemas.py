from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class PredictionKind(str, Enum):
    SPENDING = "spending"
    SAVINGS = "savings"


class ModelType(str, Enum):
    SEQUENCE = "sequence"
    SIMPLE = "simple"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------- Records read from the persistence layer ----------

class Transaction(CamelModel):
    id: Optional[str] = None
    user: str
    type: TransactionType
    amount: float = Field(..., ge=0)
    category: str = "other"
    date: datetime
    savings_goal_id: Optional[str] = None


class SavingsGoal(CamelModel):
    id: str
    user: str
    name: str
    target_amount: float = Field(..., ge=0)
    current_amount: float = Field(0.0, ge=0)


class Contribution(CamelModel):
    amount: float
    date: datetime


# ---------- Forecast payloads ----------

class TimeSeriesPoint(CamelModel):
    period: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    amount: float = Field(..., ge=0)


class ForecastPoint(CamelModel):
    period: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="YYYY-MM")
    amount: float = Field(..., ge=0)


class PredictionData(CamelModel):
    historical: List[TimeSeriesPoint]
    predictions: List[ForecastPoint]
    prediction_type: PredictionKind
    model_type: Optional[ModelType] = None


class GoalCompletionData(CamelModel):
    goal_id: str
    goal_name: str
    is_complete: bool
    completion_date: datetime
    days_to_completion: int
    months_to_completion: float
    current_amount: Optional[float] = None
    target_amount: Optional[float] = None
    remaining_amount: Optional[float] = None
    monthly_savings_rate: Optional[float] = None


class PredictionResult(CamelModel):
    success: bool
    message: str
    data: Optional[Union[PredictionData, GoalCompletionData]] = None
    error: Optional[str] = None


# ---------- Insights ----------

class Insight(CamelModel):
    type: str  # "success", "info", "warning", "error"
    title: str
    description: str
    metric: str


class InsightMetrics(CamelModel):
    total_income: float
    total_expense: float
    net_savings: float
    savings_rate: float
    avg_monthly_income: float
    avg_monthly_expense: float
    avg_monthly_savings: float


class InsightsData(CamelModel):
    insights: List[Insight]
    metrics: InsightMetrics
    spending_prediction: Optional[PredictionData] = None


class InsightsResult(CamelModel):
    success: bool
    message: str = ""
    data: Optional[InsightsData] = None
    error: Optional[str] = None
