from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from finance_api.dependencies import get_forecast_service
from finance_api.schemas.predict import InsightsResponse, PredictResponse
from forecasting.insights import financial_insights
from forecasting.service import ForecastService


router = APIRouter()


def current_user(x_user_id: str = Header(..., min_length=1)) -> str:
    # authentication happens upstream; the gateway forwards the user id
    return x_user_id


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/predictions/spending", response_model=PredictResponse)
def predict_spending(
    months: int = Query(1, ge=1, le=12),
    category: Optional[str] = None,
    user_id: str = Depends(current_user),
    service: ForecastService = Depends(get_forecast_service),
):
    """
    Forecast monthly spending for the next `months` months.
    Uses the LSTM with 6+ months of history, the simple model otherwise.
    """
    result = service.predict_spending(user_id, months, category)
    return PredictResponse(success=result.success, message=result.message, data=result.data)


@router.get("/predictions/savings", response_model=PredictResponse)
def predict_savings(
    months: int = Query(1, ge=1, le=12),
    goal_id: Optional[str] = None,
    user_id: str = Depends(current_user),
    service: ForecastService = Depends(get_forecast_service),
):
    result = service.predict_savings(user_id, months, goal_id)
    return PredictResponse(success=result.success, message=result.message, data=result.data)


@router.get("/predictions/savings-goal/{goal_id}", response_model=PredictResponse)
def predict_savings_goal_completion(
    goal_id: str,
    user_id: str = Depends(current_user),
    service: ForecastService = Depends(get_forecast_service),
):
    result = service.predict_savings_goal_completion(user_id, goal_id)
    return PredictResponse(success=result.success, message=result.message, data=result.data)


@router.get("/predictions/insights", response_model=InsightsResponse)
def get_financial_insights(
    user_id: str = Depends(current_user),
    service: ForecastService = Depends(get_forecast_service),
):
    result = financial_insights(service, user_id)
    return InsightsResponse(success=result.success, message=result.message, data=result.data)
