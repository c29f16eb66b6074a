from typing import Optional, Union

from pydantic import BaseModel

from forecasting.schemas import GoalCompletionData, InsightsData, PredictionData


class PredictResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Union[PredictionData, GoalCompletionData]] = None


class InsightsResponse(BaseModel):
    success: bool
    message: str
    data: Optional[InsightsData] = None
