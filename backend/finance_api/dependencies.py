import logging
import os
from functools import lru_cache

from finance_api.core.config import ARTIFACT_SCOPE, DATA_PATH, MODEL_DIR
from forecasting.artifacts import FileArtifactStore
from forecasting.repository import InMemoryRepository
from forecasting.service import ForecastService

logger = logging.getLogger(__name__)


@lru_cache
def get_forecast_service() -> ForecastService:
    if DATA_PATH and os.path.exists(DATA_PATH):
        repo = InMemoryRepository.from_json(DATA_PATH)
    else:
        if DATA_PATH:
            logger.warning("FORECAST_DATA_PATH %s not found, starting with no data", DATA_PATH)
        repo = InMemoryRepository()

    return ForecastService(
        transactions=repo,
        goals=repo,
        artifact_store=FileArtifactStore(MODEL_DIR),
        artifact_scope=ARTIFACT_SCOPE,
    )
