import logging

from forecasting.schemas import ModelType

logger = logging.getLogger(__name__)

MIN_SEQUENCE_POINTS = 6
MIN_SEQUENCE_SAMPLES = 3


def select_model(n_points: int, n_samples: int) -> ModelType:
    """
    Pick the forecaster for a monthly series.

    Short histories (< 6 months) always go to the simple model. Otherwise the
    LSTM is used as long as windowing produced at least 3 training samples.
    """
    if n_points < MIN_SEQUENCE_POINTS:
        choice = ModelType.SIMPLE
    elif n_samples < MIN_SEQUENCE_SAMPLES:
        choice = ModelType.SIMPLE
    else:
        choice = ModelType.SEQUENCE

    logger.debug("Model selection: %d points, %d windows -> %s", n_points, n_samples, choice.value)
    return choice
