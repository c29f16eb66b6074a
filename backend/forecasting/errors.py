class ForecastError(Exception):
    """Base error for the forecasting engine."""


class ArtifactError(ForecastError):
    """Raised when a persisted model artifact can't be read or written."""
