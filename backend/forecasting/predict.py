# backend/forecasting/predict.py
import logging
from collections import OrderedDict, deque
from typing import Callable, Dict, Iterator, MutableMapping, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn

from forecasting.artifacts import ModelArtifactStore
from forecasting.dataset import WINDOW
from forecasting.date_utils import shift_period
from forecasting.model import LSTMForecaster, SimpleForecaster
from forecasting.preprocess import NormalizedSeries
from forecasting.schemas import ForecastPoint
from forecasting.train_lstm import HIDDEN_DIM, train_sequence_model
from forecasting.train_simple import train_simple_model

logger = logging.getLogger(__name__)

StepFn = Callable[[np.ndarray], float]

MODEL_CACHE_SIZE = 64


def autoregressive_forecast(
    step: StepFn,
    seed: Sequence[float],
    series: NormalizedSeries,
    last_period: str,
    months: int,
) -> Iterator[ForecastPoint]:
    """
    Yield `months` forecast points, one calendar month after another.

    step: maps the current normalized window to the next normalized value
    seed: last observed normalized values; its length fixes the window width

    The raw normalized prediction is fed back into the window; only the
    emitted amount is denormalized and clamped at zero.
    """
    window = deque((float(v) for v in seed), maxlen=len(seed))
    period = last_period
    for _ in range(months):
        value = float(step(np.asarray(window, dtype=np.float32)))
        period = shift_period(period, 1)
        yield ForecastPoint(period=period, amount=max(0.0, series.denormalize(value)))
        window.append(value)


def _torch_step(model: nn.Module, shape: Callable[[torch.Tensor], torch.Tensor]) -> StepFn:
    def step(window: np.ndarray) -> float:
        x = shape(torch.tensor(window, dtype=torch.float32))
        with torch.no_grad():
            return float(model(x).item())
    return step


class ModelCache(OrderedDict):
    """Least-recently-used mapping of artifact key to trained model."""

    def __init__(self, maxsize: int = MODEL_CACHE_SIZE):
        super().__init__()
        if maxsize < 1:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        self.maxsize = maxsize

    def get(self, key, default=None):
        if key not in self:
            return default
        self.move_to_end(key)
        return self[key]

    def __setitem__(self, key, value):
        super().__setitem__(key, value)
        self.move_to_end(key)
        while len(self) > self.maxsize:
            evicted, _ = self.popitem(last=False)
            logger.debug("Evicted cached sequence model %s", evicted)


class SequencePredictor:
    """
    LSTM over the last WINDOW normalized months.

    Trained weights live in `store` under a caller-supplied key and are kept
    in `cache` (an LRU of MODEL_CACHE_SIZE models unless one is passed in);
    once either holds a model it is reused as-is without retraining.
    """

    def __init__(
        self,
        store: ModelArtifactStore,
        cache: Optional[MutableMapping[str, nn.Module]] = None,
        window: int = WINDOW,
        hidden_dim: int = HIDDEN_DIM,
        train_kwargs: Optional[Dict] = None,
    ):
        self.store = store
        self.cache = cache if cache is not None else ModelCache()
        self.window = window
        self.hidden_dim = hidden_dim
        self.train_kwargs = train_kwargs or {}

    def fit_or_load(self, key: str, X: np.ndarray, y: np.ndarray) -> LSTMForecaster:
        model = self.cache.get(key)
        if model is not None:
            logger.debug("Reusing cached sequence model %s", key)
            return model

        state = self.store.load(key)
        if state is not None:
            model = LSTMForecaster(input_dim=1, hidden_dim=self.hidden_dim)
            model.load_state_dict(state)
            model.eval()
        else:
            model = train_sequence_model(X, y, hidden_dim=self.hidden_dim, **self.train_kwargs)
            self.store.save(key, model.state_dict())

        self.cache[key] = model
        return model

    def forecast(
        self,
        model: LSTMForecaster,
        series: NormalizedSeries,
        last_period: str,
        months: int,
    ) -> Iterator[ForecastPoint]:
        if len(series) < self.window:
            raise ValueError(f"Need at least {self.window} values to seed the forecast")
        # (W,) -> (1, W, 1)
        step = _torch_step(model, lambda t: t.reshape(1, -1, 1))
        return autoregressive_forecast(
            step, series.values[-self.window:], series, last_period, months
        )


class SimplePredictor:
    """One value in, next value out; retrained on every call."""

    MIN_POINTS = 2

    def __init__(self, train_kwargs: Optional[Dict] = None):
        self.train_kwargs = train_kwargs or {}

    def fit(self, series: NormalizedSeries) -> SimpleForecaster:
        return train_simple_model(series.values, **self.train_kwargs)

    def forecast(
        self,
        model: SimpleForecaster,
        series: NormalizedSeries,
        last_period: str,
        months: int,
    ) -> Iterator[ForecastPoint]:
        # (1,) -> (1, 1)
        step = _torch_step(model, lambda t: t.reshape(1, 1))
        return autoregressive_forecast(
            step, series.values[-1:], series, last_period, months
        )
