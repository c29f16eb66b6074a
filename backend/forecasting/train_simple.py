# backend/forecasting/train_simple.py
import logging
from typing import Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn

from forecasting.model import SimpleForecaster

logger = logging.getLogger(__name__)

ITERATIONS = 1000
ERROR_THRESHOLD = 0.005
LEARNING_RATE = 0.01


def make_step_pairs(values: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """(values[i], values[i+1]) for i in 0..len-2"""
    arr = np.asarray(values, dtype=np.float32)
    return arr[:-1].reshape(-1, 1), arr[1:]


def train_simple_model(
    values: Sequence[float],
    iterations: int = ITERATIONS,
    error_thresh: float = ERROR_THRESHOLD,
    lr: float = LEARNING_RATE,
) -> SimpleForecaster:
    """
    Train a one-step regressor on consecutive pairs of a normalized series.

    Full-batch training; stops early once the MSE drops below error_thresh.
    """
    X, y = make_step_pairs(values)
    if len(X) == 0:
        raise ValueError("Need at least 2 values to build a training pair")

    xs = torch.from_numpy(X)
    ys = torch.from_numpy(y)

    model = SimpleForecaster()
    loss_fn = nn.MSELoss()
    optimizer = torch.optim.Adam(model.parameters(), lr=lr)

    model.train()
    loss_val = float("inf")
    for it in range(1, iterations + 1):
        optimizer.zero_grad()
        loss = loss_fn(model(xs), ys)
        loss.backward()
        optimizer.step()
        loss_val = loss.item()
        if loss_val < error_thresh:
            logger.debug("Simple model converged at iteration %d (mse=%.5f)", it, loss_val)
            break

    logger.debug("Simple model trained on %d pairs, final mse=%.5f", len(X), loss_val)
    model.eval()
    return model
