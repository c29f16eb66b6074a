# backend/forecasting/train_lstm.py
import logging

import numpy as np
import torch
import torch.nn as nn
from torch.utils.data import DataLoader

from forecasting.dataset import WindowDataset
from forecasting.model import LSTMForecaster

logger = logging.getLogger(__name__)

EPOCHS = 100
BATCH_SIZE = 4
LEARNING_RATE = 0.01
HIDDEN_DIM = 8


def train_sequence_model(
    X: np.ndarray,
    y: np.ndarray,
    epochs: int = EPOCHS,
    batch_size: int = BATCH_SIZE,
    lr: float = LEARNING_RATE,
    hidden_dim: int = HIDDEN_DIM,
) -> LSTMForecaster:
    """
    Fit a fresh LSTMForecaster on windowed samples.

    X: (N, W) normalized input windows
    y: (N,) normalized next values
    """
    dataset = WindowDataset(X, y)
    if len(dataset) == 0:
        raise ValueError("No windowed samples to train on")

    loader = DataLoader(dataset, batch_size=batch_size, shuffle=True)

    model = LSTMForecaster(input_dim=1, hidden_dim=hidden_dim)
    loss_fn = nn.MSELoss()
    optimizer = torch.optim.Adam(model.parameters(), lr=lr)

    logger.info("Training sequence model on %d windows for %d epochs", len(dataset), epochs)
    for epoch in range(epochs):
        model.train()
        total_loss = 0.0
        for xb, yb in loader:
            optimizer.zero_grad()
            pred = model(xb)
            loss = loss_fn(pred, yb)
            loss.backward()
            torch.nn.utils.clip_grad_norm_(model.parameters(), 1.0)
            optimizer.step()
            total_loss += loss.item()

        logger.debug("Epoch %d/%d: Train Loss=%.4f", epoch + 1, epochs, total_loss / len(loader))

    model.eval()
    return model
