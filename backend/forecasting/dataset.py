# backend/forecasting/dataset.py
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np
import torch
from torch.utils.data import Dataset

WINDOW = 3


class WindowedSample(NamedTuple):
    input: Tuple[float, ...]
    target: float


def sliding_windows(values: Sequence[float], window: int = WINDOW) -> List[WindowedSample]:
    """
    values: normalized 1-D series
    returns one sample per offset i: input = values[i:i+window], target = values[i+window]
    """
    values = [float(v) for v in values]
    return [
        WindowedSample(tuple(values[i:i + window]), values[i + window])
        for i in range(len(values) - window)
    ]


def make_windows(values: Sequence[float], window: int = WINDOW) -> Tuple[np.ndarray, np.ndarray]:
    """
    Same samples as sliding_windows, stacked as X (N, window) and y (N,).
    """
    samples = sliding_windows(values, window)
    X = np.array([s.input for s in samples], dtype=np.float32).reshape(-1, window)
    y = np.array([s.target for s in samples], dtype=np.float32)
    return X, y


class WindowDataset(Dataset):
    def __init__(self, X: np.ndarray, y: np.ndarray):
        """
        X: numpy array (N, W) of input windows
        y: numpy array (N,) of next values
        """
        if len(X) != len(y):
            raise ValueError(f"Mismatched samples: {len(X)} inputs vs {len(y)} targets")
        self.X = X
        self.y = y

    def __len__(self):
        return len(self.X)

    def __getitem__(self, i):
        # LSTM wants (W, F) with a single feature
        x = torch.tensor(self.X[i], dtype=torch.float32).unsqueeze(-1)  # (W, 1)
        y = torch.tensor(self.y[i], dtype=torch.float32)
        return x, y
