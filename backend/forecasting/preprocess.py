from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd
from sklearn.preprocessing import MinMaxScaler

from forecasting.schemas import TimeSeriesPoint, Transaction, TransactionType


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    transactions: Transaction records
    returns DataFrame with date, amount, type, month columns ordered by (date, amount)
    """
    rows = [
        {"date": t.date, "amount": float(t.amount), "type": TransactionType(t.type).value}
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=["date", "amount", "type"])
    if df.empty:
        df["month"] = pd.Series(dtype=str)
        return df

    # tz-aware and naive datetimes can't share a column
    df["date"] = pd.to_datetime(df["date"], utc=True)
    df["month"] = df["date"].dt.tz_localize(None).dt.to_period("M").astype(str)
    # sum in a fixed order so the totals don't depend on how records arrived
    return df.sort_values(["date", "amount"], kind="mergesort").reset_index(drop=True)


def build_monthly_series(transactions: Iterable[Transaction]) -> List[TimeSeriesPoint]:
    """
    Group already-filtered transactions into calendar-month totals.

    One point per month that has at least one transaction, ascending by period.
    Months without activity are left out (no zero back-fill).
    """
    df = transactions_frame(transactions)
    if df.empty:
        return []

    monthly = df.groupby("month", sort=True)["amount"].sum()
    return [
        TimeSeriesPoint(period=month, amount=float(total))
        for month, total in monthly.items()
    ]


def monthly_income_expense(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """
    returns DataFrame indexed by month with `income` and `expense` columns
    """
    df = transactions_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=["income", "expense"], dtype=float)

    pivot = df.pivot_table(
        index="month", columns="type", values="amount", aggfunc="sum", fill_value=0.0
    )
    for col in ("income", "expense"):
        if col not in pivot.columns:
            pivot[col] = 0.0
    return pivot[["income", "expense"]].astype(float).sort_index()


@dataclass
class NormalizedSeries:
    values: np.ndarray
    min: float
    max: float

    @property
    def scale(self) -> float:
        rng = self.max - self.min
        return rng if rng != 0 else 1.0

    def denormalize(self, value: float) -> float:
        return denormalize(value, self.min, self.max)

    def __len__(self):
        return len(self.values)


def normalize(values: Sequence[float]) -> NormalizedSeries:
    """
    Min-max scale a 1-D series into [0, 1].

    A constant series maps to zeros; MinMaxScaler treats the zero range as 1.
    """
    arr = np.asarray(values, dtype=np.float64).reshape(-1, 1)
    if arr.shape[0] == 0:
        raise ValueError("Cannot normalize an empty series")

    scaler = MinMaxScaler()
    scaled = scaler.fit_transform(arr).ravel()
    return NormalizedSeries(
        values=scaled,
        min=float(scaler.data_min_[0]),
        max=float(scaler.data_max_[0]),
    )


def denormalize(value: float, lo: float, hi: float) -> float:
    rng = hi - lo
    if rng == 0:
        rng = 1.0
    return float(value) * rng + lo
