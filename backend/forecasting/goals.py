"""
Savings-goal completion estimate.

The projection is linear: remaining amount divided by a monthly savings
rate, converted to days with a fixed 30-day month. The rate comes from the
goal's own contributions when there are enough of them, otherwise from the
user's overall income minus expenses.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

import pandas as pd

from forecasting.errors import ForecastError
from forecasting.preprocess import monthly_income_expense
from forecasting.schemas import Contribution, Transaction

logger = logging.getLogger(__name__)

MIN_CONTRIBUTIONS = 3
INCOME_FALLBACK_SHARE = 0.1
DAYS_PER_MONTH = 30


@dataclass
class GoalCompletionEstimate:
    remaining_amount: float
    monthly_savings_rate: float
    completion_date: datetime
    days_to_completion: int
    months_to_completion: float
    is_complete: bool = False


def contribution_rate(contributions: Sequence[Contribution]) -> float:
    """Total contributed divided by the number of distinct months that saw a contribution."""
    df = pd.DataFrame(
        {
            "date": pd.to_datetime([c.date for c in contributions], utc=True),
            "amount": [float(c.amount) for c in contributions],
        }
    )
    months = df["date"].dt.tz_localize(None).dt.to_period("M").nunique()
    if months == 0:
        return 0.0
    return float(df["amount"].sum()) / months


def inferred_rate(history: Iterable[Transaction]) -> float:
    """
    Average monthly (income - expense); if that is not positive, 10% of the
    average monthly income instead.
    """
    monthly = monthly_income_expense(history)
    months = len(monthly) or 1
    rate = float((monthly["income"] - monthly["expense"]).sum()) / months
    if rate <= 0:
        avg_income = float(monthly["income"].sum()) / months
        logger.debug("Net savings rate %.2f <= 0, falling back to %.0f%% of income", rate, INCOME_FALLBACK_SHARE * 100)
        rate = avg_income * INCOME_FALLBACK_SHARE
    return rate


def estimate_completion(
    target_amount: float,
    current_amount: float,
    contributions: Sequence[Contribution],
    history: Iterable[Transaction],
    now: datetime,
) -> GoalCompletionEstimate:
    remaining = float(target_amount) - float(current_amount)
    if remaining <= 0:
        return GoalCompletionEstimate(
            remaining_amount=remaining,
            monthly_savings_rate=0.0,
            completion_date=now,
            days_to_completion=0,
            months_to_completion=0.0,
            is_complete=True,
        )

    if len(contributions) >= MIN_CONTRIBUTIONS:
        rate = contribution_rate(contributions)
    else:
        rate = inferred_rate(history)

    if rate == 0:
        raise ForecastError("Monthly savings rate is zero; goal completion can't be projected")

    months = remaining / rate
    days = months * DAYS_PER_MONTH
    return GoalCompletionEstimate(
        remaining_amount=remaining,
        monthly_savings_rate=rate,
        completion_date=now + timedelta(days=days),
        days_to_completion=int(round(days)),
        months_to_completion=round(months, 1),
    )
