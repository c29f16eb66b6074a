"""
Forecasting entry points.

ForecastService wires the pipeline together:

    transactions -> monthly series -> normalize -> windows -> model choice
                 -> LSTM (persisted) | simple MLP (per call) -> forecast points

and runs the separate savings-goal completion estimate. Every public method
returns a result object; failures are reported in it instead of raised.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, MutableMapping, Optional

import torch.nn as nn

from forecasting.artifacts import SCOPE_USER, ModelArtifactStore, artifact_key
from forecasting.dataset import WINDOW, make_windows
from forecasting.date_utils import months_before
from forecasting.goals import estimate_completion
from forecasting.predict import SequencePredictor, SimplePredictor
from forecasting.preprocess import build_monthly_series, normalize
from forecasting.repository import GoalRepository, TransactionFilter, TransactionRepository
from forecasting.schemas import (
    Contribution,
    GoalCompletionData,
    ModelType,
    PredictionData,
    PredictionKind,
    PredictionResult,
    TransactionType,
)
from forecasting.selector import select_model

logger = logging.getLogger(__name__)

MIN_TRANSACTIONS = 3
HISTORY_MONTHS = 12
GOAL_HISTORY_MONTHS = 6

NOT_ENOUGH_HISTORY = "Not enough historical data for prediction"
NOT_ENOUGH_DATA = "Not enough data for prediction"
GOAL_NOT_FOUND = "Savings goal not found"
GOAL_REACHED = "Goal already reached"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ForecastService:
    def __init__(
        self,
        transactions: TransactionRepository,
        goals: GoalRepository,
        artifact_store: ModelArtifactStore,
        model_cache: Optional[MutableMapping[str, nn.Module]] = None,
        artifact_scope: str = SCOPE_USER,
        clock: Optional[Callable[[], datetime]] = None,
        sequence_predictor: Optional[SequencePredictor] = None,
        simple_predictor: Optional[SimplePredictor] = None,
    ):
        self.transactions = transactions
        self.goals = goals
        self.artifact_scope = artifact_scope
        self.clock = clock or utc_now
        self.sequence = sequence_predictor or SequencePredictor(artifact_store, model_cache)
        self.simple = simple_predictor or SimplePredictor()

    # ---------- Amount forecasts ----------

    def predict_spending(self, user_id: str, months: int = 1, category: Optional[str] = None) -> PredictionResult:
        """Forecast monthly expense totals for the next `months` months."""
        kind = PredictionKind.SPENDING
        try:
            flt = TransactionFilter(
                type=TransactionType.EXPENSE,
                category=category,
                date_from=months_before(self.clock(), HISTORY_MONTHS),
            )
            return self._predict_amounts(user_id, kind, flt, months)
        except Exception as e:
            logger.exception("Error predicting spending for user %s", user_id)
            return _failure(kind, e)

    def predict_savings(self, user_id: str, months: int = 1, goal_id: Optional[str] = None) -> PredictionResult:
        """Forecast monthly savings-goal contributions (one goal, or all of them)."""
        kind = PredictionKind.SAVINGS
        try:
            flt = TransactionFilter(
                savings_goal_id=goal_id,
                linked_to_goal=True,
                date_from=months_before(self.clock(), HISTORY_MONTHS),
            )
            return self._predict_amounts(user_id, kind, flt, months)
        except Exception as e:
            logger.exception("Error predicting savings for user %s", user_id)
            return _failure(kind, e)

    def _predict_amounts(self, user_id, kind, flt, months) -> PredictionResult:
        if months < 1:
            raise ValueError(f"months must be a positive integer, got {months}")

        transactions = self.transactions.find_transactions(user_id, flt)
        if len(transactions) < MIN_TRANSACTIONS:
            return PredictionResult(success=False, message=NOT_ENOUGH_HISTORY)

        history = build_monthly_series(transactions)
        if len(history) < SimplePredictor.MIN_POINTS:
            return PredictionResult(success=False, message=NOT_ENOUGH_DATA)

        series = normalize([p.amount for p in history])
        X, y = make_windows(series.values, WINDOW)
        model_type = select_model(len(history), len(X))
        logger.info(
            "Predicting %s for user %s: %d months of history, %s model",
            kind.value, user_id, len(history), model_type.value,
        )

        last_period = history[-1].period
        if model_type is ModelType.SEQUENCE:
            key = artifact_key(kind, user_id, self.artifact_scope)
            model = self.sequence.fit_or_load(key, X, y)
            points = list(self.sequence.forecast(model, series, last_period, months))
            message = f"{kind.value.capitalize()} prediction completed"
        else:
            model = self.simple.fit(series)
            points = list(self.simple.forecast(model, series, last_period, months))
            message = f"{kind.value.capitalize()} prediction completed (simple model)"

        return PredictionResult(
            success=True,
            message=message,
            data=PredictionData(
                historical=history,
                predictions=points,
                prediction_type=kind,
                model_type=model_type,
            ),
        )

    # ---------- Goal completion ----------

    def predict_savings_goal_completion(self, user_id: str, goal_id: str) -> PredictionResult:
        try:
            goal = self.goals.find_savings_goal(user_id, goal_id)
            if goal is None:
                return PredictionResult(success=False, message=GOAL_NOT_FOUND)

            now = self.clock()
            contributions = [
                Contribution(amount=t.amount, date=t.date)
                for t in self.transactions.find_transactions(
                    user_id, TransactionFilter(savings_goal_id=goal.id)
                )
            ]
            history = self.transactions.find_transactions(
                user_id, TransactionFilter(date_from=months_before(now, GOAL_HISTORY_MONTHS))
            )
            estimate = estimate_completion(
                goal.target_amount, goal.current_amount, contributions, history, now
            )

            return PredictionResult(
                success=True,
                message=GOAL_REACHED if estimate.is_complete else "Savings goal completion predicted",
                data=GoalCompletionData(
                    goal_id=goal.id,
                    goal_name=goal.name,
                    current_amount=goal.current_amount,
                    target_amount=goal.target_amount,
                    remaining_amount=estimate.remaining_amount,
                    monthly_savings_rate=estimate.monthly_savings_rate,
                    is_complete=estimate.is_complete,
                    completion_date=estimate.completion_date,
                    days_to_completion=estimate.days_to_completion,
                    months_to_completion=estimate.months_to_completion,
                ),
            )
        except Exception as e:
            logger.exception("Error predicting savings goal completion for user %s", user_id)
            return PredictionResult(
                success=False,
                message="Error predicting savings goal completion",
                error=str(e),
            )


def _failure(kind: PredictionKind, exc: Exception) -> PredictionResult:
    return PredictionResult(success=False, message=f"Error predicting {kind.value}", error=str(exc))
