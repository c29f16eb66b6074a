"""
Rule-based financial insights over the last six months, combined with the
spending forecast and the savings-goal estimate.
"""

import logging
from typing import List

from forecasting.date_utils import months_before
from forecasting.preprocess import monthly_income_expense
from forecasting.repository import TransactionFilter
from forecasting.schemas import (
    Insight,
    InsightMetrics,
    InsightsData,
    InsightsResult,
    SavingsGoal,
    TransactionType,
)
from forecasting.service import GOAL_HISTORY_MONTHS, ForecastService

logger = logging.getLogger(__name__)

HEALTHY_SAVINGS_RATE = 20.0
SPENDING_CHANGE_PCT = 10.0
GOAL_ALMOST_DONE_PCT = 90.0
GOAL_HALFWAY_PCT = 50.0
CATEGORY_CONCENTRATION_PCT = 40.0
FORECAST_MONTHS = 3


def _progress(goal: SavingsGoal) -> float:
    return goal.current_amount / goal.target_amount if goal.target_amount > 0 else 0.0


def savings_rate_insight(savings_rate: float) -> Insight:
    metric = f"{savings_rate:.1f}%"
    if savings_rate >= HEALTHY_SAVINGS_RATE:
        return Insight(
            type="success",
            title="Healthy Savings Rate",
            description=f"Great job! You're saving {metric} of your income, which is above the recommended 20%.",
            metric=metric,
        )
    if savings_rate > 0:
        return Insight(
            type="warning",
            title="Improve Your Savings Rate",
            description=f"You're currently saving {metric} of your income. Try to reach at least 20% for financial security.",
            metric=metric,
        )
    return Insight(
        type="error",
        title="Negative Savings Rate",
        description="You're spending more than you earn. Focus on reducing expenses to avoid debt.",
        metric=metric,
    )


def spending_change_insight(predicted: float, last_month: float):
    if last_month <= 0:
        return None
    change = (predicted - last_month) / last_month * 100
    if change > SPENDING_CHANGE_PCT:
        return Insight(
            type="warning",
            title="Spending Increase Predicted",
            description=f"Your spending is predicted to increase by {change:.1f}% next month. Consider reviewing your budget.",
            metric=f"+{change:.1f}%",
        )
    if change < -SPENDING_CHANGE_PCT:
        return Insight(
            type="success",
            title="Spending Decrease Predicted",
            description=f"Your spending is predicted to decrease by {abs(change):.1f}% next month. Keep up the good work!",
            metric=f"{change:.1f}%",
        )
    return None


def goal_progress_insight(goals: List[SavingsGoal]):
    if not goals:
        return None
    top = max(goals, key=_progress)
    pct = _progress(top) * 100
    if pct >= GOAL_ALMOST_DONE_PCT:
        return Insight(
            type="success",
            title="Goal Almost Achieved",
            description=f'You\'re {pct:.1f}% of the way to your "{top.name}" goal. Just a little more to go!',
            metric=f"{pct:.1f}%",
        )
    if pct >= GOAL_HALFWAY_PCT:
        return Insight(
            type="info",
            title="Goal Progress",
            description=f'You\'re making good progress on your "{top.name}" goal at {pct:.1f}% complete.',
            metric=f"{pct:.1f}%",
        )
    return None


def financial_insights(service: ForecastService, user_id: str) -> InsightsResult:
    try:
        now = service.clock()
        transactions = service.transactions.find_transactions(
            user_id, TransactionFilter(date_from=months_before(now, GOAL_HISTORY_MONTHS))
        )
        goals = service.goals.find_savings_goals(user_id)

        monthly = monthly_income_expense(transactions)
        total_income = float(monthly["income"].sum())
        total_expense = float(monthly["expense"].sum())
        net_savings = total_income - total_expense
        savings_rate = net_savings / total_income * 100 if total_income > 0 else 0.0
        months = len(monthly) or 1

        metrics = InsightMetrics(
            total_income=total_income,
            total_expense=total_expense,
            net_savings=net_savings,
            savings_rate=savings_rate,
            avg_monthly_income=total_income / months,
            avg_monthly_expense=total_expense / months,
            avg_monthly_savings=net_savings / months,
        )

        insights = [savings_rate_insight(savings_rate)]

        prediction = service.predict_spending(user_id, FORECAST_MONTHS)
        if prediction.success and prediction.data is not None and prediction.data.predictions:
            last_month = float(monthly["expense"].iloc[-1]) if len(monthly) else metrics.avg_monthly_expense
            insight = spending_change_insight(prediction.data.predictions[0].amount, last_month)
            if insight is not None:
                insights.append(insight)

        insight = goal_progress_insight(goals)
        if insight is not None:
            insights.append(insight)

        unfinished = [g for g in goals if g.current_amount < g.target_amount]
        if unfinished:
            laggard = min(unfinished, key=_progress)
            completion = service.predict_savings_goal_completion(user_id, laggard.id)
            if completion.success and completion.data is not None:
                months_left = completion.data.months_to_completion
                insights.append(
                    Insight(
                        type="info",
                        title="Goal Completion Prediction",
                        description=(
                            f'At your current savings rate, you\'ll reach your "{laggard.name}" goal '
                            f"in approximately {months_left} months."
                        ),
                        metric=f"{months_left} months",
                    )
                )

        expenses = {}
        for t in transactions:
            if t.type == TransactionType.EXPENSE:
                expenses[t.category] = expenses.get(t.category, 0.0) + t.amount
        if expenses and total_expense > 0:
            category, amount = max(expenses.items(), key=lambda kv: kv[1])
            share = amount / total_expense * 100
            if share > CATEGORY_CONCENTRATION_PCT:
                insights.append(
                    Insight(
                        type="warning",
                        title="High Spending Concentration",
                        description=(
                            f'{share:.1f}% of your expenses are in the "{category}" category. '
                            "Consider diversifying your spending."
                        ),
                        metric=f"{share:.1f}%",
                    )
                )

        return InsightsResult(
            success=True,
            message="Financial insights generated",
            data=InsightsData(
                insights=insights,
                metrics=metrics,
                spending_prediction=prediction.data if prediction.success else None,
            ),
        )
    except Exception as e:
        logger.exception("Error generating insights for user %s", user_id)
        return InsightsResult(success=False, message="Error generating insights", error=str(e))
