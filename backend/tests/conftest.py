"""Shared fixtures: in-memory repository, artifact store, fixed clock, service."""

from datetime import datetime, timezone

import pytest
import torch

from forecasting.artifacts import InMemoryArtifactStore
from forecasting.repository import InMemoryRepository
from forecasting.schemas import SavingsGoal, Transaction, TransactionType
from forecasting.service import ForecastService

NOW = datetime(2024, 9, 15, 12, 0, 0, tzinfo=timezone.utc)
USER = "user-1"


def make_txn(period, amount, type="expense", category="food", user=USER, day=10, goal=None):
    year, month = map(int, period.split("-"))
    return Transaction(
        user=user,
        type=TransactionType(type),
        amount=amount,
        category=category,
        date=datetime(year, month, day),
        savings_goal_id=goal,
    )


def make_goal(goal_id="goal-1", target=1000.0, current=0.0, user=USER, name="Holiday"):
    return SavingsGoal(id=goal_id, user=user, name=name, target_amount=target, current_amount=current)


@pytest.fixture(autouse=True)
def seed_torch():
    torch.manual_seed(0)


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def store():
    return InMemoryArtifactStore()


@pytest.fixture
def service(repo, store):
    return ForecastService(
        transactions=repo,
        goals=repo,
        artifact_store=store,
        model_cache={},
        clock=lambda: NOW,
    )
