"""
Query interfaces the forecasting engine needs from the persistence layer,
plus an in-memory implementation backed by a JSON document.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from forecasting.schemas import SavingsGoal, Transaction, TransactionType

logger = logging.getLogger(__name__)


@dataclass
class TransactionFilter:
    type: Optional[TransactionType] = None
    category: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    savings_goal_id: Optional[str] = None
    linked_to_goal: bool = False


class TransactionRepository(Protocol):
    def find_transactions(self, user_id: str, flt: TransactionFilter) -> List[Transaction]:
        """Matching transactions, ascending by date."""
        ...


class GoalRepository(Protocol):
    def find_savings_goal(self, user_id: str, goal_id: str) -> Optional[SavingsGoal]:
        ...

    def find_savings_goals(self, user_id: str) -> List[SavingsGoal]:
        ...


def _aware(dt: datetime) -> datetime:
    # naive datetimes are treated as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _matches(t: Transaction, flt: TransactionFilter) -> bool:
    if flt.type is not None and t.type != flt.type:
        return False
    if flt.category is not None and t.category != flt.category:
        return False
    if flt.date_from is not None and _aware(t.date) < _aware(flt.date_from):
        return False
    if flt.date_to is not None and _aware(t.date) > _aware(flt.date_to):
        return False
    if flt.savings_goal_id is not None and t.savings_goal_id != flt.savings_goal_id:
        return False
    if flt.linked_to_goal and not t.savings_goal_id:
        return False
    return True


class InMemoryRepository:
    def __init__(self, transactions=None, goals=None):
        self.transactions: List[Transaction] = list(transactions or [])
        self.goals: List[SavingsGoal] = list(goals or [])

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "InMemoryRepository":
        """
        payload: {"transactions": [...], "goals": [...]} using the camelCase
        or snake_case field names of Transaction / SavingsGoal
        """
        if not isinstance(payload, dict):
            raise ValueError("Unsupported data format: expected dict with 'transactions' and 'goals'.")
        transactions = [Transaction.model_validate(t) for t in payload.get("transactions", [])]
        goals = [SavingsGoal.model_validate(g) for g in payload.get("goals", [])]
        return cls(transactions, goals)

    @classmethod
    def from_json(cls, path: str) -> "InMemoryRepository":
        with open(path, "r") as f:
            repo = cls.from_dict(json.load(f))
        logger.info(
            "Loaded %d transactions and %d goals from %s",
            len(repo.transactions), len(repo.goals), path,
        )
        return repo

    def add_transaction(self, transaction: Transaction) -> None:
        self.transactions.append(transaction)

    def add_goal(self, goal: SavingsGoal) -> None:
        self.goals.append(goal)

    def find_transactions(self, user_id, flt):
        found = [t for t in self.transactions if t.user == user_id and _matches(t, flt)]
        return sorted(found, key=lambda t: _aware(t.date))

    def find_savings_goal(self, user_id, goal_id):
        for goal in self.goals:
            if goal.id == goal_id and goal.user == user_id:
                return goal
        return None

    def find_savings_goals(self, user_id):
        return [g for g in self.goals if g.user == user_id]
