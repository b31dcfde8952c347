import functools
import logging
from typing import List

from moneymanager.models.schemas import (
    DashboardView,
    Profile,
    RecentTransaction,
    Transaction,
    TransactionKind,
)
from moneymanager.services.ledger import LedgerService

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _compare_recent(a: RecentTransaction, b: RecentTransaction) -> int:
    """Newest date first; same date falls back to newest created_at when both have one."""
    if a.date != b.date:
        return -1 if a.date > b.date else 1
    if a.created_at is not None and b.created_at is not None and a.created_at != b.created_at:
        return -1 if a.created_at > b.created_at else 1
    return 0


def _as_recent(item: Transaction, kind: TransactionKind, profile_id: str) -> RecentTransaction:
    return RecentTransaction(
        id=item.id,
        profile_id=profile_id,
        name=item.name,
        icon=item.icon,
        amount=item.amount,
        date=item.date,
        type=kind,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def merge_recent(
    incomes: List[Transaction],
    expenses: List[Transaction],
    profile_id: str,
) -> List[RecentTransaction]:
    merged = [_as_recent(i, TransactionKind.INCOME, profile_id) for i in incomes]
    merged += [_as_recent(e, TransactionKind.EXPENSE, profile_id) for e in expenses]
    return sorted(merged, key=functools.cmp_to_key(_compare_recent))


class DashboardAggregator:
    def __init__(self, incomes: LedgerService, expenses: LedgerService):
        self.incomes = incomes
        self.expenses = expenses

    def build(self, owner: Profile) -> DashboardView:
        total_income = self.incomes.total_for_owner(owner)
        total_expenses = self.expenses.total_for_owner(owner)

        recent_income = self.incomes.list_recent_top(owner, RECENT_LIMIT)
        recent_expenses = self.expenses.list_recent_top(owner, RECENT_LIMIT)

        return DashboardView(
            total_balance=total_income - total_expenses,
            total_income=total_income,
            total_expenses=total_expenses,
            recent_5_income=recent_income,
            recent_5_expenses=recent_expenses,
            recent_transactions=merge_recent(recent_income, recent_expenses, owner.id),
        )
