from datetime import date, datetime
from decimal import Decimal

from moneymanager.models.schemas import RecentTransaction, TransactionKind
from moneymanager.services.dashboard import DashboardAggregator, _compare_recent
from moneymanager.services.ledger import expense_service, income_service


def _seed(db, owner):
    category = db.insert("categories", {"name": "General", "type": "expense", "profile_id": owner.id})
    db.commit()
    return category["id"]


def test_balance_is_income_minus_expenses(db, make_profile):
    owner = make_profile()
    category_id = _seed(db, owner)
    incomes, expenses = income_service(db), expense_service(db)

    incomes.add(owner, category_id, "Salary", None, Decimal("500.00"), date(2024, 3, 1))
    expenses.add(owner, category_id, "Groceries", None, Decimal("120.50"), date(2024, 3, 2))

    view = DashboardAggregator(incomes, expenses).build(owner)
    assert view.total_income == Decimal("500.00")
    assert view.total_expenses == Decimal("120.50")
    assert view.total_balance == Decimal("379.50")


def test_feed_merges_both_kinds_by_date_descending(db, make_profile):
    owner = make_profile()
    category_id = _seed(db, owner)
    incomes, expenses = income_service(db), expense_service(db)

    for day in (1, 3, 5):
        incomes.add(owner, category_id, f"income {day}", None, Decimal("10"), date(2024, 3, day))
    for day in (2, 4, 6):
        expenses.add(owner, category_id, f"expense {day}", None, Decimal("1"), date(2024, 3, day))

    view = DashboardAggregator(incomes, expenses).build(owner)
    feed = view.recent_transactions

    assert len(feed) == 6
    assert [t.date.day for t in feed] == [6, 5, 4, 3, 2, 1]
    assert [t.type for t in feed[:2]] == [TransactionKind.EXPENSE, TransactionKind.INCOME]
    assert all(t.profile_id == owner.id for t in feed)


def test_empty_dashboard(db, make_profile):
    owner = make_profile()
    view = DashboardAggregator(income_service(db), expense_service(db)).build(owner)
    assert view.total_balance == Decimal("0")
    assert view.recent_transactions == []


def _recent(day, created_at):
    return RecentTransaction(
        id="x", profile_id="p", name="n", amount=Decimal("1"), date=date(2024, 3, day),
        type=TransactionKind.INCOME, created_at=created_at,
    )


def test_same_day_ties_break_on_created_at_and_tolerate_missing_values():
    older = _recent(1, datetime(2024, 3, 1, 8))
    newer = _recent(1, datetime(2024, 3, 1, 9))
    undated = _recent(1, None)

    assert _compare_recent(newer, older) == -1
    assert _compare_recent(older, newer) == 1
    assert _compare_recent(undated, newer) == 0
    assert _compare_recent(_recent(2, None), newer) == -1


def test_each_kind_is_capped_at_five_and_feed_keeps_all_ten(db, make_profile):
    owner = make_profile()
    category_id = _seed(db, owner)
    incomes, expenses = income_service(db), expense_service(db)

    for day in range(1, 8):
        incomes.add(owner, category_id, f"income {day}", None, Decimal("10"), date(2024, 3, day))
        expenses.add(owner, category_id, f"expense {day}", None, Decimal("1"), date(2024, 3, day + 10))

    view = DashboardAggregator(incomes, expenses).build(owner)

    assert len(view.recent_5_income) == len(view.recent_5_expenses) == 5
    assert len(view.recent_transactions) == 10
    days = [t.date.day for t in view.recent_transactions]
    assert days == [17, 16, 15, 14, 13, 7, 6, 5, 4, 3]
