"""
Income and expense bookkeeping. Both kinds share one implementation parameterized
by TransactionKind; every query is scoped to the owning profile.
"""
import calendar
import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Any, List, Optional

from moneymanager.models.schemas import Profile, Transaction, TransactionKind
from moneymanager.services.exceptions import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("date", "amount", "name", "created_at")
DEFAULT_SORT_FIELD = "date"


def month_bounds(day: date):
    """First and last day of the month containing day, both inclusive."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


class LedgerService:
    def __init__(self, db, kind: TransactionKind, today: Callable[[], date] = date.today):
        self.db = db
        self.kind = kind
        self.collection = kind.collection
        self._today = today

    def _label(self) -> str:
        return "Income" if self.kind is TransactionKind.INCOME else "Expense"

    def _to_transactions(self, docs: List[Dict[str, Any]]) -> List[Transaction]:
        categories = {
            c["id"]: c["name"]
            for c in self.db.find_in("categories", "id", (d.get("category_id") for d in docs))
        }
        return [
            Transaction(**doc, category_name=categories.get(doc.get("category_id"), "N/A"))
            for doc in docs
        ]

    def add(
        self,
        owner: Profile,
        category_id: str,
        name: str,
        icon: Optional[str],
        amount: Decimal,
        date: date,
    ) -> Transaction:
        category = self.db.find_one("categories", {"id": category_id})
        if category is None:
            raise NotFoundError(f"Category with id: {category_id} not found")

        created = self.db.insert(self.collection, {
            "profile_id": owner.id,
            "category_id": category_id,
            "name": name,
            "icon": icon,
            "amount": amount,
            "date": date,
        })
        self.db.commit()
        logger.info("Added %s %s for profile %s", self.kind.value, created["id"], owner.id)

        return Transaction(**created, category_name=category["name"])

    def list_current_month(self, owner: Profile) -> List[Transaction]:
        start, end = month_bounds(self._today())
        docs = self.db.search(
            self.collection,
            {"profile_id": owner.id},
            "date",
            start,
            end,
            order_by="date",
            descending=True,
        )
        return self._to_transactions(docs)

    def list_recent_top(self, owner: Profile, n: int = 5) -> List[Transaction]:
        docs = self.db.find(
            self.collection,
            {"profile_id": owner.id},
            order_by="date",
            descending=True,
            limit=n,
        )
        return self._to_transactions(docs)

    def list_on_date(self, owner_id: str, day: date) -> List[Transaction]:
        docs = self.db.find(self.collection, {"profile_id": owner_id, "date": day}, order_by="created_at")
        return self._to_transactions(docs)

    def delete(self, owner: Profile, transaction_id: str) -> None:
        existing = self.db.find_one(self.collection, {"id": transaction_id})
        if existing is None:
            raise NotFoundError(f"{self._label()} not found")
        if existing["profile_id"] != owner.id:
            raise ForbiddenError(f"Unauthorized to delete this {self.kind.value}")

        self.db.delete(self.collection, transaction_id)
        self.db.commit()
        logger.info("Deleted %s %s for profile %s", self.kind.value, transaction_id, owner.id)

    def total_for_owner(self, owner: Profile) -> Decimal:
        return self.db.sum(self.collection, "amount", {"profile_id": owner.id})

    def filter(
        self,
        owner: Profile,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        keyword: Optional[str] = None,
        sort_field: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> List[Transaction]:
        start_date = start_date or date.min
        end_date = end_date or self._today()
        keyword = keyword or ""
        sort_field = sort_field or DEFAULT_SORT_FIELD
        if sort_field not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort by '{sort_field}'")
        descending = (sort_direction or "").lower() == "desc"

        docs = self.db.search(
            self.collection,
            {"profile_id": owner.id},
            "date",
            start_date,
            end_date,
            name_contains=keyword,
            order_by=sort_field,
            descending=descending,
        )
        return self._to_transactions(docs)


def income_service(db, **kwargs) -> LedgerService:
    return LedgerService(db, TransactionKind.INCOME, **kwargs)


def expense_service(db, **kwargs) -> LedgerService:
    return LedgerService(db, TransactionKind.EXPENSE, **kwargs)
