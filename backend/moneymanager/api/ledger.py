from datetime import date
from typing import Callable, List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from moneymanager.api.auth import get_current_profile
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import Profile, Transaction, TransactionCreate, TransactionKind
from moneymanager.services.ledger import LedgerService


def get_today() -> Callable[[], date]:
    """Source of the current local date for month and filter defaults."""
    return date.today


def ledger_dependency(kind: TransactionKind):
    def get_ledger(
        session: Session = Depends(get_session),
        today: Callable[[], date] = Depends(get_today),
    ) -> LedgerService:
        return LedgerService(get_db_service(session), kind, today=today)
    return get_ledger


def build_router(kind: TransactionKind) -> APIRouter:
    """Same CRUD surface for incomes and expenses, mounted under /incomes or /expenses."""
    router = APIRouter(prefix=f"/{kind.collection}", tags=[kind.collection])
    get_ledger = ledger_dependency(kind)

    @router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
    async def create_transaction(
        transaction: TransactionCreate,
        current_profile: Profile = Depends(get_current_profile),
        ledger: LedgerService = Depends(get_ledger),
    ):
        return ledger.add(
            current_profile,
            category_id=transaction.category_id,
            name=transaction.name,
            icon=transaction.icon,
            amount=transaction.amount,
            date=transaction.date,
        )

    @router.get("", response_model=List[Transaction])
    async def list_current_month(
        current_profile: Profile = Depends(get_current_profile),
        ledger: LedgerService = Depends(get_ledger),
    ):
        return ledger.list_current_month(current_profile)

    @router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_transaction(
        transaction_id: str,
        current_profile: Profile = Depends(get_current_profile),
        ledger: LedgerService = Depends(get_ledger),
    ):
        ledger.delete(current_profile, transaction_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


incomes_router = build_router(TransactionKind.INCOME)
expenses_router = build_router(TransactionKind.EXPENSE)
