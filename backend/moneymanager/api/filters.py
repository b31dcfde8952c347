from datetime import date
from typing import Callable, List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from moneymanager.api.auth import get_current_profile
from moneymanager.api.ledger import get_today
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import Profile, Transaction, TransactionFilter, TransactionKind
from moneymanager.services.exceptions import ValidationError
from moneymanager.services.ledger import LedgerService

router = APIRouter(prefix="/filter", tags=["filter"])


def _parse_kind(value: str) -> TransactionKind:
    try:
        return TransactionKind((value or "").strip().lower())
    except ValueError:
        raise ValidationError("Invalid type. Must be 'income' or 'expense'")


@router.post("", response_model=List[Transaction])
async def filter_transactions(
    criteria: TransactionFilter,
    current_profile: Profile = Depends(get_current_profile),
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
):
    kind = _parse_kind(criteria.type)
    ledger = LedgerService(get_db_service(session), kind, today=today)
    return ledger.filter(
        current_profile,
        start_date=criteria.start_date,
        end_date=criteria.end_date,
        keyword=criteria.keyword,
        sort_field=criteria.sort_field,
        sort_direction=criteria.sort_order,
    )
