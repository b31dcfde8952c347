from datetime import date
from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from moneymanager.api.auth import get_current_profile
from moneymanager.api.ledger import get_today
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import DashboardView, Profile
from moneymanager.services.dashboard import DashboardAggregator
from moneymanager.services.ledger import expense_service, income_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_aggregator(
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
) -> DashboardAggregator:
    db = get_db_service(session)
    return DashboardAggregator(income_service(db, today=today), expense_service(db, today=today))


@router.get("", response_model=DashboardView)
async def get_dashboard(
    current_profile: Profile = Depends(get_current_profile),
    aggregator: DashboardAggregator = Depends(get_dashboard_aggregator),
):
    return aggregator.build(current_profile)
