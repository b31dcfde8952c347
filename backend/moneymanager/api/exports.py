from datetime import date
from typing import Callable

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from moneymanager.api.auth import get_current_profile
from moneymanager.api.ledger import get_today
from moneymanager.database.connection import get_db as get_session
from moneymanager.database.db_service import get_db_service
from moneymanager.models.schemas import Message, Profile, TransactionKind
from moneymanager.services.email_service import get_mailer
from moneymanager.services.excel import FILENAMES, XLSX_MEDIA_TYPE, build_workbook
from moneymanager.services.exceptions import DeliveryError
from moneymanager.services.ledger import LedgerService

router = APIRouter(tags=["exports"])

EMAIL_SUBJECTS = {
    TransactionKind.INCOME: "Your Income Excel Report",
    TransactionKind.EXPENSE: "Your Expense Excel Report",
}

EMAIL_BODIES = {
    TransactionKind.INCOME: "Please find attached your income report",
    TransactionKind.EXPENSE: "Please find attached your expense report",
}


def _current_month_workbook(session: Session, kind: TransactionKind, owner: Profile, today) -> bytes:
    ledger = LedgerService(get_db_service(session), kind, today=today)
    return build_workbook(kind, ledger.list_current_month(owner))


def _download(kind: TransactionKind, session: Session, owner: Profile, today) -> Response:
    content = _current_month_workbook(session, kind, owner, today)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{FILENAMES[kind]}"'},
    )


def _email(kind: TransactionKind, session: Session, owner: Profile, today, mailer) -> Message:
    content = _current_month_workbook(session, kind, owner, today)
    result = mailer.send_email_with_attachment(
        owner.email,
        EMAIL_SUBJECTS[kind],
        EMAIL_BODIES[kind],
        content,
        FILENAMES[kind],
    )
    if not result.get("success"):
        raise DeliveryError()
    return Message(message=f"{kind.value.capitalize()} report sent to {owner.email}")


@router.get("/excel/download/incomes")
async def download_income_excel(
    current_profile: Profile = Depends(get_current_profile),
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
):
    return _download(TransactionKind.INCOME, session, current_profile, today)


@router.get("/excel/download/expenses")
async def download_expense_excel(
    current_profile: Profile = Depends(get_current_profile),
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
):
    return _download(TransactionKind.EXPENSE, session, current_profile, today)


@router.get("/email/income-excel", response_model=Message)
def email_income_excel(
    current_profile: Profile = Depends(get_current_profile),
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
    mailer=Depends(get_mailer),
):
    return _email(TransactionKind.INCOME, session, current_profile, today, mailer)


@router.get("/email/expense-excel", response_model=Message)
def email_expense_excel(
    current_profile: Profile = Depends(get_current_profile),
    session: Session = Depends(get_session),
    today: Callable[[], date] = Depends(get_today),
    mailer=Depends(get_mailer),
):
    return _email(TransactionKind.EXPENSE, session, current_profile, today, mailer)
