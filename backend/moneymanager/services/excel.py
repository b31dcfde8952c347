from io import BytesIO
from typing import List

import openpyxl

from moneymanager.models.schemas import Transaction, TransactionKind

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER = ["S.No", "Name", "Category", "Amount", "Date"]

SHEET_TITLES = {
    TransactionKind.INCOME: "Incomes",
    TransactionKind.EXPENSE: "Expenses",
}

FILENAMES = {
    TransactionKind.INCOME: "income.xlsx",
    TransactionKind.EXPENSE: "expenses.xlsx",
}


def build_workbook(kind: TransactionKind, transactions: List[Transaction]) -> bytes:
    """Render transactions as a single-sheet xlsx workbook and return its bytes."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLES[kind]
    ws.append(HEADER)
    for i, t in enumerate(transactions, start=1):
        ws.append([
            i,
            t.name or "",
            t.category_name if t.category_id else "N/A",
            float(t.amount) if t.amount is not None else 0,
            t.date.isoformat() if t.date else "",
        ])

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()
