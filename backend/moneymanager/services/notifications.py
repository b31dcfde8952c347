"""
Daily notification mails: the "add your transactions" reminder and the
summary of today's expenses. One failing profile never stops a run.
"""
import html
import logging
from datetime import date, datetime
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from moneymanager.config import settings
from moneymanager.models.schemas import Transaction
from moneymanager.services.ledger import expense_service

logger = logging.getLogger(__name__)

REMINDER_SUBJECT = "Daily reminder: Add your income and expenses"
SUMMARY_SUBJECT = "Your daily Expense summary"

_CELL = "border:1px solid #ddd;padding:8px;"
_BUTTON = (
    "display:inline-block;padding:10px 20px;background-color:#4CAF50;color:#fff;"
    "text-decoration:none;border-radius:5px;font-weight:bold;"
)


def local_today(timezone: Optional[str] = None) -> date:
    return datetime.now(ZoneInfo(timezone or settings.REMINDER_TIMEZONE)).date()


def reminder_body(full_name: str, frontend_url: str) -> str:
    return (
        f"Hi {html.escape(full_name or '')},<br><br>"
        "This is a friendly reminder to add your income and expenses for today in My Money.<br><br>"
        f"<a href=\"{html.escape(frontend_url)}\" style='{_BUTTON}'>Go to My Money</a>"
        "<br><br>Best regards,<br>My Money Team"
    )


def summary_table(expenses: List[Transaction]) -> str:
    rows = [
        "<table style='border-collapse:collapse;width:100%;'>",
        "<tr style='background-color:#f2f2f2;'>"
        + "".join(f"<th style='{_CELL}'>{h}</th>" for h in ("Number", "Name", "Amount", "Category"))
        + "</tr>",
    ]
    for i, expense in enumerate(expenses, start=1):
        category = expense.category_name if expense.category_id else "N/A"
        cells = (i, html.escape(expense.name), expense.amount, html.escape(category))
        rows.append("<tr>" + "".join(f"<td style='{_CELL}'>{c}</td>" for c in cells) + "</tr>")
    rows.append("</table>")
    return "".join(rows)


def summary_body(full_name: str, expenses: List[Transaction]) -> str:
    return (
        f"Hi {html.escape(full_name or '')},<br/><br/> Here is a summary of your expenses for today:<br/><br/>"
        + summary_table(expenses)
        + "<br/><br/>Best regards,<br/>My Money Team"
    )


def _deliver(mailer, to_email: str, subject: str, body: str):
    result = mailer.send_email(to_email, subject, body, html=True)
    if not result.get("success"):
        raise RuntimeError(result.get("error") or "delivery failed")


def send_daily_reminders(db, mailer, frontend_url: Optional[str] = None) -> Dict[str, int]:
    logger.info("Job started: daily income/expense reminder")
    frontend_url = frontend_url or settings.FRONTEND_URL
    stats = {"sent": 0, "failed": 0}

    for profile in db.find("profiles", order_by="created_at"):
        try:
            _deliver(mailer, profile["email"], REMINDER_SUBJECT, reminder_body(profile["full_name"], frontend_url))
            stats["sent"] += 1
        except Exception:
            stats["failed"] += 1
            logger.exception("Reminder for profile %s failed", profile["id"])

    logger.info("Job completed: daily reminder (%d sent, %d failed)", stats["sent"], stats["failed"])
    return stats


def send_daily_expense_summary(db, mailer, day: Optional[date] = None) -> Dict[str, int]:
    logger.info("Job started: daily expense summary")
    day = day or local_today()
    expenses = expense_service(db)
    stats = {"sent": 0, "failed": 0, "skipped": 0}

    for profile in db.find("profiles", order_by="created_at"):
        try:
            todays = expenses.list_on_date(profile["id"], day)
            if not todays:
                stats["skipped"] += 1
                continue
            _deliver(mailer, profile["email"], SUMMARY_SUBJECT, summary_body(profile["full_name"], todays))
            stats["sent"] += 1
        except Exception:
            # A failed query aborts the transaction; the next profile needs a clean one
            db.rollback()
            stats["failed"] += 1
            logger.exception("Expense summary for profile %s failed", profile["id"])

    logger.info(
        "Job completed: daily expense summary (%d sent, %d failed, %d skipped)",
        stats["sent"], stats["failed"], stats["skipped"],
    )
    return stats
