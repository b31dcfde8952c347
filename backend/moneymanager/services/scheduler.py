"""
Cron scheduling of the daily notification jobs using APScheduler.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from moneymanager.config import settings
from moneymanager.database.connection import get_db_context
from moneymanager.database.db_service import get_db_service
from moneymanager.services.email_service import get_mailer
from moneymanager.services.notifications import send_daily_expense_summary, send_daily_reminders

logger = logging.getLogger(__name__)


def run_daily_reminder_job():
    with get_db_context() as session:
        return send_daily_reminders(get_db_service(session), get_mailer())


def run_daily_expense_summary_job():
    with get_db_context() as session:
        return send_daily_expense_summary(get_db_service(session), get_mailer())


class NotificationScheduler:
    def __init__(self, timezone: str = None):
        self.timezone = timezone or settings.REMINDER_TIMEZONE
        self.scheduler = BackgroundScheduler(timezone=self.timezone)
        self.is_running = False

    def start(self):
        if self.is_running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.add_job(
            func=run_daily_reminder_job,
            trigger=CronTrigger(hour=settings.REMINDER_HOUR, minute=0, timezone=self.timezone),
            id="daily_income_expense_reminder",
            name="Daily Income/Expense Reminder",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=run_daily_expense_summary_job,
            trigger=CronTrigger(hour=settings.SUMMARY_HOUR, minute=0, timezone=self.timezone),
            id="daily_expense_summary",
            name="Daily Expense Summary",
            replace_existing=True,
        )

        self.scheduler.start()
        self.is_running = True
        logger.info("Notification scheduler started (%s)", self.timezone)

    def stop(self):
        if not self.is_running:
            return
        self.scheduler.shutdown(wait=False)
        self.is_running = False
        logger.info("Notification scheduler stopped")

    def get_jobs(self):
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if getattr(job, "next_run_time", None) else None,
            }
            for job in self.scheduler.get_jobs()
        ]
