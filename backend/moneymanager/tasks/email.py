import logging
from typing import Optional

from rq import get_current_job

from moneymanager.services.email_service import EmailService

logger = logging.getLogger(__name__)


def run_send_email_job(
    to_email: str,
    subject: str,
    body: str,
    html: bool = False,
    attachment: Optional[bytes] = None,
    filename: Optional[str] = None,
):
    job = get_current_job()

    def update_stage(stage: str):
        if job:
            job.meta["stage"] = stage
            job.save_meta()
            logger.info("Email job %s stage: %s", job.id, stage)

    update_stage("sending")
    service = EmailService()
    if attachment is not None:
        result = service.send_email_with_attachment(to_email, subject, body, attachment, filename or "report.xlsx")
    else:
        result = service.send_email(to_email, subject, body, html=html)

    if not result.get("success"):
        update_stage("failed")
        # Let RQ record the job as failed
        raise RuntimeError(f"Email to {to_email} failed: {result.get('error')}")

    update_stage("completed")
    return result
