import logging
from typing import Optional

from redis import Redis
from rq import Queue
from rq.job import Job

from moneymanager.config import settings

logger = logging.getLogger(__name__)

_redis_connection: Optional[Redis] = None
_email_queue: Optional[Queue] = None


def _get_redis_connection() -> Redis:
    global _redis_connection
    if _redis_connection is None:
        _redis_connection = Redis.from_url(settings.REDIS_URL)
    return _redis_connection


def get_email_queue() -> Queue:
    global _email_queue
    if _email_queue is None:
        _email_queue = Queue(
            settings.EMAIL_QUEUE_NAME,
            connection=_get_redis_connection(),
            default_timeout=settings.EMAIL_JOB_TIMEOUT,
        )
    return _email_queue


def enqueue_email_job(
    to_email: str,
    subject: str,
    body: str,
    html: bool = False,
    attachment: Optional[bytes] = None,
    filename: Optional[str] = None,
) -> Job:
    from moneymanager.tasks.email import run_send_email_job

    queue = get_email_queue()
    job = queue.enqueue(
        run_send_email_job,
        to_email,
        subject,
        body,
        html,
        attachment,
        filename,
        job_timeout=settings.EMAIL_JOB_TIMEOUT,
    )
    job.meta = job.meta or {}
    job.meta.update({"to": to_email, "subject": subject})
    job.save_meta()
    logger.info("Enqueued email job %s for %s", job.id, to_email)
    return job
