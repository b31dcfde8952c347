import logging
import os
import signal
import sys

from redis import Redis
from rq import Worker, Queue

from moneymanager.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully"""
    logger.info("Received signal %s, shutting down worker gracefully...", signum)
    sys.exit(0)


def queue_names():
    queue_list = os.getenv("QUEUE_LIST")
    if queue_list:
        listen = [q.strip() for q in queue_list.split(",") if q.strip()]
    else:
        listen = [settings.EMAIL_QUEUE_NAME]

    # Deduplicate while preserving order
    seen = set()
    return [q for q in listen if not (q in seen or seen.add(q))]


def main():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    redis_conn = Redis.from_url(settings.REDIS_URL)
    listen = queue_names()

    logger.info("Worker starting, listening to queues: %s", ", ".join(listen))

    worker = Worker(
        [Queue(name, connection=redis_conn) for name in listen],
        connection=redis_conn,
        log_job_description=True,
        job_monitoring_interval=5,
    )

    logger.info("Worker started and ready to process jobs")
    worker.work(logging_level=logging.INFO)


if __name__ == "__main__":
    main()
