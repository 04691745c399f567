"""Move due restore jobs from rq-scheduler onto the restore queue."""
from __future__ import annotations

import redis
from rq_scheduler import Scheduler

from src.core.config import settings
from src.utils.logger import configure_logging, logger


def run(interval_seconds: int = 1) -> None:
    """Poll Redis for due restores. The interval bounds how late a restore can fire."""

    configure_logging()
    connection = redis.Redis.from_url(settings.redis_url)
    scheduler = Scheduler(queue_name=settings.rq_queue_name, connection=connection, interval=interval_seconds)
    logger.info("Restore scheduler polling queue %s every %ss", settings.rq_queue_name, interval_seconds)
    scheduler.run()


if __name__ == "__main__":  # pragma: no cover - manual execution
    run()
