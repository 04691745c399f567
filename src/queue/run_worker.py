"""Run an RQ worker bound to the restore queue."""
from __future__ import annotations

import os
import sys

import redis
from rq import Queue, Worker

from src.core.config import settings
from src.utils.logger import configure_logging, logger


def run() -> None:
    """Run an RQ worker on the configured queue."""

    configure_logging()
    if (
        settings.environment == "development"
        and sys.platform == "darwin"
        and not os.environ.get("OBJC_DISABLE_INITIALIZE_FORK_SAFETY")
    ):
        logger.warning(
            "OBJC_DISABLE_INITIALIZE_FORK_SAFETY=YES is recommended on macOS to avoid fork-related crashes with RQ workers. "
            "Applying it for this process."
        )
        os.environ["OBJC_DISABLE_INITIALIZE_FORK_SAFETY"] = "YES"

    connection = redis.Redis.from_url(settings.redis_url)
    queue = Queue(settings.rq_queue_name, connection=connection)
    worker = Worker([queue], connection=connection)
    worker.work()


if __name__ == "__main__":  # pragma: no cover - manual execution
    run()
