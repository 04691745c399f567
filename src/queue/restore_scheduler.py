"""Deferred email restores, either on in-process timers or on rq-scheduler."""
from __future__ import annotations

import datetime as dt
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import redis
from rq_scheduler import Scheduler

from src.core.config import Settings
from src.utils.datetime import utcnow
from src.utils.logger import logger

RESTORE_JOB = "src.queue.jobs.restore_customer_email_job"


@dataclass(frozen=True)
class RestoreTask:
    """A pending write of a customer's original email back to the store."""

    customer_id: Any
    original_email: str | None
    due_at: dt.datetime
    order_id: Any = None

    def seconds_until_due(self, now: dt.datetime | None = None) -> float:
        remaining = (self.due_at - (now or utcnow())).total_seconds()
        return max(0.0, remaining)


Runner = Callable[[RestoreTask, Any], None]


class RestoreScheduler(Protocol):
    def schedule(self, task: RestoreTask, client: Any = None) -> str: ...

    def pending_count(self) -> int: ...

    def shutdown(self) -> None: ...


class InProcessRestoreScheduler:
    """One daemon timer per restore. Nothing survives a crash of this process.

    Each restore runs through the client passed to `schedule`, the one that made the suppress call.
    """

    def __init__(self, runner: Runner, restore_on_shutdown: bool = True) -> None:
        self._runner = runner
        self.restore_on_shutdown = restore_on_shutdown
        self._pending: dict[str, tuple[threading.Timer, RestoreTask, Any]] = {}
        self._lock = threading.Lock()

    def schedule(self, task: RestoreTask, client: Any = None) -> str:
        key = uuid.uuid4().hex
        timer = threading.Timer(task.seconds_until_due(), self._fire, args=(key,))
        timer.daemon = True
        with self._lock:
            self._pending[key] = (timer, task, client)
        timer.start()
        logger.debug("Restore %s for customer %s due at %s", key, task.customer_id, task.due_at.isoformat())
        return key

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _take(self, key: str) -> tuple[threading.Timer, RestoreTask, Any] | None:
        with self._lock:
            return self._pending.pop(key, None)

    def _run(self, task: RestoreTask, client: Any) -> None:
        try:
            self._runner(task, client)
        except Exception:
            logger.exception(
                "Failed to restore email for customer %s (order %s); address remains suppressed",
                task.customer_id,
                task.order_id,
            )

    def _fire(self, key: str) -> None:
        # A task removed by shutdown() has already been handled there.
        entry = self._take(key)
        if entry is not None:
            _, task, client = entry
            self._run(task, client)

    def shutdown(self) -> None:
        """Cancel outstanding timers, restoring their emails now unless configured otherwise."""

        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()

        for timer, _, _ in pending:
            timer.cancel()

        for _, task, client in pending:
            if self.restore_on_shutdown:
                logger.info("Restoring email for customer %s early on shutdown", task.customer_id)
                self._run(task, client)
            else:
                logger.warning(
                    "Dropping pending restore for customer %s on shutdown; address remains suppressed",
                    task.customer_id,
                )


class RQRestoreScheduler:
    """Restores kept in Redis so they outlive the API process."""

    def __init__(self, redis_url: str, queue_name: str) -> None:
        self.redis_url = redis_url
        self.queue_name = queue_name
        self._scheduler: Scheduler | None = None

    def _scheduler_or_create(self) -> Scheduler:
        if self._scheduler is None:
            connection = redis.Redis.from_url(self.redis_url)
            self._scheduler = Scheduler(queue_name=self.queue_name, connection=connection)
        return self._scheduler

    def schedule(self, task: RestoreTask, client: Any = None) -> str:
        # Workers build their own client from settings.
        scheduler = self._scheduler_or_create()
        job = scheduler.enqueue_at(
            task.due_at,
            RESTORE_JOB,
            customer_id=task.customer_id,
            original_email=task.original_email,
            order_id=task.order_id,
        )
        logger.info("Scheduled restore job %s for customer %s at %s", job.id, task.customer_id, task.due_at.isoformat())
        return job.id

    def pending_count(self) -> int:
        return self._scheduler_or_create().count()

    def shutdown(self) -> None:
        logger.debug("Pending restores stay in Redis queue %s", self.queue_name)


def build_restore_scheduler(config: Settings, runner: Runner) -> RestoreScheduler:
    """Pick the restore backend named in the settings."""

    if config.restore_backend == "rq":
        return RQRestoreScheduler(redis_url=config.redis_url, queue_name=config.rq_queue_name)
    return InProcessRestoreScheduler(runner, restore_on_shutdown=config.restore_on_shutdown)
