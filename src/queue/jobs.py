"""RQ jobs executed by `python -m src.queue.run_worker`."""
from __future__ import annotations

from typing import Any

from src.core.config import settings
from src.queue.restore_scheduler import RestoreTask
from src.services.email_guard import restore_email
from src.services.shopify import CustomerApiError, ShopifyCustomerClient
from src.utils.datetime import utcnow
from src.utils.logger import logger


def restore_customer_email_job(*, customer_id: Any, original_email: str | None, order_id: Any = None) -> None:
    """Background job that restores a suppressed email.

    Failures are re-raised so the job lands in the failed job registry and can be requeued.
    """

    task = RestoreTask(customer_id=customer_id, original_email=original_email, due_at=utcnow(), order_id=order_id)
    try:
        restore_email(task, ShopifyCustomerClient.from_settings(settings))
    except CustomerApiError:
        logger.exception("Restore job failed for customer %s; requeue it from the failed job registry", customer_id)
        raise
