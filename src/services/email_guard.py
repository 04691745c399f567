"""Mask a renewal customer's email on the store, then put it back."""
from __future__ import annotations

import datetime as dt
from functools import lru_cache

from src.core.config import Settings, settings
from src.queue.restore_scheduler import RestoreScheduler, RestoreTask, build_restore_scheduler
from src.services.orders import RenewalOrder, placeholder_email
from src.services.shopify import CustomerApiError, ShopifyCustomerClient
from src.utils.datetime import utcnow
from src.utils.logger import logger


def _log_current_email(client: ShopifyCustomerClient, order: RenewalOrder) -> None:
    try:
        customer = client.get_customer(order.customer_id)
    except CustomerApiError as exc:
        logger.warning("Could not fetch customer %s before suppressing: %s", order.customer_id, exc)
        return
    logger.debug("Customer %s currently has email %s on the store", order.customer_id, customer.get("email"))


def suppress_email(order: RenewalOrder, client: ShopifyCustomerClient, config: Settings) -> RestoreTask | None:
    """Replace the customer's email with a placeholder.

    Returns the restore task to schedule, or None when the store call failed. A
    failed suppress means there is nothing to restore.
    """

    if config.fetch_customer_before_suppress:
        _log_current_email(client, order)

    placeholder = placeholder_email()
    if placeholder == order.original_email:
        placeholder = placeholder_email()

    try:
        client.update_customer_email(order.customer_id, placeholder)
    except CustomerApiError as exc:
        logger.error("Failed to suppress email for customer %s (order %s): %s", order.customer_id, order.order_id, exc)
        return None

    logger.info("Suppressed email for customer %s (order %s)", order.customer_id, order.order_id)
    return RestoreTask(
        customer_id=order.customer_id,
        original_email=order.original_email,
        due_at=utcnow() + dt.timedelta(seconds=config.restore_delay_seconds),
        order_id=order.order_id,
    )


def restore_email(task: RestoreTask, client: ShopifyCustomerClient) -> None:
    """Write the original email back. Errors propagate to the scheduler running the task."""

    client.update_customer_email(task.customer_id, task.original_email)
    logger.info("Restored email for customer %s (order %s)", task.customer_id, task.order_id)


def process_renewal_order(
    order: RenewalOrder,
    client: ShopifyCustomerClient,
    scheduler: RestoreScheduler,
    config: Settings,
) -> None:
    """Background entry point run after the webhook has been acknowledged. Never raises.

    The restore goes through the same client that made the suppress call.
    """

    try:
        task = suppress_email(order, client, config)
        if task is None:
            return
        scheduler.schedule(task, client)
    except Exception:
        logger.exception(
            "Unexpected error while handling renewal order %s; customer %s may remain suppressed",
            order.order_id,
            order.customer_id,
        )


@lru_cache()
def get_restore_scheduler() -> RestoreScheduler:
    """Return the process-wide restore scheduler."""

    return build_restore_scheduler(settings, restore_email)
