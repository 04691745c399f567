"""Inbound order webhooks from the store."""
from __future__ import annotations

import json

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from src.core.config import Settings, get_settings
from src.queue.restore_scheduler import RestoreScheduler
from src.services.email_guard import get_restore_scheduler, process_renewal_order
from src.services.orders import classify_order
from src.services.shopify import ShopifyCustomerClient, get_customer_client
from src.utils.logger import logger
from src.utils.signature import SIGNATURE_HEADER, verify_webhook_signature

router = APIRouter(tags=["webhooks"])


@router.post("/webhook")
async def handle_order_created(
    request: Request,
    background_tasks: BackgroundTasks,
    config: Settings = Depends(get_settings),
    client: ShopifyCustomerClient = Depends(get_customer_client),
    scheduler: RestoreScheduler = Depends(get_restore_scheduler),
) -> dict[str, str]:
    """Acknowledge an order event and, for renewal orders, mask the customer's email for a short while.

    The suppress call runs as a background task, which Starlette starts only
    once the response has been sent.
    """

    try:
        raw_body = await request.body()

        if config.signature_bypass_active:
            logger.warning("Webhook signature verification skipped (environment=%s)", config.environment)
        elif not verify_webhook_signature(raw_body, request.headers.get(SIGNATURE_HEADER), config.webhook_secret):
            logger.warning("Webhook signature verification failed")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

        order = classify_order(payload, config.target_order_tag)
        if order is None:
            order_id = payload.get("id") if isinstance(payload, dict) else None
            logger.info("Skipping order %s (not a subscription renewal or missing customer)", order_id)
            return {"status": "skipped"}
    except HTTPException:
        raise
    except Exception:
        logger.exception("Error in webhook handler")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")

    logger.info("Detected renewal order %s, suppressing email for customer %s", order.order_id, order.customer_id)
    background_tasks.add_task(process_renewal_order, order, client, scheduler, config)
    return {"status": "accepted"}
