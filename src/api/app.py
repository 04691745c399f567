"""FastAPI application instance."""
from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, status
from starlette.concurrency import run_in_threadpool

from src.api.routes import webhooks
from src.core.config import settings
from src.queue.restore_scheduler import RestoreScheduler
from src.services.email_guard import get_restore_scheduler
from src.utils.logger import configure_logging, logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Shopify store: %s", settings.shopify_shop)
    logger.info("Admin token present? %s", bool(settings.shopify_api_token))
    if settings.signature_bypass_active:
        logger.warning("Webhook signature verification is DISABLED (environment=%s)", settings.environment)
    yield
    # Flushing pending restores makes blocking store calls.
    await run_in_threadpool(get_restore_scheduler().shutdown)


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
)

app.include_router(webhooks.router)


@app.get("/health", tags=["system"])
def health(scheduler: RestoreScheduler = Depends(get_restore_scheduler)) -> dict[str, str | int]:
    """Simple uptime check with the number of restores still waiting to run."""

    try:
        pending = scheduler.pending_count()
    except Exception:
        logger.exception("Restore scheduler unavailable")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Restore scheduler unavailable")
    return {"status": "ok", "pending_restores": pending}


def run() -> None:  # pragma: no cover - manual execution
    """Serve the app with uvicorn on the configured port."""

    uvicorn.run("src.api.app:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":  # pragma: no cover - manual execution
    run()
