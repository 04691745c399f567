"""Order payload inspection for subscription renewals."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from src.utils.datetime import unix_millis

PLACEHOLDER_DOMAIN = "noemail.fake"


@dataclass(frozen=True)
class RenewalOrder:
    """The parts of an order event needed to mask and restore a customer's email."""

    order_id: Any
    customer_id: Any
    original_email: str | None


def parse_tags(tags: Any) -> set[str]:
    """Split a comma separated tag string into normalised tag values."""

    if not isinstance(tags, str):
        return set()
    return {tag.strip().lower() for tag in tags.split(",") if tag.strip()}


def classify_order(payload: Any, target_tag: str) -> RenewalOrder | None:
    """Return a RenewalOrder when the payload is a renewal with a known customer, else None."""

    if not isinstance(payload, dict):
        return None

    if target_tag.strip().lower() not in parse_tags(payload.get("tags") or ""):
        return None

    customer = payload.get("customer") or {}
    if not isinstance(customer, dict) or customer.get("id") is None:
        return None

    return RenewalOrder(
        order_id=payload.get("id"),
        customer_id=customer["id"],
        original_email=customer.get("email"),
    )


_placeholder_lock = threading.Lock()
_last_issued_ms = 0


def _next_placeholder_millis() -> int:
    """Current unix millis, bumped past the last value handed out so concurrent callers never share one."""

    global _last_issued_ms
    with _placeholder_lock:
        _last_issued_ms = max(unix_millis(), _last_issued_ms + 1)
        return _last_issued_ms


def placeholder_email(now_ms: int | None = None) -> str:
    """Build a throwaway address unique per call, e.g. suppressed-1700000000000@noemail.fake."""

    if now_ms is None:
        now_ms = _next_placeholder_millis()
    return f"suppressed-{now_ms}@{PLACEHOLDER_DOMAIN}"
