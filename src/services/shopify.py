"""Shopify Admin API customer helpers."""
from __future__ import annotations

from typing import Any

import requests

from src.core.config import Settings, settings
from src.utils.logger import logger

ACCESS_TOKEN_HEADER = "X-Shopify-Access-Token"


class CustomerApiError(RuntimeError):
    """Raised when the store rejects or never answers a customer API call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShopifyCustomerClient:
    """Encapsulates the requests session used for customer reads and writes."""

    def __init__(
        self,
        shop: str | None = None,
        api_version: str | None = None,
        access_token: str | None = None,
        timeout_seconds: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.shop = shop or settings.shopify_shop
        self.api_version = api_version or settings.shopify_api_version
        self.access_token = access_token or settings.shopify_api_token
        self.timeout_seconds = timeout_seconds or settings.request_timeout_seconds
        self._session = session

    @classmethod
    def from_settings(cls, config: Settings) -> "ShopifyCustomerClient":
        return cls(
            shop=config.shopify_shop,
            api_version=config.shopify_api_version,
            access_token=config.shopify_api_token,
            timeout_seconds=config.request_timeout_seconds,
        )

    @property
    def base_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}"

    def customer_url(self, customer_id: Any) -> str:
        return f"{self.base_url}/customers/{customer_id}.json"

    def _session_or_create(self) -> requests.Session:
        if self._session is None:
            if not self.access_token:
                raise CustomerApiError("Shopify access token is required. Set SHOPIFY_API_TOKEN in the environment.")
            session = requests.Session()
            session.headers.update(
                {
                    ACCESS_TOKEN_HEADER: self.access_token,
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                }
            )
            self._session = session
        return self._session

    def _request(self, method: str, customer_id: Any, payload: dict[str, Any] | None = None) -> dict[str, Any]:
        session = self._session_or_create()
        url = self.customer_url(customer_id)
        try:
            response = session.request(method, url, json=payload, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise CustomerApiError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            raise CustomerApiError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            return {}
        return body.get("customer") or {}

    def get_customer(self, customer_id: Any) -> dict[str, Any]:
        """Fetch the customer record as the store currently holds it."""

        return self._request("GET", customer_id)

    def update_customer_email(self, customer_id: Any, email: str | None) -> dict[str, Any]:
        """Overwrite the customer's email address and return the updated record."""

        customer = self._request("PUT", customer_id, {"customer": {"id": customer_id, "email": email}})
        logger.debug("Updated email for customer %s", customer_id)
        return customer


customer_client = ShopifyCustomerClient()


def get_customer_client() -> ShopifyCustomerClient:
    """FastAPI dependency returning the shared customer client."""

    return customer_client
