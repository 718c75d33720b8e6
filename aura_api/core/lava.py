"""
lava.top payment gateway client (invoices and product catalog).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class PaymentGatewayError(UpstreamError):
    def __init__(self, message: str, *, status_code: int = 502, detail: object = None):
        super().__init__(message, status_code=status_code, provider="lava", detail=detail)


class LavaGateway:
    def __init__(self, base_url: str, api_key: str, *, timeout: float = 15.0, client: httpx.Client | None = None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.Client | None = None) -> "LavaGateway":
        return cls(
            settings.lava_base_url,
            settings.lava_api_key,
            timeout=settings.http_timeout_seconds,
            client=client,
        )

    def close(self) -> None:
        self._client.close()

    def _headers(self) -> dict:
        return {
            "accept": "application/json",
            "X-Api-Key": self.api_key,
            "Content-Type": "application/json",
        }

    def _call(self, method: str, path: str, *, json: Any = None) -> Any:
        if not self.api_key:
            raise PaymentGatewayError("Payment system not configured", status_code=503)
        url = f"{self.base_url}{path}"
        try:
            r = self._client.request(method, url, json=json, headers=self._headers())
        except httpx.TimeoutException as exc:
            logger.error("[lava] %s %s timed out: %s", method, path, exc)
            raise PaymentGatewayError("Payment gateway timeout", status_code=504) from exc
        except httpx.RequestError as exc:
            logger.error("[lava] %s %s failed: %s", method, path, exc)
            raise PaymentGatewayError("Payment gateway unavailable", status_code=502) from exc

        if r.status_code >= 400:
            # Raw provider text stays in the logs; callers get a generic message.
            logger.error("[lava] %s %s -> %s %s", method, path, r.status_code, r.text[:500])
            raise PaymentGatewayError("Payment gateway error", status_code=r.status_code, detail=r.text)
        if not r.content:
            return {}
        return r.json()

    def create_invoice(
        self,
        *,
        email: str,
        offer_id: str,
        currency: str,
        buyer_language: str,
        payment_method: Optional[str] = None,
    ) -> Any:
        payload = {
            "email": email,
            "offerId": offer_id,
            "currency": currency,
            "buyerLanguage": buyer_language,
        }
        if payment_method:
            payload["paymentMethod"] = payment_method
        data = self._call("POST", "/api/v2/invoice", json=payload)
        logger.info("[lava] Invoice created for %s (offer %s)", email, offer_id)
        return data

    def list_products(self) -> Any:
        return self._call("GET", "/api/v2/products")
