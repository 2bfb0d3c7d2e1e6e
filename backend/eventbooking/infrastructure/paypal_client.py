"""
PayPal Orders v2 client over httpx.

Only the two calls the checkout flow needs: create an order with intent
CAPTURE, and capture it once the buyer has approved it. Every failure
(missing credentials, transport error, non-2xx answer, unexpected body) is
raised as PaymentProviderError; nothing is retried here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from eventbooking.core.config import Settings
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)

STATUS_COMPLETED = "COMPLETED"


class PaymentProviderError(Exception):
    """The payment provider could not be reached or rejected the call."""


@dataclass
class OrderRequest:
    reference_id: str
    description: str
    total: Decimal
    currency: str
    return_url: str
    cancel_url: str


@dataclass
class ProviderOrder:
    id: str
    status: str
    approval_url: Optional[str]


@dataclass
class CaptureResult:
    order_id: str
    status: str
    amount: Decimal


class PaymentProvider(ABC):
    """Interface used by the checkout service; tests swap in a fake."""

    @abstractmethod
    async def create_order(self, order: OrderRequest) -> ProviderOrder:
        pass

    @abstractmethod
    async def capture_order(self, order_id: str) -> CaptureResult:
        pass

    async def close(self) -> None:
        pass


class PayPalClient(PaymentProvider):
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.client_id = settings.PAYPAL_CLIENT_ID
        self.client_secret = settings.PAYPAL_CLIENT_SECRET
        self.brand_name = settings.PAYPAL_BRAND_NAME
        self._http_client = http_client or httpx.AsyncClient(
            base_url=settings.paypal_base_url,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def _access_token(self) -> str:
        if not self.configured:
            raise PaymentProviderError(
                "PayPal is not configured. Set PAYPAL_CLIENT_ID and PAYPAL_CLIENT_SECRET."
            )
        data = await self._request(
            "POST",
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
        )
        token = data.get("access_token")
        if not token:
            raise PaymentProviderError("PayPal did not return an access token")
        return token

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http_client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:500]
            logger.error(
                "paypal_http_error",
                url=url,
                status_code=e.response.status_code,
                body=body,
            )
            raise PaymentProviderError(
                f"PayPal returned {e.response.status_code}: {body}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("paypal_transport_error", url=url, error=str(e))
            raise PaymentProviderError(f"PayPal request failed: {e}") from e
        except ValueError as e:
            raise PaymentProviderError("PayPal returned a non-JSON response") from e

    async def _authorized(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        token = await self._access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        return await self._request(method, url, headers=headers, **kwargs)

    async def create_order(self, order: OrderRequest) -> ProviderOrder:
        body = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": order.reference_id,
                    "description": order.description,
                    "amount": {
                        "currency_code": order.currency,
                        "value": f"{order.total:.2f}",
                    },
                }
            ],
            "application_context": {
                "brand_name": self.brand_name,
                "landing_page": "BILLING",
                "user_action": "PAY_NOW",
                "return_url": order.return_url,
                "cancel_url": order.cancel_url,
            },
        }
        data = await self._authorized("POST", "/v2/checkout/orders", json=body)
        if not data.get("id"):
            raise PaymentProviderError("PayPal returned no order id")

        approval_url = next(
            (link.get("href") for link in data.get("links", []) if link.get("rel") == "approve"),
            None,
        )
        logger.info("paypal_order_created", order_id=data["id"], status=data.get("status"))
        return ProviderOrder(id=data["id"], status=data.get("status", ""), approval_url=approval_url)

    async def capture_order(self, order_id: str) -> CaptureResult:
        data = await self._authorized("POST", f"/v2/checkout/orders/{order_id}/capture", json={})
        status = data.get("status", "")
        logger.info("paypal_order_captured", order_id=order_id, status=status)
        return CaptureResult(
            order_id=data.get("id", order_id),
            status=status,
            amount=_captured_amount(data),
        )

    async def close(self) -> None:
        await self._http_client.aclose()


def _captured_amount(data: dict[str, Any]) -> Decimal:
    """Amount of the first capture of the first purchase unit, 0 if absent."""
    try:
        value = data["purchase_units"][0]["payments"]["captures"][0]["amount"]["value"]
        return Decimal(value)
    except (KeyError, IndexError, TypeError, InvalidOperation):
        return Decimal("0")
