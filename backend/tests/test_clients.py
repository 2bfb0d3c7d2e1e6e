"""
Tests for the PayPal and geocoding HTTP clients against mocked transports.
"""

import json
from decimal import Decimal

import httpx
import pytest

from eventbooking.core.config import Settings
from eventbooking.infrastructure.geocoding_client import GeocodingError, GoogleGeocoder
from eventbooking.infrastructure.paypal_client import (
    OrderRequest,
    PaymentProviderError,
    PayPalClient,
)

ORDER = OrderRequest(
    reference_id="7",
    description="Event Ticket - Jazz Night",
    total=Decimal("75.00"),
    currency="USD",
    return_url="http://localhost:3000/success",
    cancel_url="http://localhost:3000/cancel",
)


def paypal_settings(**overrides) -> Settings:
    values = {"PAYPAL_CLIENT_ID": "client", "PAYPAL_CLIENT_SECRET": "secret"}
    values.update(overrides)
    return Settings(**values)


def paypal_with(handler) -> PayPalClient:
    settings = paypal_settings()
    http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url=settings.paypal_base_url
    )
    return PayPalClient(settings, http_client=http_client)


def paypal_handler(captured: list, capture_body: dict = None):
    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token-123"})
        if request.url.path == "/v2/checkout/orders":
            return httpx.Response(201, json={
                "id": "5O190127TN364715T",
                "status": "CREATED",
                "links": [
                    {"rel": "self", "href": "https://api.sandbox.paypal.com/v2/checkout/orders/5O1"},
                    {"rel": "approve", "href": "https://www.sandbox.paypal.com/checkoutnow?token=5O1"},
                ],
            })
        if request.url.path.endswith("/capture"):
            return httpx.Response(201, json=capture_body)
        return httpx.Response(404)

    return handler


@pytest.mark.asyncio
async def test_paypal_create_order():
    captured = []
    client = paypal_with(paypal_handler(captured))

    order = await client.create_order(ORDER)
    assert order.id == "5O190127TN364715T"
    assert order.approval_url == "https://www.sandbox.paypal.com/checkoutnow?token=5O1"

    create_request = captured[1]
    assert create_request.headers["Authorization"] == "Bearer token-123"
    body = json.loads(create_request.content)
    assert body["intent"] == "CAPTURE"
    unit = body["purchase_units"][0]
    assert unit["reference_id"] == "7"
    assert unit["amount"] == {"currency_code": "USD", "value": "75.00"}
    assert body["application_context"]["return_url"] == "http://localhost:3000/success"
    await client.close()


@pytest.mark.asyncio
async def test_paypal_capture_reads_captured_amount():
    capture_body = {
        "id": "5O190127TN364715T",
        "status": "COMPLETED",
        "purchase_units": [
            {"payments": {"captures": [{"amount": {"currency_code": "USD", "value": "75.00"}}]}}
        ],
    }
    client = paypal_with(paypal_handler([], capture_body))

    result = await client.capture_order("5O190127TN364715T")
    assert result.status == "COMPLETED"
    assert result.amount == Decimal("75.00")
    await client.close()


@pytest.mark.asyncio
async def test_paypal_capture_without_amount_defaults_to_zero():
    client = paypal_with(paypal_handler([], {"id": "X", "status": "COMPLETED"}))
    result = await client.capture_order("X")
    assert result.amount == Decimal("0")
    await client.close()


@pytest.mark.asyncio
async def test_paypal_http_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token-123"})
        return httpx.Response(422, json={"name": "UNPROCESSABLE_ENTITY"})

    client = paypal_with(handler)
    with pytest.raises(PaymentProviderError, match="422"):
        await client.capture_order("X")
    await client.close()


@pytest.mark.asyncio
async def test_paypal_transport_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = paypal_with(handler)
    with pytest.raises(PaymentProviderError, match="connection refused"):
        await client.create_order(ORDER)
    await client.close()


@pytest.mark.asyncio
async def test_paypal_unconfigured():
    client = PayPalClient(Settings(PAYPAL_CLIENT_ID="", PAYPAL_CLIENT_SECRET=""))
    assert not client.configured
    with pytest.raises(PaymentProviderError, match="not configured"):
        await client.create_order(ORDER)
    await client.close()


def test_paypal_environment_selects_base_url():
    assert paypal_settings().paypal_base_url == "https://api-m.sandbox.paypal.com"
    assert paypal_settings(PAYPAL_ENVIRONMENT="live").paypal_base_url == "https://api-m.paypal.com"


def geocoder_with(payload: dict, status_code: int = 200) -> GoogleGeocoder:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["latlng"] == "38.72,-9.14"
        return httpx.Response(status_code, json=payload)

    return GoogleGeocoder(
        Settings(GOOGLE_MAPS_API_KEY="key"),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_geocoder_prefers_locality():
    geocoder = geocoder_with({
        "status": "OK",
        "results": [{
            "formatted_address": "Praça do Comércio, 1100-148 Lisboa, Portugal",
            "address_components": [
                {"long_name": "Praça do Comércio", "types": ["route"]},
                {"long_name": "Lisboa", "types": ["locality", "political"]},
            ],
        }],
    })
    place = await geocoder.reverse(38.72, -9.14)
    assert place.address == "Praça do Comércio, 1100-148 Lisboa, Portugal"
    assert place.city == "Lisboa"


@pytest.mark.asyncio
async def test_geocoder_falls_back_to_third_component():
    geocoder = geocoder_with({
        "results": [{
            "formatted_address": "Somewhere",
            "address_components": [
                {"long_name": "1", "types": ["street_number"]},
                {"long_name": "Main St", "types": ["route"]},
                {"long_name": "Old Town", "types": ["neighborhood"]},
            ],
        }],
    })
    place = await geocoder.reverse(38.72, -9.14)
    assert place.city == "Old Town"


@pytest.mark.asyncio
async def test_geocoder_no_results():
    geocoder = geocoder_with({"status": "ZERO_RESULTS", "results": []})
    with pytest.raises(GeocodingError):
        await geocoder.reverse(38.72, -9.14)


@pytest.mark.asyncio
async def test_geocoder_http_error():
    geocoder = geocoder_with({}, status_code=500)
    with pytest.raises(GeocodingError):
        await geocoder.reverse(38.72, -9.14)


@pytest.mark.asyncio
async def test_geocoder_without_api_key():
    geocoder = GoogleGeocoder(Settings(GOOGLE_MAPS_API_KEY=""))
    with pytest.raises(GeocodingError, match="GOOGLE_MAPS_API_KEY"):
        await geocoder.reverse(1.0, 2.0)
    await geocoder.close()


@pytest.mark.asyncio
async def test_paypal_order_without_id_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token-123"})
        return httpx.Response(201, json={"status": "CREATED", "links": []})

    client = paypal_with(handler)
    with pytest.raises(PaymentProviderError, match="no order id"):
        await client.create_order(ORDER)
    await client.close()
