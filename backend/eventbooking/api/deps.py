"""
Request-scoped access to the clients built in the application lifespan.
"""

from fastapi import Request

from eventbooking.infrastructure.geocoding_client import Geocoder
from eventbooking.infrastructure.paypal_client import PaymentProvider


def get_payment_provider(request: Request) -> PaymentProvider:
    return request.app.state.payment_provider


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder
