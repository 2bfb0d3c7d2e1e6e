"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .paypal_client import PayPalClient, PaymentProvider, PaymentProviderError
from .geocoding_client import GoogleGeocoder, Geocoder, GeocodingError

__all__ = [
    'PayPalClient', 'PaymentProvider', 'PaymentProviderError',
    'GoogleGeocoder', 'Geocoder', 'GeocodingError',
]
