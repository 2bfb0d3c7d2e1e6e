"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Checkout metrics
checkout_orders = Counter(
    'checkout_orders_total',
    'Payment-provider orders requested',
    ['result']  # created, rejected, provider_error
)

payment_captures = Counter(
    'payment_captures_total',
    'Payment capture attempts',
    ['result']  # completed, not_completed, replayed, unfulfilled, provider_error
)

provider_latency = Histogram(
    'payment_provider_latency_seconds',
    'Payment provider call latency',
    ['operation'],  # create_order, capture_order
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Booking metrics
bookings_created = Counter(
    'bookings_created_total',
    'Bookings materialized from captured payments'
)

seats_booked = Counter(
    'seats_booked_total',
    'Seats added to events through bookings'
)

# Geocoding metrics
geocoding_lookups = Counter(
    'geocoding_lookups_total',
    'Reverse geocoding lookups',
    ['result']  # resolved, fallback
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_checkout_order(result: str):
    """Result: created, rejected, provider_error"""
    checkout_orders.labels(result=result).inc()


def record_capture(result: str):
    """Result: completed, not_completed, replayed, unfulfilled, provider_error"""
    payment_captures.labels(result=result).inc()


def record_booking(seats: int):
    bookings_created.inc()
    seats_booked.inc(seats)


def record_geocoding(resolved: bool):
    geocoding_lookups.labels(result="resolved" if resolved else "fallback").inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
