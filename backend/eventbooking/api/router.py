"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from eventbooking.api.routes import auth, events, bookings, checkout, rating, user, health

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
api_router.include_router(checkout.router)
api_router.include_router(rating.router)
api_router.include_router(user.router)
api_router.include_router(health.router)
