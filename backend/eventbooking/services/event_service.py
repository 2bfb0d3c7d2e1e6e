"""
Event catalog: create, fetch, filter and paginate events.
"""

import json
import math
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eventbooking.core.config import get_settings
from eventbooking.core.logging import get_logger
from eventbooking.core.metrics import record_geocoding
from eventbooking.infrastructure.geocoding_client import Geocoder, GeocodingError
from eventbooking.models.event import (
    ADDRESS_NOT_AVAILABLE,
    ADDRESS_NOT_SPECIFIED,
    CITY_NOT_AVAILABLE,
    CITY_NOT_SPECIFIED,
    Event,
)
from eventbooking.models.review import Review
from eventbooking.models.user import User
from eventbooking.schemas.event import EventCreate, EventFilters, LatLng

logger = get_logger(__name__)

REQUIRED_FORM_FIELDS = ("title", "description", "category", "date", "availableSeats")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def combine_date_time(date: str, time: Optional[str] = None) -> datetime:
    """
    Combine a YYYY-MM-DD date with an optional HH:MM time of day.
    Naive values are taken as UTC. Raises 400 when unparseable.
    """
    raw = f"{date.strip()}T{time.strip()}" if time and time.strip() else date.strip()
    try:
        return _as_utc(datetime.fromisoformat(raw))
    except ValueError:
        logger.warning("event_date_invalid", date=date, time=time)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid date format", "date": date, "time": time},
        )


def parse_filter_date(value: Optional[str], field: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(value.strip()))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date for {field}: {value}",
        )


def _parse_location(raw: Optional[str]) -> Optional[LatLng]:
    if not raw:
        return None
    try:
        return LatLng.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        # Malformed location is dropped, the event is still created
        logger.warning("event_location_invalid", location=raw, error=str(e))
        return None


def build_event_create(form: dict[str, Optional[str]]) -> EventCreate:
    """
    Turn raw multipart form values into a validated EventCreate.
    Missing required fields are all reported at once.
    """
    missing = [name for name in REQUIRED_FORM_FIELDS if not (form.get(name) or "").strip()]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Missing required fields", "missing": missing},
        )

    event_date = combine_date_time(form["date"], form.get("time"))
    try:
        return EventCreate(
            title=form["title"],
            description=form["description"],
            category=form["category"],
            date=event_date,
            available_seats=form["availableSeats"],
            price=form.get("price") or 0,
            location=_parse_location(form.get("location")),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": "Invalid event data",
                "errors": e.errors(include_url=False, include_context=False, include_input=False),
            },
        )


async def resolve_address(geocoder: Geocoder, location: Optional[LatLng]) -> tuple[str, str]:
    """Address and city for a location, falling back to placeholder text."""
    if location is None:
        return ADDRESS_NOT_SPECIFIED, CITY_NOT_SPECIFIED

    try:
        place = await geocoder.reverse(location.lat, location.lng)
    except GeocodingError as e:
        logger.warning("geocoding_failed", lat=location.lat, lng=location.lng, error=str(e))
        record_geocoding(resolved=False)
        return ADDRESS_NOT_AVAILABLE, CITY_NOT_AVAILABLE

    record_geocoding(resolved=True)
    return place.address, place.city


async def create_event(
    db: AsyncSession,
    geocoder: Geocoder,
    event_data: EventCreate,
    organizer: User,
    image_url: Optional[str] = None,
) -> Event:
    address, city = await resolve_address(geocoder, event_data.location)

    event = Event(
        title=event_data.title,
        description=event_data.description,
        category=event_data.category,
        address=address,
        city=city,
        latitude=event_data.location.lat if event_data.location else None,
        longitude=event_data.location.lng if event_data.location else None,
        date=event_data.date,
        available_seats=event_data.available_seats,
        booked_seats=0,
        price=event_data.price,
        image_url=image_url or get_settings().DEFAULT_EVENT_IMAGE,
        organizer_id=organizer.id,
    )
    db.add(event)
    await db.commit()

    logger.info(
        "event_created",
        event_id=event.id,
        title=event.title,
        seats=event.available_seats,
        organizer_id=organizer.id,
    )
    return await get_event(db, event.id)


async def get_event(db: AsyncSession, event_id: int, with_reviews: bool = False) -> Event:
    query = select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    if with_reviews:
        query = query.options(selectinload(Event.reviews).selectinload(Review.user))
    result = await db.execute(query)
    event = result.scalar_one_or_none()

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return event


def _apply_filters(query, filters: EventFilters):
    if filters.category and filters.category.lower() != "all":
        query = query.where(Event.category.icontains(filters.category, autoescape=True))
    if filters.location:
        query = query.where(
            or_(
                Event.city.icontains(filters.location, autoescape=True),
                Event.address.icontains(filters.location, autoescape=True),
            )
        )
    if filters.name:
        query = query.where(Event.title.icontains(filters.name, autoescape=True))
    if filters.date_from:
        query = query.where(Event.date >= filters.date_from)
    if filters.date_to:
        query = query.where(Event.date < filters.date_to)
    return query


async def list_events(
    db: AsyncSession,
    filters: EventFilters,
    page: int = 1,
    page_size: int = 9,
) -> tuple[list[Event], int]:
    """Newest-created first. Returns the page and the total match count."""
    query = _apply_filters(select(Event), filters)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    events_query = (
        query
        .order_by(Event.created_at.desc(), Event.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    return list(result.scalars().all()), total


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


async def list_events_by_organizer(db: AsyncSession, organizer_id: int) -> list[Event]:
    result = await db.execute(
        select(Event)
        .where(Event.organizer_id == organizer_id)
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    return list(result.scalars().all())
