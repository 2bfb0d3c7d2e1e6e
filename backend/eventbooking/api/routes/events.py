"""
Event endpoints with Redis caching on list operations.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventbooking.api.deps import get_geocoder
from eventbooking.db.session import get_db
from eventbooking.infrastructure.geocoding_client import Geocoder
from eventbooking.models.user import User
from eventbooking.schemas.event import (
    EventDetailResponse,
    EventFilters,
    EventListResponse,
    EventResponse,
)
from eventbooking.services.event_service import (
    build_event_create,
    create_event,
    get_event,
    list_events,
    parse_filter_date,
    total_pages,
)
from eventbooking.services.upload_service import discard_event_image, save_event_image
from eventbooking.services.cache_service import event_cache, invalidate_event_cache
from eventbooking.core.security import get_current_user
from eventbooking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
@router.get("/", response_model=EventListResponse, include_in_schema=False)
async def list_events_endpoint(
    category: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    page_size: int = Query(9, ge=1, le=100, alias="limit"),
    db: AsyncSession = Depends(get_db),
):
    """
    List events newest first. `dateFrom` is inclusive, `dateTo` exclusive.
    Results are cached in Redis until an event or booking is created.
    """
    filters = EventFilters(
        category=category,
        location=location,
        name=name,
        date_from=parse_filter_date(date_from, "dateFrom"),
        date_to=parse_filter_date(date_to, "dateTo"),
    )

    cached = await event_cache.get_page(filters, page, page_size)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, filters, page, page_size)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages(total, page_size),
        "cached": False,
    }

    await event_cache.set_page(filters, page, page_size, response_data)

    return EventListResponse(**response_data)


@router.post("/create", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    time: Optional[str] = Form(None),
    available_seats: Optional[str] = Form(None, alias="availableSeats"),
    price: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    geocoder: Geocoder = Depends(get_geocoder),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an event from a multipart form. `location` is optional JSON
    `{"lat": .., "lng": ..}`, `file` an optional image.
    """
    event_data = build_event_create(
        {
            "title": title,
            "description": description,
            "category": category,
            "date": date,
            "time": time,
            "availableSeats": available_seats,
            "price": price,
            "location": location,
        }
    )
    image_url = await save_event_image(file)
    try:
        event = await create_event(db, geocoder, event_data, current_user, image_url)
    except Exception:
        await discard_event_image(image_url)
        raise
    await invalidate_event_cache()
    return event


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event_endpoint(
    event_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a single event with organizer and reviews. Not cached."""
    return await get_event(db, event_id, with_reviews=True)
