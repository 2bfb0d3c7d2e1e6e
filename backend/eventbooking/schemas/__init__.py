from eventbooking.schemas.user import UserCreate, UserResponse, UserLogin, Token
from eventbooking.schemas.event import EventCreate, EventResponse, EventListResponse
from eventbooking.schemas.booking import BookingResponse, BookingDetailResponse
from eventbooking.schemas.review import ReviewCreate, ReviewResponse
from eventbooking.schemas.checkout import CheckoutCreate, CaptureRequest, CaptureResponse

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token",
    "EventCreate", "EventResponse", "EventListResponse",
    "BookingResponse", "BookingDetailResponse",
    "ReviewCreate", "ReviewResponse",
    "CheckoutCreate", "CaptureRequest", "CaptureResponse",
]
