"""
Pydantic models used across the backend.

Input shapes (`EventIn`, `StatusUpdate`, `EventFlag`, `EventFilters`)
validate at the FastAPI route boundary and are reused by the service
layer. `Event` is the stored record returned by every read.

Guidelines:
- Python attributes are snake_case; JSON uses camelCase aliases so
  clients see `startDatetime`, `verificationStatus`, etc. Both spellings
  are accepted on input.
- `lat`/`lng` stay decimal strings end to end. They are parsed to float
  only when a distance is computed.
- Blank optional strings (`""`) are treated as absent.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel

DECIMAL_DEGREES_PATTERN = r"^-?\d+\.?\d*$"
DEFAULT_TIMEZONE = "America/New_York"

_http_url = TypeAdapter(AnyHttpUrl)


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    FLAGGED = "flagged"


class FlagReason(str, Enum):
    OUTDATED = "outdated"
    SPAM = "spam"
    INCORRECT_LOCATION = "incorrect_location"
    SAFETY_RISK = "safety_risk"
    OTHER = "other"


class SourceType(str, Enum):
    CITY_CALENDAR = "city_calendar"
    LIBRARY = "library"
    LOCAL_NEWS = "local_news"
    COMMUNITY_GROUP = "community_group"
    USER_SUBMISSION = "user_submission"
    OTHER = "other"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class EventSource(CamelModel):
    """Provenance record backing an event's claims."""

    type: SourceType
    url: str = ""
    cached_snapshot: Optional[str] = None


class EventIn(CamelModel):
    """Input shape for a community submission.

    Fields mirror `Event` minus everything the system assigns: id,
    sources, confidence, verification status, timestamps and moderation
    fields.
    """

    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=1000)
    start_datetime: datetime
    end_datetime: datetime
    timezone: str = DEFAULT_TIMEZONE
    location_name: str = Field(min_length=3)
    location_address: str = Field(min_length=5)
    lat: str = Field(pattern=DECIMAL_DEGREES_PATTERN)
    lng: str = Field(pattern=DECIMAL_DEGREES_PATTERN)
    organizer_name: str = Field(min_length=2)
    organizer_website: Optional[str] = None
    organizer_email: Optional[EmailStr] = None
    contact_public: bool = False
    tags: List[str] = Field(default_factory=list, max_length=5)
    is_free: bool = True
    is_family_friendly: bool = False
    is_outdoor: bool = False
    neighborhood: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator(
        "organizer_website", "organizer_email", "neighborhood", "image_url", mode="before"
    )
    @classmethod
    def blank_is_absent(cls, value):
        return _blank_to_none(value)

    @field_validator("organizer_website", "image_url")
    @classmethod
    def must_be_http_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            # Validate only; keep the submitted spelling (no trailing-slash rewrite).
            _http_url.validate_python(value)
        return value


class Event(EventIn):
    """A stored event record. Instances are never mutated in place."""

    model_config = ConfigDict(frozen=True)

    id: str
    sources: List[EventSource] = Field(min_length=1)
    confidence: int = Field(ge=0, le=100)
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    created_at: datetime
    last_checked_at: datetime
    moderation_notes: Optional[str] = None
    flag_reason: Optional[FlagReason] = None


class StatusUpdate(CamelModel):
    """Moderator command: overwrite status, optionally confidence and notes."""

    verification_status: VerificationStatus
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    moderation_notes: Optional[str] = None


class EventFlag(CamelModel):
    """Flag command: force `flagged` and record a reason."""

    flag_reason: FlagReason
    notes: Optional[str] = None


class FlagRequest(EventFlag):
    """`EventFlag` as posted to `/api/events/flag`, carrying the target id."""

    id: str


class EventFilters(CamelModel):
    """Discovery filter configuration. Every predicate set is ANDed."""

    search: Optional[str] = None
    radius: float = Field(default=2, ge=1, le=10)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_free: Optional[bool] = None
    is_family_friendly: Optional[bool] = None
    is_outdoor: Optional[bool] = None
    verified_only: Optional[bool] = None
    neighborhood: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("search", mode="before")
    @classmethod
    def empty_search_is_absent(cls, value):
        # whitespace is a legitimate substring to search for
        return None if value == "" else value

    @field_validator("neighborhood", mode="before")
    @classmethod
    def blank_is_absent(cls, value):
        return _blank_to_none(value)


class RankedEvent(BaseModel):
    """One discovery result: the event plus its distance from the viewer in miles."""

    event: Event
    distance: float


class ModerationSummary(CamelModel):
    total: int = 0
    verified: int = 0
    unverified: int = 0
    flagged: int = 0
    average_confidence: int = 0


class GeocodeRequest(BaseModel):
    address: str


class GeocodeResult(BaseModel):
    lat: str
    lng: str
    approximation: bool = True
