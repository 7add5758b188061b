"""
Sample Charlotte events for local development and demos.

These are inserted straight into the repository (not through
`EventService.create_event`) because they carry moderator-assigned
confidence, statuses and curated sources.
"""

import logging
import uuid
from typing import List

from models import Event, EventSource, SourceType, VerificationStatus
from repo_events import EventRepo

logger = logging.getLogger(__name__)

SAMPLE_EVENTS = [
    dict(
        title="Freedom Park Community Concert",
        description="Join us for a free outdoor concert featuring local acoustic artists. Bring your blanket and enjoy an evening of music under the stars. Food trucks will be available.",
        start_datetime="2025-10-15T18:00:00-04:00",
        end_datetime="2025-10-15T21:00:00-04:00",
        location_name="Freedom Park",
        location_address="1900 East Blvd, Charlotte, NC 28203",
        lat="35.2042",
        lng="-80.8426",
        organizer_name="Friends of Freedom Park",
        organizer_website="https://friendsoffreedompark.org",
        organizer_email="info@friendsoffreedompark.org",
        contact_public=True,
        tags=["music", "outdoor", "community"],
        is_free=True,
        is_family_friendly=True,
        is_outdoor=True,
        sources=[
            EventSource(type=SourceType.CITY_CALENDAR, url="https://charlottenc.gov/events/freedom-park-concert"),
            EventSource(type=SourceType.LOCAL_NEWS, url="https://charlotteobserver.com/events/freedom-park"),
        ],
        confidence=95,
        verification_status=VerificationStatus.VERIFIED,
        neighborhood="Dilworth",
        image_url="https://images.unsplash.com/photo-1514525253161-7a46d19cd819?w=800&h=450&fit=crop",
        created_at="2025-10-01T12:00:00-04:00",
        last_checked_at="2025-10-10T09:00:00-04:00",
    ),
    dict(
        title="Plaza Midwood Art Walk",
        description="Monthly art walk through Plaza Midwood featuring local artists, galleries, and pop-up exhibitions. Meet artists, enjoy refreshments, and explore the vibrant art scene.",
        start_datetime="2025-10-20T17:00:00-04:00",
        end_datetime="2025-10-20T21:00:00-04:00",
        location_name="Central Avenue - Plaza Midwood",
        location_address="1600 Central Ave, Charlotte, NC 28205",
        lat="35.2220",
        lng="-80.8050",
        organizer_name="Plaza Midwood Merchants Association",
        organizer_website="https://plazamidwood.com",
        tags=["art", "culture", "walking"],
        is_free=True,
        is_family_friendly=True,
        is_outdoor=True,
        sources=[EventSource(type=SourceType.COMMUNITY_GROUP, url="https://plazamidwood.com/events")],
        confidence=88,
        verification_status=VerificationStatus.VERIFIED,
        neighborhood="Plaza Midwood",
        image_url="https://images.unsplash.com/photo-1460661419201-fd4cecdf8a8b?w=800&h=450&fit=crop",
        created_at="2025-09-28T10:00:00-04:00",
        last_checked_at="2025-10-09T14:00:00-04:00",
    ),
    dict(
        title="NoDa Neighborhood Cleanup",
        description="Help keep NoDa beautiful! Join neighbors for a community cleanup day. We'll provide gloves, bags, and refreshments. Perfect for families wanting to give back.",
        start_datetime="2025-10-18T09:00:00-04:00",
        end_datetime="2025-10-18T12:00:00-04:00",
        location_name="NoDa Company Store",
        location_address="3106 N Davidson St, Charlotte, NC 28205",
        lat="35.2451",
        lng="-80.8098",
        organizer_name="NoDa Neighborhood Association",
        organizer_email="cleanup@noda.org",
        tags=["community", "volunteer", "outdoor"],
        is_free=True,
        is_family_friendly=True,
        is_outdoor=True,
        sources=[EventSource(type=SourceType.USER_SUBMISSION, url="")],
        confidence=65,
        verification_status=VerificationStatus.UNVERIFIED,
        neighborhood="NoDa",
        image_url="https://images.unsplash.com/photo-1559027615-cd4628902d4a?w=800&h=450&fit=crop",
        created_at="2025-10-08T16:00:00-04:00",
        last_checked_at="2025-10-08T16:00:00-04:00",
    ),
    dict(
        title="South End Farmers Market",
        description="Weekly farmers market with local produce, artisan goods, baked items, and live music. Support local farmers and enjoy the community atmosphere.",
        start_datetime="2025-10-19T08:00:00-04:00",
        end_datetime="2025-10-19T12:00:00-04:00",
        location_name="Atherton Mill & Market",
        location_address="2104 South Blvd, Charlotte, NC 28203",
        lat="35.2070",
        lng="-80.8640",
        organizer_name="Atherton Market",
        organizer_website="https://athertonmill.com/market",
        tags=["market", "food", "local"],
        is_free=True,
        is_family_friendly=True,
        is_outdoor=True,
        sources=[EventSource(type=SourceType.CITY_CALENDAR, url="https://charlottenc.gov/events/atherton-market")],
        confidence=92,
        verification_status=VerificationStatus.VERIFIED,
        neighborhood="South End",
        image_url="https://images.unsplash.com/photo-1488459716781-31db52582fe9?w=800&h=450&fit=crop",
        created_at="2025-09-25T11:00:00-04:00",
        last_checked_at="2025-10-11T08:00:00-04:00",
    ),
    dict(
        title="Myers Park Library Story Time",
        description="Interactive story time for children ages 2-5 with songs, crafts, and activities. No registration required. Join us for fun learning!",
        start_datetime="2025-10-17T10:30:00-04:00",
        end_datetime="2025-10-17T11:30:00-04:00",
        location_name="Myers Park Library",
        location_address="310 E Worthington Ave, Charlotte, NC 28203",
        lat="35.1950",
        lng="-80.8340",
        organizer_name="Charlotte Mecklenburg Library",
        organizer_website="https://cmlibrary.org",
        tags=["kids", "education", "library"],
        is_free=True,
        is_family_friendly=True,
        is_outdoor=False,
        sources=[EventSource(type=SourceType.LIBRARY, url="https://cmlibrary.org/events/story-time")],
        confidence=98,
        verification_status=VerificationStatus.VERIFIED,
        neighborhood="Myers Park",
        image_url="https://images.unsplash.com/photo-1503676260728-1c00da094a0b?w=800&h=450&fit=crop",
        created_at="2025-09-30T09:00:00-04:00",
        last_checked_at="2025-10-10T10:00:00-04:00",
    ),
]


def sample_events() -> List[Event]:
    return [Event.model_validate({**data, "id": str(uuid.uuid4())}) for data in SAMPLE_EVENTS]


def seed_repo(repo: EventRepo) -> int:
    """Insert the sample events into an empty repo. Returns the number inserted."""

    if repo.count() > 0:
        logger.info("Store already has events, skipping sample seed")
        return 0

    events = sample_events()
    for event in events:
        repo.insert(event)
    logger.info("Seeded %d sample events", len(events))
    return len(events)
