"""
Discovery pipeline: filter -> annotate with distance -> sort by distance.

Everything here is read-only and recomputed on each call; there is no
index or cache. Predicates are ANDed. The final sort is Python's stable
sort, so events at the same distance keep their input order.
"""

from datetime import datetime, timezone
from typing import Iterable, List

from geo import distance_miles
from models import Event, EventFilters, RankedEvent, VerificationStatus


def _as_utc(value: datetime) -> datetime:
    # Naive bounds from query strings are taken as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def event_distance(event: Event, viewer_lat: float, viewer_lng: float) -> float:
    return distance_miles(viewer_lat, viewer_lng, float(event.lat), float(event.lng))


def matches_search(event: Event, search: str | None) -> bool:
    if not search:
        return True
    needle = search.lower()
    return (
        needle in event.title.lower()
        or needle in event.location_name.lower()
        or needle in event.description.lower()
    )


def matches_attributes(event: Event, filters: EventFilters) -> bool:
    """Date window, tri-state flags, verification, neighborhood and tags."""

    if filters.start_date is not None and _as_utc(event.start_datetime) < _as_utc(filters.start_date):
        return False
    if filters.end_date is not None and _as_utc(event.start_datetime) > _as_utc(filters.end_date):
        return False

    if filters.is_free is not None and event.is_free != filters.is_free:
        return False
    if filters.is_family_friendly is not None and event.is_family_friendly != filters.is_family_friendly:
        return False
    if filters.is_outdoor is not None and event.is_outdoor != filters.is_outdoor:
        return False

    if filters.verified_only and event.verification_status != VerificationStatus.VERIFIED:
        return False

    if filters.neighborhood:
        if (event.neighborhood or "").strip().lower() != filters.neighborhood.strip().lower():
            return False

    if filters.tags:
        wanted = {t.strip().lower() for t in filters.tags if t.strip()}
        if wanted and not wanted & {t.lower() for t in event.tags}:
            return False

    return True


def rank_events(
    events: Iterable[Event],
    viewer_lat: float,
    viewer_lng: float,
    filters: EventFilters,
) -> List[RankedEvent]:
    """Return events that pass every filter, nearest first, with distances."""

    ranked: List[RankedEvent] = []
    for event in events:
        if not matches_search(event, filters.search):
            continue
        distance = event_distance(event, viewer_lat, viewer_lng)
        if distance > filters.radius:
            continue
        if not matches_attributes(event, filters):
            continue
        ranked.append(RankedEvent(event=event, distance=distance))

    ranked.sort(key=lambda r: r.distance)
    return ranked


def format_distance(distance: float) -> str:
    return f"{distance:.1f} mi"
