"""Shared fixtures: a fresh in-memory store, a service with a controllable clock,
and a test client wired to that service."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models import Event, EventIn, EventSource, SourceType, VerificationStatus
from repo_events import InMemoryEventRepo
from service_events import EventService

CHARLOTTE = (35.2271, -80.8431)


class StepClock:
    """Returns a fixed start time, advancing one minute per call."""

    def __init__(self, start=datetime(2025, 10, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


def submission_data(**overrides):
    data = {
        "title": "Porch Music Night",
        "description": "Neighbors playing acoustic sets from their front porches.",
        "startDatetime": "2025-10-15T18:00:00-04:00",
        "endDatetime": "2025-10-15T21:00:00-04:00",
        "locationName": "Dilworth Porches",
        "locationAddress": "1200 East Blvd, Charlotte, NC 28203",
        "lat": "35.2271",
        "lng": "-80.8431",
        "organizerName": "Dilworth Neighbors",
    }
    data.update(overrides)
    return data


def make_submission(**overrides) -> EventIn:
    return EventIn.model_validate(submission_data(**overrides))


def make_event(**overrides) -> Event:
    """A stored record built directly, bypassing scoring."""

    data = dict(
        id="evt-1",
        title="Riverside Yoga",
        description="Free all-levels yoga class on the greenway lawn.",
        start_datetime=datetime(2025, 10, 18, 13, 0, tzinfo=timezone.utc),
        end_datetime=datetime(2025, 10, 18, 14, 0, tzinfo=timezone.utc),
        location_name="Little Sugar Creek Greenway",
        location_address="1100 Baxter St, Charlotte, NC 28204",
        lat=f"{CHARLOTTE[0]}",
        lng=f"{CHARLOTTE[1]}",
        organizer_name="Greenway Friends",
        sources=[EventSource(type=SourceType.USER_SUBMISSION, url="")],
        confidence=60,
        verification_status=VerificationStatus.UNVERIFIED,
        created_at=datetime(2025, 10, 1, tzinfo=timezone.utc),
        last_checked_at=datetime(2025, 10, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return Event(**data)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def repo():
    return InMemoryEventRepo()


@pytest.fixture
def svc(repo, clock):
    return EventService(repo, clock=clock)


@pytest.fixture
def client(svc):
    return TestClient(create_app(svc))
