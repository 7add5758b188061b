import random

from fastapi.testclient import TestClient

from geo import ApproximateGeocoder
from main import create_app
from repo_events import InMemoryEventRepo
from seed import seed_repo
from service_events import EventService

from conftest import submission_data


def create(client, **overrides):
    response = client.post("/api/events", json=submission_data(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_create_and_get(client):
    created = create(client, organizerWebsite="https://dilworthneighbors.org", neighborhood="Dilworth")

    assert created["confidence"] == 70
    assert created["verificationStatus"] == "unverified"
    assert created["sources"] == [{"type": "user_submission", "url": "", "cachedSnapshot": None}]

    fetched = client.get(f"/api/events/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_create_invalid_returns_400(client):
    response = client.post("/api/events", json=submission_data(title="Hey"))
    assert response.status_code == 400
    assert "title" in response.json()["detail"]
    assert client.get("/api/events").json() == []


def test_create_offsetless_timestamp_uses_event_timezone(client):
    created = create(client, startDatetime="2025-10-15T18:00:00")
    assert created["startDatetime"].startswith("2025-10-15T22:00:00")


def test_create_unknown_timezone_returns_400(client):
    response = client.post("/api/events", json=submission_data(timezone="Nowhere/Special"))
    assert response.status_code == 400
    assert "timezone" in response.json()["detail"]


def test_get_unknown_returns_404(client):
    response = client.get("/api/events/nope")
    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"


def test_update_status(client):
    created = create(client)

    response = client.patch(
        f"/api/events/{created['id']}/status",
        json={"verificationStatus": "verified", "confidence": 90, "moderationNotes": "Called venue"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["verificationStatus"] == "verified"
    assert body["confidence"] == 90
    assert body["moderationNotes"] == "Called venue"


def test_update_status_unknown_id(client):
    create(client)
    before = client.get("/api/events").json()

    response = client.patch("/api/events/nope/status", json={"verificationStatus": "verified"})

    assert response.status_code == 404
    assert client.get("/api/events").json() == before


def test_update_status_rejects_bad_confidence(client):
    created = create(client)
    response = client.patch(
        f"/api/events/{created['id']}/status",
        json={"verificationStatus": "verified", "confidence": 101},
    )
    assert response.status_code == 400
    assert client.get(f"/api/events/{created['id']}").json()["confidence"] == 50


def test_flag(client):
    created = create(client, organizerEmail="hello@dilworthneighbors.org")

    response = client.post("/api/events/flag", json={"id": created["id"], "flagReason": "spam", "notes": "Duplicate post"})

    assert response.status_code == 200
    body = response.json()
    assert body["verificationStatus"] == "flagged"
    assert body["flagReason"] == "spam"
    assert body["confidence"] == created["confidence"]
    assert body["moderationNotes"] == "Duplicate post"


def test_flag_unknown_and_invalid(client):
    assert client.post("/api/events/flag", json={"id": "nope", "flagReason": "spam"}).status_code == 404
    assert client.post("/api/events/flag", json={"id": "nope", "flagReason": "meh"}).status_code == 400


def test_discover(client):
    near = create(client, title="Uptown Chess Meetup")
    create(client, title="Far Away Fair", lat="35.5000")

    response = client.get("/api/events/discover", params={"lat": 35.2271, "lng": -80.8431, "radius": 2})

    assert response.status_code == 200
    results = response.json()
    assert [r["id"] for r in results] == [near["id"]]
    assert results[0]["distance"] == 0
    assert results[0]["distanceLabel"] == "0.0 mi"
    assert results[0]["badge"] == "Unverified"
    assert results[0]["badgeTooltip"] == "Confidence: 50% - This event is pending verification."


def test_discover_filters_from_query(client):
    create(client, title="Uptown Chess Meetup", isFree=False)
    create(client, title="Uptown Chess Practice")

    results = client.get("/api/events/discover", params={"search": "chess", "isFree": "true"}).json()
    assert [r["title"] for r in results] == ["Uptown Chess Practice"]

    assert client.get("/api/events/discover", params={"search": "chess", "verifiedOnly": "true"}).json() == []


def test_discover_rejects_radius_out_of_range(client):
    assert client.get("/api/events/discover", params={"radius": 50}).status_code == 400


def test_discover_needs_both_coordinates(client):
    create(client)
    assert client.get("/api/events/discover", params={"lat": 35.2271}).status_code == 400
    assert client.get("/api/events/discover", params={"lng": -80.8431}).status_code == 400
    assert len(client.get("/api/events/discover").json()) == 1


def test_moderation_endpoints(client):
    a = create(client)
    create(client)
    client.post("/api/events/flag", json={"id": a["id"], "flagReason": "outdated"})

    flagged = client.get("/api/moderation/events", params={"status": "flagged"}).json()
    assert [e["id"] for e in flagged] == [a["id"]]
    assert len(client.get("/api/moderation/events").json()) == 2
    assert client.get("/api/moderation/events", params={"status": "archived"}).status_code == 400

    summary = client.get("/api/moderation/summary").json()
    assert summary == {"total": 2, "verified": 0, "unverified": 1, "flagged": 1, "averageConfidence": 50}


def test_geocode():
    app = create_app(EventService(InMemoryEventRepo()), geocoder=ApproximateGeocoder(rng=random.Random(1)))
    client = TestClient(app)

    response = client.post("/api/geocode", json={"address": "1900 East Blvd, Charlotte"})
    assert response.status_code == 200
    assert response.json()["approximation"] is True

    assert client.post("/api/geocode", json={"address": ""}).status_code == 400


def test_seeded_app_lists_sample_events():
    repo = InMemoryEventRepo()
    seed_repo(repo)
    client = TestClient(create_app(EventService(repo)))

    events = client.get("/api/events").json()
    assert len(events) == 5
    starts = [e["startDatetime"] for e in events]
    assert events[0]["title"] == "Freedom Park Community Concert"
    assert len(starts) == len(set(starts))

    assert client.post("/seed").json() == {"inserted": 0}
