from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import logging

from discovery import format_distance
from errors import NotFound, StorageFailure
from geo import ApproximateGeocoder, GeocodeFailure, Geocoder
from logging_config import setup_logging
from models import (
    Event,
    EventFilters,
    EventFlag,
    EventIn,
    FlagRequest,
    GeocodeRequest,
    GeocodeResult,
    ModerationSummary,
    StatusUpdate,
    VerificationStatus,
)
from repo_events import build_repo
from scoring import badge_label, badge_tooltip
from seed import seed_repo
from service_events import EventService
from settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> EventService:
    return request.app.state.svc


def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder


@router.get("/health")
def health(svc: EventService = Depends(get_service)):
    try:
        svc.health_check()
        return {"ok": True}
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=f"Storage health check failed: {e}")


@router.get("/api/events", response_model=List[Event])
def list_events(svc: EventService = Depends(get_service)):
    try:
        return svc.get_all_events()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


# Registered before /api/events/{event_id} so "discover" is not read as an id.
@router.get("/api/events/discover")
def discover(
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    search: Optional[str] = None,
    radius: Optional[float] = None,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    is_free: Optional[bool] = Query(None, alias="isFree"),
    is_family_friendly: Optional[bool] = Query(None, alias="isFamilyFriendly"),
    is_outdoor: Optional[bool] = Query(None, alias="isOutdoor"),
    verified_only: Optional[bool] = Query(None, alias="verifiedOnly"),
    neighborhood: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    svc: EventService = Depends(get_service),
):
    try:
        filters = EventFilters(
            search=search,
            radius=radius if radius is not None else settings.default_radius_miles,
            start_date=start_date,
            end_date=end_date,
            is_free=is_free,
            is_family_friendly=is_family_friendly,
            is_outdoor=is_outdoor,
            verified_only=verified_only,
            neighborhood=neighborhood,
            tags=tags,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=_describe(e))

    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="lat and lng must be given together")
    if lat is None:
        viewer_lat, viewer_lng = settings.default_viewer_lat, settings.default_viewer_lng
    else:
        viewer_lat, viewer_lng = lat, lng

    try:
        ranked = svc.discover(viewer_lat, viewer_lng, filters)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return [
        {
            **r.event.model_dump(mode="json", by_alias=True),
            "distance": r.distance,
            "distanceLabel": format_distance(r.distance),
            "badge": badge_label(r.event),
            "badgeTooltip": badge_tooltip(r.event),
        }
        for r in ranked
    ]


@router.get("/api/events/{event_id}", response_model=Event)
def get_event(event_id: str, svc: EventService = Depends(get_service)):
    try:
        return svc.get_event(event_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Event not found")
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/events", response_model=Event, status_code=201)
def create_event(submission: EventIn, svc: EventService = Depends(get_service)):
    try:
        return svc.create_event(submission)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=f"Insert failed: {e}")


@router.patch("/api/events/{event_id}/status", response_model=Event)
def update_event_status(event_id: str, update: StatusUpdate, svc: EventService = Depends(get_service)):
    try:
        return svc.update_event_status(event_id, update)
    except NotFound:
        raise HTTPException(status_code=404, detail="Event not found")
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/events/flag", response_model=Event)
def flag_event(body: FlagRequest, svc: EventService = Depends(get_service)):
    try:
        return svc.flag_event(body.id, EventFlag(flag_reason=body.flag_reason, notes=body.notes))
    except NotFound:
        raise HTTPException(status_code=404, detail="Event not found")
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/moderation/events", response_model=List[Event])
def moderation_queue(status: str = "all", svc: EventService = Depends(get_service)):
    try:
        wanted = None if status == "all" else VerificationStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown status filter: {status}")
    try:
        return svc.list_events_by_status(wanted)
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/moderation/summary", response_model=ModerationSummary)
def moderation_summary(svc: EventService = Depends(get_service)):
    try:
        return svc.moderation_summary()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/geocode", response_model=GeocodeResult)
def geocode(body: GeocodeRequest, geocoder: Geocoder = Depends(get_geocoder)):
    try:
        return geocoder.geocode(body.address)
    except GeocodeFailure as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/seed")
def seed(svc: EventService = Depends(get_service)):
    # NOTE: goes straight to the repo; sample events carry curated statuses
    try:
        return {"inserted": seed_repo(svc.repo)}
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=f"Seed failed: {e}")


def _describe(exc: ValidationError | RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", ""))
    return "Validation error: " + "; ".join(parts)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": _describe(exc)})


def create_app(svc: EventService | None = None, geocoder: Geocoder | None = None) -> FastAPI:
    """Build the application around one `EventService`.

    The service (and its repo) is created once here and shared by every
    request through `app.state`; tests pass their own.
    """

    setup_logging()

    if svc is None:
        repo = build_repo(settings.storage_backend, settings.db_url)
        if settings.seed_sample_events and settings.storage_backend == "memory":
            seed_repo(repo)
        svc = EventService(repo)

    app = FastAPI(title="Community Events Backend")
    app.state.svc = svc
    app.state.geocoder = geocoder or ApproximateGeocoder(
        center=(settings.default_viewer_lat, settings.default_viewer_lng)
    )
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)

    logger.info("Events API ready (storage=%s)", type(svc.repo).__name__)
    return app


app = create_app()
