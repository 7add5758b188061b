"""
Service / facade layer.

This module implements the submission and moderation rules before any
storage interaction. It is intentionally free of storage details — it
calls an `EventRepo` to read and write records. All write paths go
through this service so confidence scoring and status transitions are
applied in exactly one place.

Key responsibilities:
- score fresh submissions and attach the `user_submission` source
- normalize timestamps to UTC (offset-less ones are read in the event's timezone)
- apply moderation commands (status update, flag) and their side effects
- feed the discovery pipeline and the moderation dashboard

Status transitions are deliberately unrestricted: `update_event_status`
moves any state to any state, `flag_event` moves any state to `flagged`.
Neither clears `flag_reason` nor does flagging touch `confidence`.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from discovery import rank_events
from errors import NotFound, ValidationFailure
from models import (
    Event,
    EventFilters,
    EventFlag,
    EventIn,
    EventSource,
    ModerationSummary,
    RankedEvent,
    SourceType,
    StatusUpdate,
    VerificationStatus,
)
from repo_events import EventRepo
from scoring import score_submission

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _event_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationFailure(f"Unknown timezone: {name}")


def _to_utc(value: datetime, zone: ZoneInfo) -> datetime:
    # Wall-clock times without an offset are read in the event's own timezone.
    if value.tzinfo is None:
        value = value.replace(tzinfo=zone)
    return value.astimezone(timezone.utc)


class EventService:
    """Submission, moderation and discovery rules.

    Example usage:
        repo = InMemoryEventRepo()
        svc = EventService(repo)
        event = svc.create_event(submission)
        svc.flag_event(event.id, EventFlag(flag_reason="spam"))
    """

    def __init__(self, repo: EventRepo, clock=utcnow):
        self.repo = repo
        self.clock = clock

    def _touch(self, event: Event) -> datetime:
        # last_checked_at never goes below created_at, even if the clock steps back
        return max(self.clock(), event.created_at)

    def create_event(self, submission: EventIn) -> Event:
        """Score and store a fresh community submission.

        Raises:
        - `ValidationFailure` when `timezone` is not a known zone name
        - `StorageFailure` if the repository rejects the write
        """

        zone = _event_zone(submission.timezone)
        start = _to_utc(submission.start_datetime, zone)
        end = _to_utc(submission.end_datetime, zone)
        now = self.clock()

        event = Event(
            **submission.model_dump(exclude={"start_datetime", "end_datetime"}),
            start_datetime=start,
            end_datetime=end,
            id=str(uuid.uuid4()),
            sources=[EventSource(type=SourceType.USER_SUBMISSION, url="")],
            confidence=score_submission(submission),
            verification_status=VerificationStatus.UNVERIFIED,
            created_at=now,
            last_checked_at=now,
        )
        self.repo.insert(event)
        logger.info("Created event %s (%r) with confidence %d", event.id, event.title, event.confidence)
        return event

    def get_all_events(self) -> List[Event]:
        """All events, earliest start first."""

        return self.repo.fetch_all()

    def get_event(self, event_id: str) -> Event:
        event = self.repo.fetch(event_id)
        if event is None:
            logger.warning("Event %s not found", event_id)
            raise NotFound(event_id)
        return event

    def update_event_status(self, event_id: str, update: StatusUpdate) -> Event:
        """Moderator status change.

        Status is always overwritten; confidence and notes only when given.
        `flag_reason` is kept as-is, even when leaving `flagged`.
        """

        def apply(event: Event) -> Event:
            changes = {
                "verification_status": update.verification_status,
                "last_checked_at": self._touch(event),
            }
            if update.confidence is not None:
                changes["confidence"] = update.confidence
            if update.moderation_notes is not None:
                changes["moderation_notes"] = update.moderation_notes
            return event.model_copy(update=changes)

        updated = self.repo.update(event_id, apply)
        if updated is None:
            logger.warning("Status update for missing event %s", event_id)
            raise NotFound(event_id)

        logger.info(
            "Event %s status -> %s (confidence %d)",
            event_id, updated.verification_status.value, updated.confidence,
        )
        return updated

    def flag_event(self, event_id: str, flag: EventFlag) -> Event:
        """Force `flagged` with a reason. Confidence is left alone."""

        def apply(event: Event) -> Event:
            changes = {
                "verification_status": VerificationStatus.FLAGGED,
                "flag_reason": flag.flag_reason,
                "last_checked_at": self._touch(event),
            }
            if flag.notes is not None:
                changes["moderation_notes"] = flag.notes
            return event.model_copy(update=changes)

        updated = self.repo.update(event_id, apply)
        if updated is None:
            logger.warning("Flag for missing event %s", event_id)
            raise NotFound(event_id)

        logger.info("Event %s flagged: %s", event_id, flag.flag_reason.value)
        return updated

    def list_events_by_status(self, status: Optional[VerificationStatus] = None) -> List[Event]:
        """Moderation queue. `None` means every status."""

        events = self.repo.fetch_all()
        if status is None:
            return events
        return [e for e in events if e.verification_status == status]

    def moderation_summary(self) -> ModerationSummary:
        events = self.repo.fetch_all()
        if not events:
            return ModerationSummary()

        counts = {s: 0 for s in VerificationStatus}
        for e in events:
            counts[e.verification_status] += 1

        return ModerationSummary(
            total=len(events),
            verified=counts[VerificationStatus.VERIFIED],
            unverified=counts[VerificationStatus.UNVERIFIED],
            flagged=counts[VerificationStatus.FLAGGED],
            # half rounds up, matching the dashboard
            average_confidence=int(sum(e.confidence for e in events) / len(events) + 0.5),
        )

    def discover(self, viewer_lat: float, viewer_lng: float, filters: EventFilters) -> List[RankedEvent]:
        """Nearby events for a viewer, filtered and sorted nearest first."""

        return rank_events(self.repo.fetch_all(), viewer_lat, viewer_lng, filters)

    def health_check(self) -> None:
        """Perform a lightweight storage ping via the repository."""

        self.repo.ping()
