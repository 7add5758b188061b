"""
Repository: storage of `Event` records.

This file contains only storage code. Keep business rules (confidence,
status transitions, timestamps) out of this module; they live in
`service_events.EventService`.

Two implementations share the `EventRepo` interface:
- `InMemoryEventRepo` — a lock-guarded dict, the default backend.
- `PostgresEventRepo` — one `events` table via psycopg (see
  `scripts/create_events_table.py` for the DDL).

Important notes:
- `fetch_all` orders by start time ascending; ties keep insertion order.
- `update` applies a pure function to one record atomically and returns
  the new record, or `None` when the id is absent (nothing is written).
- Storage-layer errors surface as `errors.StorageFailure`.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

import psycopg
from psycopg.types.json import Jsonb

from db import get_conn
from errors import StorageFailure
from models import Event

logger = logging.getLogger(__name__)

Mutation = Callable[[Event], Event]


class EventRepo:
    """Storage interface. No business logic here."""

    def insert(self, event: Event) -> Event:
        raise NotImplementedError

    def fetch_all(self) -> List[Event]:
        raise NotImplementedError

    def fetch(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def update(self, event_id: str, mutate: Mutation) -> Optional[Event]:
        raise NotImplementedError

    def count(self) -> int:
        return len(self.fetch_all())

    def ping(self) -> None:
        """Raise if the backend is unreachable."""


class InMemoryEventRepo(EventRepo):
    """Process-local store.

    Records are frozen models that get replaced wholesale, so a reader
    holding a snapshot never observes a half-written record. The lock
    only serializes access to the dict itself.
    """

    def __init__(self):
        self._events: Dict[str, Event] = {}
        self._lock = threading.Lock()

    def insert(self, event: Event) -> Event:
        with self._lock:
            if event.id in self._events:
                raise StorageFailure(f"Duplicate event id: {event.id}")
            self._events[event.id] = event
        return event

    def fetch_all(self) -> List[Event]:
        with self._lock:
            snapshot = list(self._events.values())
        # dicts keep insertion order and sort() is stable
        snapshot.sort(key=lambda e: e.start_datetime)
        return snapshot

    def fetch(self, event_id: str) -> Optional[Event]:
        with self._lock:
            return self._events.get(event_id)

    def update(self, event_id: str, mutate: Mutation) -> Optional[Event]:
        with self._lock:
            current = self._events.get(event_id)
            if current is None:
                return None
            updated = mutate(current)
            self._events[event_id] = updated
            return updated

    def count(self) -> int:
        with self._lock:
            return len(self._events)


COLUMNS = (
    "id",
    "title",
    "description",
    "start_datetime",
    "end_datetime",
    "timezone",
    "location_name",
    "location_address",
    "lat",
    "lng",
    "organizer_name",
    "organizer_website",
    "organizer_email",
    "contact_public",
    "tags",
    "is_free",
    "is_family_friendly",
    "is_outdoor",
    "sources",
    "confidence",
    "verification_status",
    "neighborhood",
    "image_url",
    "created_at",
    "last_checked_at",
    "moderation_notes",
    "flag_reason",
)

_SELECT = f"SELECT {', '.join(COLUMNS)} FROM events"
_INSERT = (
    f"INSERT INTO events ({', '.join(COLUMNS)}) "
    f"VALUES ({', '.join(['%s'] * len(COLUMNS))})"
)
_UPDATE = (
    f"UPDATE events SET {', '.join(f'{c}=%s' for c in COLUMNS[1:])} WHERE id=%s"
)


def _to_params(event: Event) -> tuple:
    """Map an `Event` to positional SQL parameters in `COLUMNS` order."""

    row = event.model_dump(mode="python")
    row["sources"] = Jsonb(
        [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in event.sources]
    )
    row["verification_status"] = event.verification_status.value
    row["flag_reason"] = event.flag_reason.value if event.flag_reason else None
    return tuple(row[c] for c in COLUMNS)


def _from_row(r) -> Event:
    return Event.model_validate(dict(zip(COLUMNS, r)))


class PostgresEventRepo(EventRepo):
    """psycopg-backed store. Each call opens its own connection and commits
    before returning, so a write is durable once the method returns.
    """

    def __init__(self, db_url: str | None = None):
        self.db_url = db_url

    def _fail(self, action: str, exc: Exception) -> StorageFailure:
        logger.error("Postgres %s failed: %s", action, exc)
        return StorageFailure(f"Could not {action}: {exc}")

    def insert(self, event: Event) -> Event:
        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute(_INSERT, _to_params(event))
                conn.commit()
        except psycopg.Error as e:
            raise self._fail("insert event", e) from e
        return event

    def fetch_all(self) -> List[Event]:
        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute(f"{_SELECT} ORDER BY start_datetime ASC, seq ASC")
                    return [_from_row(r) for r in cur.fetchall()]
        except psycopg.Error as e:
            raise self._fail("fetch events", e) from e

    def fetch(self, event_id: str) -> Optional[Event]:
        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute(f"{_SELECT} WHERE id=%s", (event_id,))
                    r = cur.fetchone()
        except psycopg.Error as e:
            raise self._fail("fetch event", e) from e
        return _from_row(r) if r else None

    def update(self, event_id: str, mutate: Mutation) -> Optional[Event]:
        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute(f"{_SELECT} WHERE id=%s FOR UPDATE", (event_id,))
                    r = cur.fetchone()
                    if r is None:
                        conn.rollback()
                        return None
                    updated = mutate(_from_row(r))
                    params = _to_params(updated)
                    cur.execute(_UPDATE, params[1:] + (event_id,))
                conn.commit()
        except psycopg.Error as e:
            raise self._fail("update event", e) from e
        return updated

    def count(self) -> int:
        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT COUNT(*) FROM events")
                    return cur.fetchone()[0]
        except psycopg.Error as e:
            raise self._fail("count events", e) from e

    def ping(self) -> None:
        """Lightweight DB health check. Raises `StorageFailure` on error."""

        try:
            with get_conn(self.db_url) as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT 1;")
        except psycopg.Error as e:
            raise self._fail("reach database", e) from e


def build_repo(backend: str, db_url: str | None = None) -> EventRepo:
    if backend == "memory":
        return InMemoryEventRepo()
    if backend == "postgres":
        return PostgresEventRepo(db_url)
    raise ValueError(f"Unknown storage backend: {backend}")
