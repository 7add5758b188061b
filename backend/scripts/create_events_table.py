import logging

from db import get_conn
from logging_config import setup_logging
from settings import settings

DDL = '''
CREATE TABLE IF NOT EXISTS events (
    seq BIGSERIAL,
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    start_datetime TIMESTAMP WITH TIME ZONE NOT NULL,
    end_datetime TIMESTAMP WITH TIME ZONE NOT NULL,
    timezone TEXT NOT NULL DEFAULT 'America/New_York',
    location_name TEXT NOT NULL,
    location_address TEXT NOT NULL,
    lat TEXT NOT NULL,
    lng TEXT NOT NULL,
    organizer_name TEXT NOT NULL,
    organizer_website TEXT,
    organizer_email TEXT,
    contact_public BOOLEAN NOT NULL DEFAULT FALSE,
    tags TEXT[] NOT NULL DEFAULT ARRAY[]::TEXT[],
    is_free BOOLEAN NOT NULL DEFAULT TRUE,
    is_family_friendly BOOLEAN NOT NULL DEFAULT FALSE,
    is_outdoor BOOLEAN NOT NULL DEFAULT FALSE,
    sources JSONB NOT NULL DEFAULT '[]'::JSONB,
    confidence INTEGER NOT NULL DEFAULT 50 CHECK (confidence BETWEEN 0 AND 100),
    verification_status TEXT NOT NULL DEFAULT 'unverified'
        CHECK (verification_status IN ('unverified', 'verified', 'flagged')),
    neighborhood TEXT,
    image_url TEXT,
    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
    last_checked_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT now(),
    moderation_notes TEXT,
    flag_reason TEXT
        CHECK (flag_reason IN ('outdated', 'spam', 'incorrect_location', 'safety_risk', 'other'))
);

CREATE INDEX IF NOT EXISTS idx_events_start ON events (start_datetime, seq);
CREATE INDEX IF NOT EXISTS idx_events_status ON events (verification_status);
'''

setup_logging()
logger = logging.getLogger("create_events_table")

logger.info("Connecting to %s", settings.db_url)
with get_conn() as conn:
    with conn.cursor() as cur:
        cur.execute(DDL)
    conn.commit()
logger.info("DDL applied")
