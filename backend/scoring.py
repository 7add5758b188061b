"""
Confidence scoring and the badge policy built on top of it.

`score_submission` is applied once, when a community member submits an
event. It only looks at which optional contact fields were filled in, so
the result is explainable and reproducible. Self-reported trust is capped
below the "Verified" badge threshold; only a moderator can push an event
past it.
"""

from models import Event, EventIn, VerificationStatus

BASE_CONFIDENCE = 50
WEBSITE_BONUS = 15
EMAIL_BONUS = 10
NEIGHBORHOOD_BONUS = 5
USER_SUBMISSION_MAX_CONFIDENCE = 75

VERIFIED_BADGE_THRESHOLD = 80
FLAGGED_BADGE_THRESHOLD = 50


def _present(value) -> bool:
    return bool(value and str(value).strip())


def score_submission(submission: EventIn) -> int:
    """Initial confidence for a fresh submission, always within [50, 75]."""

    score = BASE_CONFIDENCE
    if _present(submission.organizer_website):
        score += WEBSITE_BONUS
    if _present(submission.organizer_email):
        score += EMAIL_BONUS
    if _present(submission.neighborhood):
        score += NEIGHBORHOOD_BONUS
    return min(score, USER_SUBMISSION_MAX_CONFIDENCE)


def badge_variant(event: Event) -> str:
    """`success`, `destructive` or `warning`, from status and raw score together."""

    if event.verification_status == VerificationStatus.VERIFIED or event.confidence >= VERIFIED_BADGE_THRESHOLD:
        return "success"
    if event.verification_status == VerificationStatus.FLAGGED or event.confidence < FLAGGED_BADGE_THRESHOLD:
        return "destructive"
    return "warning"


_LABELS = {"success": "Verified", "destructive": "Flagged", "warning": "Unverified"}


def badge_label(event: Event) -> str:
    """Display label. Recomputed on every call, never stored on the event."""

    return _LABELS[badge_variant(event)]


def badge_tooltip(event: Event) -> str:
    if event.verification_status == VerificationStatus.VERIFIED:
        return f"Confidence: {event.confidence}% - This event has been verified through credible sources."
    if event.verification_status == VerificationStatus.FLAGGED:
        return f"Confidence: {event.confidence}% - This event has been flagged for review."
    return f"Confidence: {event.confidence}% - This event is pending verification."
