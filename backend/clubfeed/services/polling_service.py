"""Polling configuration and activity eligibility rules."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from clubfeed.config import CLUB_ACTIVITIES_PER_PAGE, STALE_ACTIVITY_DAYS
from clubfeed.schemas.strava import ActivitySummary


@dataclass(frozen=True)
class PollingConfig:
    """Fixed polling behavior; the interval itself comes from settings."""

    per_page: int = CLUB_ACTIVITIES_PER_PAGE
    stale_after: timedelta = timedelta(days=STALE_ACTIVITY_DAYS)


# Default polling configuration
DEFAULT_POLLING_CONFIG = PollingConfig()


def is_bike_commute(summary: ActivitySummary) -> bool:
    return summary.is_bike_ride and summary.commute


def is_stale(
    summary: ActivitySummary,
    now: datetime | None = None,
    config: PollingConfig = DEFAULT_POLLING_CONFIG,
) -> bool:
    """True when the activity started more than ``config.stale_after`` ago.

    Activities without a start date are never treated as stale.
    """
    if summary.start_date is None:
        return False
    now = now or datetime.now(UTC)
    start = summary.start_date
    if start.tzinfo is None:
        start = start.replace(tzinfo=UTC)
    return start < now - config.stale_after


def eligibility_reason(
    summary: ActivitySummary,
    now: datetime | None = None,
    config: PollingConfig = DEFAULT_POLLING_CONFIG,
) -> str | None:
    """Return why an activity must not be posted, or None when it is eligible."""
    if is_bike_commute(summary):
        return "bike_commute"
    if is_stale(summary, now, config):
        return "stale"
    return None
