"""Fetch an activity's details, format them, and post them to a club webhook.

Failures are logged and swallowed here: by the time an activity reaches the
notifier it is already recorded as seen, so it is never retried.
"""

import logging
from typing import Literal

from clubfeed.core.errors import NotificationPostError, UpstreamFetchError
from clubfeed.schemas.club import ClubConfig
from clubfeed.schemas.strava import ActivitySummary
from clubfeed.services.activity_formatter import format_activity
from clubfeed.services.slack_client import post_message
from clubfeed.services.strava_client import get_activity

logger = logging.getLogger(__name__)


async def notify_activity(
    club: ClubConfig,
    summary: ActivitySummary,
    access_token: str,
    message_style: Literal["rich", "flat"] = "rich",
    username: str | None = None,
    icon_url: str | None = None,
) -> bool:
    """Post one activity to the club's webhook. Returns True if the post succeeded."""
    log_extra = {"club_id": club.id, "activity_id": summary.id}

    try:
        activity = await get_activity(access_token, summary.id)
    except UpstreamFetchError as e:
        logger.error(f"Error fetching activity details for {summary.id}: {e}", extra=log_extra)
        return False

    payload = format_activity(
        summary.athlete, activity, style=message_style, username=username, icon_url=icon_url
    )

    try:
        await post_message(str(club.webhook), payload)
    except NotificationPostError as e:
        logger.error(
            f"Error posting activity {summary.id} to Slack for club {club.id}: {e}",
            extra=log_extra,
        )
        return False

    logger.info(f"Posted activity {summary.id} to Slack for club {club.id}", extra=log_extra)
    return True
