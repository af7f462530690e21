"""Polling task worker: discover new activities in Strava club feeds.

Architecture notes:
- The seed pass (initial=True) runs once at process start, before beat is
  running. It records every listed activity as seen and posts nothing.
- Beat fires dispatch_club_polls every activity_check_interval and fans out
  one poll_club_task per configured club, so clubs are polled independently
  and a failing club never holds up the others.
- A club's new activities are recorded in the seen-set and committed before
  any notification work starts. Each activity id therefore gets at most one
  notification attempt, whatever the outcome of its detail fetch or post.
- Cycles may overlap when one runs longer than the interval, and two clubs
  may list the same activity. Recording is insert-or-ignore per id and
  returns the ids this cycle inserted. Only those are notified, so an
  overlapping cycle that loses the race posts nothing for that id.
- Within a club, detail-fetch-then-post chains for eligible activities run
  concurrently with no ordering guarantee.
"""

import asyncio
import logging
from datetime import UTC, datetime

from clubfeed.config import get_settings
from clubfeed.core.errors import UpstreamFetchError
from clubfeed.database import get_task_session
from clubfeed.schemas.club import ClubConfig
from clubfeed.schemas.strava import ActivitySummary
from clubfeed.services.notifier import notify_activity
from clubfeed.services.polling_service import DEFAULT_POLLING_CONFIG, eligibility_reason
from clubfeed.services.seen_activities import filter_new_activities, mark_seen
from clubfeed.services.strava_client import list_club_activities
from clubfeed.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="clubfeed.workers.polling_tasks.dispatch_club_polls")
def dispatch_club_polls():
    """Beat task: fan out individual poll tasks for each configured club."""
    clubs = get_settings().strava_clubs
    for club in clubs:
        poll_club_task.delay(str(club.id))
    logger.info(f"Dispatched {len(clubs)} club poll tasks")


@celery_app.task(name="clubfeed.workers.polling_tasks.poll_club_task")
def poll_club_task(club_id: str):
    """Poll a single club for new activities and post the eligible ones."""
    club = get_settings().get_club(club_id)
    if not club:
        logger.warning(f"Club {club_id} is not configured, skipping")
        return None
    return asyncio.run(_poll_club_safely(club, initial=False))


async def check_for_new_activities(initial: bool = False) -> list[dict]:
    """Poll every configured club concurrently. Returns one status dict per club."""
    clubs = get_settings().strava_clubs
    return list(await asyncio.gather(*(_poll_club_safely(club, initial) for club in clubs)))


async def _poll_club_safely(club: ClubConfig, initial: bool) -> dict:
    try:
        return await poll_club(club, initial)
    except Exception as e:
        logger.exception(f"Error polling club {club.id}: {e}", extra={"club_id": club.id})
        return _poll_result(club, "error", error=str(e))


async def poll_club(club: ClubConfig, initial: bool = False) -> dict:
    """List a club's activities, record the unseen ones, and notify on non-initial runs.

    Returns a status dict: {club_id, status, activities_found, new_activities,
    notified, error}.
    """
    settings = get_settings()
    log_extra = {"club_id": club.id, "initial": initial}

    try:
        activities = await list_club_activities(
            settings.strava_token, club.id, per_page=DEFAULT_POLLING_CONFIG.per_page
        )
    except UpstreamFetchError as e:
        logger.error(f"Error listing activities for club {club.id}: {e}", extra=log_extra)
        return _poll_result(club, "error", error=str(e))

    if not activities:
        logger.info(f"No activities found for club {club.id}", extra=log_extra)
        return _poll_result(club, "empty")

    async with get_task_session() as db:
        candidates = await filter_new_activities(db, activities)
        claimed = await mark_seen(db, [activity.id for activity in candidates])
        await db.commit()

    # Only ids this cycle inserted are ours to notify
    new_activities = [activity for activity in candidates if activity.id in claimed]

    logger.info(
        f"Checked for activities in club {club.id}: "
        f"{len(new_activities)} new of {len(activities)} (initial={initial})",
        extra=log_extra,
    )

    notified = 0
    if not initial and new_activities:
        now = datetime.now(UTC)
        eligible = [activity for activity in new_activities if _should_post(club, activity, now)]
        results = await asyncio.gather(
            *(
                notify_activity(
                    club,
                    activity,
                    settings.strava_token,
                    message_style=settings.message_style,
                    username=settings.slack_username,
                    icon_url=settings.slack_icon_url,
                )
                for activity in eligible
            )
        )
        notified = sum(1 for posted in results if posted)

    return _poll_result(
        club,
        "ok",
        activities_found=len(activities),
        new_activities=len(new_activities),
        notified=notified,
    )


def _should_post(club: ClubConfig, activity: ActivitySummary, now: datetime) -> bool:
    reason = eligibility_reason(activity, now)
    log_extra = {"club_id": club.id, "activity_id": activity.id}
    if reason == "bike_commute":
        logger.info(
            f"Not posting activity {activity.id} to Slack because it's a bike commute",
            extra=log_extra,
        )
        return False
    if reason == "stale":
        logger.info(
            f"Not posting activity {activity.id} to Slack because it's old "
            f"(start_date={activity.start_date.isoformat()})",
            extra=log_extra,
        )
        return False
    return True


def _poll_result(
    club: ClubConfig,
    status: str,
    activities_found: int = 0,
    new_activities: int = 0,
    notified: int = 0,
    error: str | None = None,
) -> dict:
    return {
        "club_id": str(club.id),
        "status": status,
        "activities_found": activities_found,
        "new_activities": new_activities,
        "notified": notified,
        "error": error,
    }
