"""Turn a Strava activity into a Slack webhook payload.

All functions here are pure: no I/O, no clock, no settings lookups.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from clubfeed.config import STRAVA_WEB_BASE
from clubfeed.schemas.slack import FlatMessage, RichMessage, SlackAttachment, SlackField
from clubfeed.schemas.strava import ActivityDetail, Athlete

METERS_TO_MILES = 0.00062137
METERS_TO_FEET = 3.28084

VERBS = {
    "Ride": "rode",
    "Run": "ran",
}

EMOJI = {
    "Ride": ":bike:",
    "Run": ":runner:",
    "Swim": ":swimmer:",
}

NO_PACE = "N/A"

_DURATION_UNITS = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


def round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def meters_to_miles(meters: float) -> float:
    return round_half_up(meters * METERS_TO_MILES, 2)


def meters_to_feet(meters: float) -> int:
    return int(round_half_up(meters * METERS_TO_FEET))


def format_number(value: float) -> str:
    """Render a 2-decimal value without trailing zeros (10.0 -> "10", 5.20 -> "5.2")."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_duration(seconds: float) -> str:
    """Human-readable duration, largest unit first: "1 hour, 2 minutes, 3 seconds"."""
    remaining = int(round_half_up(max(seconds, 0)))
    parts = []
    for unit, size in _DURATION_UNITS:
        count, remaining = divmod(remaining, size)
        if count:
            parts.append(f"{count} {unit}{'' if count == 1 else 's'}")
    return ", ".join(parts) if parts else "0 seconds"


def format_pace(moving_time: float, distance_miles: float) -> str | None:
    """Minutes-per-mile pace as "M:SS/mi", or None when there is no distance."""
    if distance_miles <= 0:
        return None
    minutes_per_mile = (moving_time / 60) / distance_miles
    minutes = math.floor(minutes_per_mile)
    seconds = int(round_half_up((minutes_per_mile % 1) * 60))
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d}/mi"


def activity_verb(activity_type: str) -> str:
    return VERBS.get(activity_type, activity_type)


def activity_emoji(activity_type: str) -> str | None:
    return EMOJI.get(activity_type)


def athlete_link(athlete: Athlete) -> str | None:
    if athlete.id is None:
        return None
    return f"{STRAVA_WEB_BASE}/athletes/{athlete.id}"


def activity_link(activity: ActivityDetail) -> str:
    return f"{STRAVA_WEB_BASE}/activities/{activity.id}"


def activity_title(athlete: Athlete, activity: ActivityDetail) -> str:
    distance = meters_to_miles(activity.distance)
    verb = activity_verb(activity.type)
    return f"{athlete.firstname} {verb} {format_number(distance)} miles!"


def build_rich_message(athlete: Athlete, activity: ActivityDetail) -> RichMessage:
    distance = meters_to_miles(activity.distance)
    title = activity_title(athlete, activity)
    link = activity_link(activity)

    attachment = SlackAttachment(
        fallback=f"{title} {link}",
        author_name=f"{athlete.firstname} {athlete.lastname}".strip(),
        author_link=athlete_link(athlete),
        author_icon=athlete.profile_medium,
        title=title,
        title_link=link,
        text=activity.name,
        fields=[
            SlackField(title="Distance", value=f"{format_number(distance)}mi"),
            SlackField(title="Time", value=format_duration(activity.elapsed_time)),
            SlackField(title="Pace", value=format_pace(activity.moving_time, distance) or NO_PACE),
            SlackField(
                title="Elevation", value=f"{meters_to_feet(activity.total_elevation_gain)}ft"
            ),
        ],
        image_url=activity.primary_photo_url("600"),
        thumb_url=activity.primary_photo_url("100"),
    )
    return RichMessage(attachments=[attachment])


def build_flat_message(
    athlete: Athlete,
    activity: ActivityDetail,
    username: str | None = None,
    icon_url: str | None = None,
) -> FlatMessage:
    distance = meters_to_miles(activity.distance)
    who = f"{athlete.firstname} {athlete.lastname}".strip()
    sentence = (
        f"{who} {activity_verb(activity.type)} {format_number(distance)} miles! "
        f"<{activity_link(activity)}|{activity.name}>"
    )
    emoji = activity_emoji(activity.type)
    text = f"{emoji} {sentence}" if emoji else sentence
    return FlatMessage(username=username, icon_url=icon_url, text=text)


def format_activity(
    athlete: Athlete,
    activity: ActivityDetail,
    style: Literal["rich", "flat"] = "rich",
    username: str | None = None,
    icon_url: str | None = None,
) -> dict:
    """Build the JSON body for a webhook post; keys with None values are dropped."""
    if style == "flat":
        message = build_flat_message(athlete, activity, username=username, icon_url=icon_url)
    else:
        message = build_rich_message(athlete, activity)
    return message.model_dump(exclude_none=True)
