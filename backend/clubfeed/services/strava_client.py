"""Strava REST API helpers for reading club feeds and activity details.

Relevant Strava API docs:
  - List club activities: GET /clubs/{id}/activities
  - Get activity: GET /activities/{id}
"""

import logging

import httpx
from pydantic import ValidationError

from clubfeed.config import CLUB_ACTIVITIES_PER_PAGE, STRAVA_API_BASE
from clubfeed.core.errors import UpstreamFetchError
from clubfeed.schemas.strava import ActivityDetail, ActivitySummary

logger = logging.getLogger(__name__)


def get_strava_client() -> httpx.AsyncClient:
    """Create an httpx client for Strava API requests (transport default timeouts)."""
    return httpx.AsyncClient(base_url=STRAVA_API_BASE)


def _auth_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


async def _get_json(path: str, access_token: str, params: dict | None = None):
    try:
        async with get_strava_client() as client:
            resp = await client.get(path, params=params, headers=_auth_headers(access_token))
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"GET {path} failed: {e}") from e

    if not resp.is_success:
        raise UpstreamFetchError(
            f"GET {path} returned HTTP {resp.status_code}: {resp.text[:300]}",
            status_code=resp.status_code,
        )
    if not resp.content.strip():
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamFetchError(f"GET {path} returned invalid JSON") from e


async def list_club_activities(
    access_token: str, club_id: int | str, per_page: int = CLUB_ACTIVITIES_PER_PAGE
) -> list[ActivitySummary]:
    """Fetch the most recent activities posted by members of a club."""
    data = await _get_json(
        f"/clubs/{club_id}/activities", access_token, params={"per_page": per_page}
    )
    if not data:
        return []
    if not isinstance(data, list):
        raise UpstreamFetchError(f"Unexpected club activities payload for club {club_id}")
    try:
        return [ActivitySummary.model_validate(item) for item in data]
    except ValidationError as e:
        raise UpstreamFetchError(f"Malformed club activity for club {club_id}: {e}") from e


async def get_activity(access_token: str, activity_id: int) -> ActivityDetail:
    """Fetch the full record for a single activity."""
    data = await _get_json(f"/activities/{activity_id}", access_token)
    try:
        return ActivityDetail.model_validate(data)
    except ValidationError as e:
        raise UpstreamFetchError(f"Malformed activity {activity_id}: {e}") from e
