"""Strava API records consumed by the poller.

Only the fields ClubFeed reads are declared; everything else in the API
response is ignored.
"""

from datetime import datetime

from pydantic import BaseModel

BIKE_RIDE_TYPES = frozenset({"Ride", "EBikeRide"})


class Athlete(BaseModel):
    id: int | None = None
    firstname: str = ""
    lastname: str = ""
    profile_medium: str | None = None

    model_config = {"extra": "ignore"}


class ActivitySummary(BaseModel):
    """An entry from GET /clubs/{id}/activities."""

    id: int
    athlete: Athlete = Athlete()
    type: str = ""
    start_date: datetime | None = None
    commute: bool = False
    distance: float = 0.0
    name: str | None = None

    model_config = {"extra": "ignore"}

    @property
    def is_bike_ride(self) -> bool:
        return self.type in BIKE_RIDE_TYPES


class PrimaryPhoto(BaseModel):
    urls: dict[str, str] = {}

    model_config = {"extra": "ignore"}


class ActivityPhotos(BaseModel):
    primary: PrimaryPhoto | None = None
    count: int = 0

    model_config = {"extra": "ignore"}


class ActivityDetail(BaseModel):
    """The full record from GET /activities/{id}."""

    id: int
    name: str = ""
    type: str = ""
    distance: float = 0.0
    elapsed_time: int = 0
    moving_time: int = 0
    total_elevation_gain: float = 0.0
    photos: ActivityPhotos | None = None

    model_config = {"extra": "ignore"}

    def primary_photo_url(self, size: str) -> str | None:
        if not self.photos or not self.photos.primary:
            return None
        return self.photos.primary.urls.get(size)
