from pydantic import BaseModel, HttpUrl


class ClubConfig(BaseModel):
    """A Strava club whose activity feed is posted to a Slack webhook."""

    id: int | str
    webhook: HttpUrl

    model_config = {"frozen": True}
