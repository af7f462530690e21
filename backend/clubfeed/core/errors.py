"""Exception types for the polling / notification pipeline.

None of these reach an end user: fetch and post failures are logged and the
affected club or activity is skipped, configuration failures stop the process
before anything is scheduled.
"""


class ClubFeedError(Exception):
    """Base class for ClubFeed errors."""


class ConfigurationError(ClubFeedError):
    """Missing or invalid configuration at startup."""


class UpstreamFetchError(ClubFeedError):
    """A Strava listing or detail request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotificationPostError(ClubFeedError):
    """Posting a message to a club webhook failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
