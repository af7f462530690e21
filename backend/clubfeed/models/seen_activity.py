from datetime import datetime

from sqlalchemy import BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from clubfeed.database import Base


class SeenActivity(Base):
    """A Strava activity id that has appeared in a processed club listing.

    Rows are append-only: never updated, never deleted.
    """

    __tablename__ = "seen_activities"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    first_seen_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
