"""Persisted seen-activity set used to deduplicate club listings.

The set is append-only and keyed by Strava activity id. Recording is an
insert-or-ignore that reports which ids this call actually inserted: when
overlapping poll cycles, or two clubs sharing an activity, race on the same
id, exactly one of them gets it back and is allowed to notify.
"""

import logging
from collections.abc import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clubfeed.models.seen_activity import SeenActivity
from clubfeed.schemas.strava import ActivitySummary

logger = logging.getLogger(__name__)


async def filter_new_activities(
    db: AsyncSession, activities: Sequence[ActivitySummary]
) -> list[ActivitySummary]:
    """Return the activities whose id has never been seen, first occurrence of each id only."""
    unique: dict[int, ActivitySummary] = {}
    for activity in activities:
        unique.setdefault(activity.id, activity)
    if not unique:
        return []

    result = await db.execute(select(SeenActivity.id).where(SeenActivity.id.in_(list(unique))))
    seen_ids = set(result.scalars().all())
    return [activity for activity_id, activity in unique.items() if activity_id not in seen_ids]


async def mark_seen(db: AsyncSession, activity_ids: Iterable[int]) -> set[int]:
    """Record activity ids as seen and return the ids this call inserted.

    Ids already recorded, by an earlier poll or a concurrent one, are left
    untouched and are not returned.
    """
    rows = [{"id": activity_id} for activity_id in dict.fromkeys(activity_ids)]
    if not rows:
        return set()

    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise ValueError(f"Unsupported database dialect for the seen-activity store: {dialect}")

    stmt = (
        insert(SeenActivity)
        .values(rows)
        .on_conflict_do_nothing(index_elements=["id"])
        .returning(SeenActivity.id)
    )
    result = await db.execute(stmt)
    inserted = set(result.scalars().all())
    await db.flush()
    return inserted


async def count_seen(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(SeenActivity))
    return result.scalar_one()
