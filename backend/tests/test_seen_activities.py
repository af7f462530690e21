"""Tests for the persisted seen-activity set."""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from clubfeed.schemas.strava import ActivitySummary
from clubfeed.services.seen_activities import count_seen, filter_new_activities, mark_seen
from conftest import TestSessionLocal, stored_ids


def _summaries(*ids: int) -> list[ActivitySummary]:
    return [ActivitySummary(id=activity_id) for activity_id in ids]


@pytest.mark.asyncio
async def test_everything_is_new_on_empty_store(db: AsyncSession):
    new = await filter_new_activities(db, _summaries(1, 2, 3))
    assert [a.id for a in new] == [1, 2, 3]


@pytest.mark.asyncio
async def test_filter_does_not_record(db: AsyncSession):
    await filter_new_activities(db, _summaries(1, 2))
    assert await count_seen(db) == 0


@pytest.mark.asyncio
async def test_seen_ids_are_filtered_out(db: AsyncSession):
    await mark_seen(db, [2])
    await db.commit()

    new = await filter_new_activities(db, _summaries(1, 2, 3))
    assert [a.id for a in new] == [1, 3]


@pytest.mark.asyncio
async def test_duplicate_ids_in_one_listing_collapse(db: AsyncSession):
    new = await filter_new_activities(db, _summaries(5, 5, 6))
    assert [a.id for a in new] == [5, 6]


@pytest.mark.asyncio
async def test_mark_seen_returns_only_inserted_ids(db: AsyncSession):
    assert await mark_seen(db, [10, 11]) == {10, 11}
    await db.commit()

    assert await mark_seen(db, [11, 12, 12]) == {12}
    await db.commit()

    assert await count_seen(db) == 3
    assert await stored_ids(db) == {10, 11, 12}


@pytest.mark.asyncio
async def test_already_seen_ids_are_not_returned(db: AsyncSession):
    await mark_seen(db, [20])
    await db.commit()

    assert await mark_seen(db, [20]) == set()


@pytest.mark.asyncio
async def test_concurrent_marks_insert_each_id_once():
    async def _mark(ids: list[int]) -> set[int]:
        async with TestSessionLocal() as session:
            inserted = await mark_seen(session, ids)
            await session.commit()
            return inserted

    first, second = await asyncio.gather(_mark([30, 31]), _mark([31, 32]))

    assert first | second == {30, 31, 32}
    assert first & second == set()


@pytest.mark.asyncio
async def test_large_strava_ids(db: AsyncSession):
    big_id = 12_345_678_901
    assert await mark_seen(db, [big_id]) == {big_id}
    await db.commit()
    assert big_id in await stored_ids(db)


@pytest.mark.asyncio
async def test_mark_seen_with_nothing(db: AsyncSession):
    assert await mark_seen(db, []) == set()
    assert await count_seen(db) == 0
