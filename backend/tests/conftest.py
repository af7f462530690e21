"""Test fixtures for ClubFeed tests."""

import json
import os
from datetime import UTC, datetime, timedelta

# Use SQLite for tests by default (no external DB needed).
# Override with TEST_DATABASE_URL env var for PostgreSQL integration tests.
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test.db",
)

CLUB_A = {"id": 1001, "webhook": "https://hooks.slack.test/services/club-a"}
CLUB_B = {"id": 1002, "webhook": "https://hooks.slack.test/services/club-b"}

# Settings are read from the environment; set them before any clubfeed import
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["STRAVA_TOKEN"] = "test-token"
os.environ["STRAVA_CLUBS"] = json.dumps([CLUB_A, CLUB_B])
os.environ["ACTIVITY_CHECK_INTERVAL"] = "60000"

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool  # noqa: E402

from clubfeed.config import STRAVA_API_BASE  # noqa: E402
from clubfeed.database import Base  # noqa: E402
from clubfeed.models import SeenActivity  # noqa: E402
from clubfeed.services import slack_client, strava_client  # noqa: E402

_connect_args = {}
if "sqlite" in TEST_DATABASE_URL:
    _connect_args["check_same_thread"] = False

engine = create_async_engine(
    TEST_DATABASE_URL, echo=False, connect_args=_connect_args, poolclass=NullPool
)
TestSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db() -> AsyncSession:
    """Get a test database session."""
    async with TestSessionLocal() as session:
        yield session


async def stored_ids(db: AsyncSession) -> set[int]:
    """All activity ids currently in the seen-activity table."""
    result = await db.execute(select(SeenActivity.id))
    return set(result.scalars().all())


def make_summary(
    activity_id: int,
    type: str = "Run",
    started: timedelta = timedelta(hours=1),
    commute: bool = False,
    distance: float = 5000.0,
) -> dict:
    """A club-listing entry as Strava returns it, started ``started`` ago."""
    return {
        "id": activity_id,
        "type": type,
        "commute": commute,
        "distance": distance,
        "name": f"Activity {activity_id}",
        "start_date": (datetime.now(UTC) - started).isoformat(),
        "athlete": {
            "id": 77,
            "firstname": "Jane",
            "lastname": "Doe",
            "profile_medium": "https://img.strava.test/jane-medium.jpg",
        },
    }


def make_detail(activity_id: int, type: str = "Run", distance: float = 5000.0) -> dict:
    """A full activity record as returned by GET /activities/{id}."""
    return {
        "id": activity_id,
        "name": f"Activity {activity_id}",
        "type": type,
        "distance": distance,
        "elapsed_time": 1620,
        "moving_time": 1500,
        "total_elevation_gain": 30.5,
    }


class FakeStrava:
    """In-memory Strava API and Slack webhook endpoints behind httpx.MockTransport."""

    def __init__(self):
        self.club_activities: dict[str, list[dict] | None] = {}
        self.activities: dict[int, dict] = {}
        self.failing_clubs: set[str] = set()
        self.failing_webhooks: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.posts: list[tuple[str, dict]] = []

    def add_club_activities(self, club_id: int, *summaries: dict) -> None:
        self.club_activities.setdefault(str(club_id), [])
        self.club_activities[str(club_id)].extend(summaries)
        for summary in summaries:
            self.activities.setdefault(
                summary["id"], make_detail(summary["id"], summary["type"], summary["distance"])
            )

    def strava_handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        parts = request.url.path.strip("/").split("/")  # api/v3/<resource>/<id>[/activities]
        resource, resource_id = parts[2], parts[3]

        if resource == "clubs":
            if resource_id in self.failing_clubs:
                return httpx.Response(500, json={"message": "Internal Server Error"})
            return httpx.Response(200, json=self.club_activities.get(resource_id, []))

        if resource == "activities" and int(resource_id) in self.activities:
            return httpx.Response(200, json=self.activities[int(resource_id)])

        return httpx.Response(404, json={"message": "Record Not Found"})

    def webhook_handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url in self.failing_webhooks:
            return httpx.Response(500, text="invalid_payload")
        self.posts.append((url, json.loads(request.content)))
        return httpx.Response(200, text="ok")

    def detail_requests(self) -> list[int]:
        return [
            int(request.url.path.rstrip("/").split("/")[-1])
            for request in self.requests
            if "/activities/" in request.url.path and "/clubs/" not in request.url.path
        ]


@pytest.fixture
def fake_strava(monkeypatch) -> FakeStrava:
    """Route Strava and webhook HTTP calls to an in-memory fake."""
    fake = FakeStrava()
    monkeypatch.setattr(
        strava_client,
        "get_strava_client",
        lambda: httpx.AsyncClient(
            base_url=STRAVA_API_BASE, transport=httpx.MockTransport(fake.strava_handler)
        ),
    )
    monkeypatch.setattr(
        slack_client,
        "get_webhook_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(fake.webhook_handler)),
    )
    return fake
