import asyncio
import logging
import sys

from clubfeed.config import Settings, get_settings
from clubfeed.core.errors import ConfigurationError
from clubfeed.logging_config import setup_logging

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    """Initialize Sentry if a DSN is configured."""
    if not settings.sentry_dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.celery import CeleryIntegration

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.app_env,
            integrations=[CeleryIntegration()],
            traces_sample_rate=0.1 if settings.is_production else 1.0,
            send_default_pii=False,
        )
        logger.info("Sentry initialized")
    except ImportError:
        logger.warning("sentry-sdk not installed, skipping Sentry initialization")


async def seed_seen_activities() -> list[dict]:
    """Create the seen-activity table and record every currently listed activity."""
    from clubfeed.database import get_task_session, init_db
    from clubfeed.services.seen_activities import count_seen
    from clubfeed.workers.polling_tasks import check_for_new_activities

    await init_db()
    results = await check_for_new_activities(initial=True)

    async with get_task_session() as db:
        total = await count_seen(db)
    logger.info(f"Seen-activity store holds {total} activities after seeding")
    return results


def main() -> None:
    # Configure logging first, with defaults until settings are known
    setup_logging()

    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    setup_logging(app_env=settings.app_env, log_level=settings.log_level)
    init_sentry(settings)

    logger.info(
        f"{settings.app_name} starting (env={settings.app_env}, "
        f"clubs={len(settings.strava_clubs)}, interval={settings.activity_check_interval}ms)"
    )
    asyncio.run(seed_seen_activities())

    from clubfeed.workers.celery_app import celery_app

    celery_app.worker_main(["worker", "--beat", f"--loglevel={settings.log_level}"])


if __name__ == "__main__":
    main()
