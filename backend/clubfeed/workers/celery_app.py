from celery import Celery

from clubfeed.config import get_settings

settings = get_settings()

celery_app = Celery(
    "clubfeed",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "clubfeed.workers.polling_tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    worker_hijack_root_logger=False,
    beat_schedule={
        "poll-club-activities": {
            "task": "clubfeed.workers.polling_tasks.dispatch_club_polls",
            "schedule": settings.activity_check_interval_seconds,
        },
    },
)
