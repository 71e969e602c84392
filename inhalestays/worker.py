"""Celery worker configuration.

Runs the periodic booking maintenance:
- Hold expiry sweep (every minute)
- Availability projection refresh (every 10 minutes)
- Booking expiry reminders (daily at 09:00)
"""

from celery import Celery
from celery.schedules import crontab

from inhalestays.config import settings
from inhalestays.core.logging import configure_logging

configure_logging()

# Create Celery app
celery_app = Celery(
    "inhalestays_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["inhalestays.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Asia/Kolkata",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=120,
    task_soft_time_limit=90,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=2,

    # Results expire after 1 hour
    result_expires=3600,

    task_default_retry_delay=60,
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        "expire-stale-holds": {
            "task": "inhalestays.tasks.expire_stale_holds",
            "schedule": crontab(minute="*"),
        },
        "refresh-availability-flags": {
            "task": "inhalestays.tasks.refresh_availability_flags",
            "schedule": crontab(minute="*/10"),
        },
        "send-expiry-reminders": {
            "task": "inhalestays.tasks.send_expiry_reminders",
            "schedule": crontab(hour=9, minute=0),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
