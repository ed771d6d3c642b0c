"""
Celery application for Campus Cart background maintenance.
Uses Redis as message broker.
"""
import os
from dotenv import load_dotenv
from celery import Celery
from celery.schedules import crontab

load_dotenv()

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

celery_app = Celery(
    "campus_cart",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["app.tasks.maintenance_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,

    task_acks_late=True,  # Acknowledge after task completes
    worker_prefetch_multiplier=1,
    result_expires=86400,  # 24 hours

    task_soft_time_limit=300,
    task_time_limit=600,
)

celery_app.conf.beat_schedule = {
    # Daily listing cleanup at 4 AM UTC
    "expire-stale-listings": {
        "task": "app.tasks.maintenance_tasks.expire_stale_listings",
        "schedule": crontab(hour=4, minute=0),
    },
}

celery_app.conf.task_routes = {
    "app.tasks.maintenance_tasks.*": {"queue": "maintenance"},
}
