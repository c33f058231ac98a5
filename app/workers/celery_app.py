"""Celery app for background result scoring."""

from celery import Celery

from app.config import get_settings

settings = get_settings()

SCORING_QUEUE = "scoring"

celery_app = Celery(
    "tvet_assessment",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.workers.tasks_results"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # A batch run can touch every sheet; one at a time per worker
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_time_limit=30 * 60,
    result_expires=24 * 60 * 60,
    task_routes={"app.workers.tasks_results.*": {"queue": SCORING_QUEUE}},
)
