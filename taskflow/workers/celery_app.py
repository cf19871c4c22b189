"""
Celery application for task event delivery.

Events are fire-and-forget, so no result backend is configured. Every event
task lands on the dedicated "events" queue.
"""

from celery import Celery

from taskflow.core.config import settings

celery_app = Celery(
    "taskflow",
    broker=settings.CELERY_BROKER_URL,
    include=["taskflow.workers.event_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    task_ignore_result=True,
    enable_utc=True,
    # An event is only acknowledged once its activity row is written.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_default_queue="events",
    task_routes={"taskflow.workers.event_tasks.*": {"queue": "events"}},
)
