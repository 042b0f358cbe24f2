from celery import Celery
import os

# Celery configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/1")
SWEEP_INTERVAL_SECONDS = float(os.getenv("SWEEP_INTERVAL_SECONDS", "600"))

celery_app = Celery(
    "fleeting",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["fleeting.cleanup"],
)

celery_app.conf.beat_schedule = {
    # Reclaim links and uploads past their time or click limit
    "sweep-expired-resources": {
        "task": "fleeting.cleanup.cleanup_expired",
        "schedule": SWEEP_INTERVAL_SECONDS,
    },
}
