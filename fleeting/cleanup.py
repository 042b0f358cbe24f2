from .database import SessionLocal
from .services.blob_store import get_blob_store
from .services.sweeper import Sweeper
from . import celery_app


@celery_app.task(name="fleeting.cleanup.cleanup_expired")
def cleanup_expired():
    # Runs to completion once started; reclaims already applied stay applied
    db = SessionLocal()
    try:
        result = Sweeper(db, get_blob_store()).sweep()
    finally:
        db.close()
    return result.as_dict()
