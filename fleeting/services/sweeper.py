import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import ObjectDeletedError

from fleeting.errors import NotFound
from fleeting.models.resource import Link, Upload
from fleeting.services.blob_store import BlobStore
from fleeting.services.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    links_deleted: int = 0
    uploads_deleted: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "links_deleted": self.links_deleted,
            "uploads_deleted": self.uploads_deleted,
            "errors": list(self.errors),
        }


class Sweeper:
    """Reclaims every expired link and upload.

    Each record is handled on its own: a failure is logged and recorded and
    the sweep moves on. An upload's payload is removed before its record, so
    a payload that fails to delete keeps its record for the next sweep.
    """

    def __init__(self, db_session: Session, blob_store: BlobStore):
        self.links = RecordStore(db_session, Link)
        self.uploads = RecordStore(db_session, Upload)
        self.blob_store = blob_store

    def sweep(self, now: datetime | None = None) -> SweepResult:
        if now is None:
            now = datetime.now(timezone.utc)
        result = SweepResult()
        result.links_deleted = self._sweep_store(self.links, now, result.errors)
        result.uploads_deleted = self._sweep_store(self.uploads, now, result.errors)
        logger.info(
            "Sweep finished - links: %d, uploads: %d, errors: %d",
            result.links_deleted,
            result.uploads_deleted,
            len(result.errors),
        )
        return result

    def _sweep_store(self, store: RecordStore, now: datetime, errors: list[str]) -> int:
        # decide before the first commit expires the listed instances
        expired = [record.token for record in store.list_all() if record.is_expired(now)]
        deleted = 0
        for token in expired:
            try:
                store.reclaim(token, self.blob_store)
            except (NotFound, ObjectDeletedError):
                # already reclaimed by a concurrent sweep or delete
                continue
            except Exception as e:
                store.db_session.rollback()
                error_msg = f"Failed to reclaim {store.kind} {token}: {e}"
                errors.append(error_msg)
                logger.error(error_msg, exc_info=True)
                continue
            deleted += 1
        return deleted
