import logging

from fleeting.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class AccessAccountant:
    """Counts accesses to shared resources.

    The read-modify-write of ``clicks`` is not atomic; two concurrent
    accesses to the same token may be counted once.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def record_access(self, token: str, accessor: str = ""):
        """Count one access and report whether the record is now expired.

        Never deletes: reclaiming is left to the caller or the sweeper.
        Raises NotFound when the token is unknown.
        """
        record = self.store.get(token)
        record.clicks = (record.clicks or 0) + 1
        # reassign so the JSON column is flagged dirty
        record.clickers = list(record.clickers or []) + [accessor]
        self.store.save(record)

        expired = record.is_expired()
        logger.debug(
            "Access to %s %s: clicks=%d expired=%s", self.store.kind, token, record.clicks, expired
        )
        return record, expired
