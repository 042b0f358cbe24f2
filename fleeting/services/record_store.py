import logging
import os
from typing import Callable, Generic, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fleeting.errors import Conflict, NotFound
from fleeting.services import tokens

logger = logging.getLogger(__name__)

TOKEN_LENGTH = int(os.getenv("TOKEN_LENGTH", "6"))
TOKEN_RETRIES = int(os.getenv("TOKEN_RETRIES", "5"))

R = TypeVar("R")


class RecordStore(Generic[R]):
    """Token-keyed access to one resource table (links or uploads)."""

    def __init__(self, db_session: Session, model: type[R]):
        self.db_session = db_session
        self.model = model

    @property
    def kind(self) -> str:
        return self.model.__tablename__

    def create(self, record: R) -> R:
        if self.db_session.get(self.model, record.token) is not None:
            raise Conflict(f"{self.kind} token {record.token} already exists")
        self.db_session.add(record)
        try:
            self.db_session.commit()
        except IntegrityError:
            self.db_session.rollback()
            raise Conflict(f"{self.kind} token {record.token} already exists")
        self.db_session.refresh(record)
        return record

    def create_with_fresh_token(
        self,
        build: Callable[[str], R],
        *,
        length: int = TOKEN_LENGTH,
        retries: int = TOKEN_RETRIES,
    ) -> R:
        for _ in range(retries):  # retry on rare token collisions
            token = tokens.generate(length)
            try:
                return self.create(build(token))
            except Conflict:
                logger.info("Token collision on %s, regenerating", self.kind)
        raise Conflict(f"Failed to generate unique {self.kind} token")

    def get(self, token: str) -> R:
        record = self.db_session.get(self.model, token)
        if record is None:
            raise NotFound(f"No {self.kind} with token {token}")
        return record

    def save(self, record: R) -> R:
        self.db_session.add(record)
        self.db_session.commit()
        return record

    def delete(self, token: str) -> None:
        record = self.get(token)
        self.db_session.delete(record)
        self.db_session.commit()

    def reclaim(self, token: str, blob_store) -> None:
        """Delete a record together with its payload, payload first.

        A payload that is already gone does not block the record; any other
        payload failure propagates and leaves the record in place.
        """
        record = self.get(token)
        try:
            record.release_payload(blob_store)
        except NotFound:
            logger.warning("Payload for %s %s was already gone", self.kind, token)
        self.delete(token)
        logger.info("Reclaimed %s %s", self.kind, token)

    def list_all(self) -> list[R]:
        return self.db_session.query(self.model).order_by(self.model.create_time).all()
