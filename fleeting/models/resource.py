from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from fleeting.database import Base


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ExpirableMixin:
    """Columns and expiration rules shared by every shareable resource.

    A resource expires once ``expire_time`` has passed or once ``clicks`` has
    reached a nonzero ``expire_clicks``. Either limit may be unset, in which
    case only the other one applies; with both unset it never expires.
    """

    token = Column(String(64), primary_key=True)
    short_url = Column(Text, nullable=False, default="")
    clicks = Column(Integer, default=0, nullable=False)
    clickers = Column(JSON, default=list, nullable=False)
    create_time = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    expire_time = Column(DateTime(timezone=True), nullable=True, index=True)
    expire_clicks = Column(Integer, nullable=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        if self.expire_time is not None and _as_utc(now) >= _as_utc(self.expire_time):
            return True
        if self.expire_clicks and (self.clicks or 0) >= self.expire_clicks:
            return True
        return False

    def release_payload(self, blob_store) -> None:
        """Delete whatever backs this record outside the record store."""

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "short_url": self.short_url,
            "clicks": self.clicks,
            "clickers": list(self.clickers or []),
            "create_time": self.create_time.isoformat() if self.create_time else None,
            "expire_time": self.expire_time.isoformat() if self.expire_time else None,
            "expire_clicks": self.expire_clicks or 0,
        }


class Link(ExpirableMixin, Base):
    __tablename__ = "links"

    url = Column(Text, nullable=False)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["url"] = self.url
        return data


class Upload(ExpirableMixin, Base):
    __tablename__ = "uploads"

    blob_name = Column(String(512), nullable=False)
    filename = Column(String(255), nullable=False)
    content_type = Column(String(255), nullable=False, default="application/octet-stream")

    def release_payload(self, blob_store) -> None:
        blob_store.delete(self.blob_name)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            blob_name=self.blob_name,
            filename=self.filename,
            content_type=self.content_type,
        )
        return data
