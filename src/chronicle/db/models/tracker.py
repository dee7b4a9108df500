"""Per-user "what's new" tracking model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, PortableUUID, TimestampMixin


class UserChangeTracker(Base, TimestampMixin):
    """Singleton per (org_id, user_id) recording visit and seen-marks."""

    __tablename__ = "user_change_trackers"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    org_id: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    last_visit: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_seen_changes: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (Index("idx_user_change_tracker_user", "org_id", "user_id", unique=True),)

    def __repr__(self) -> str:
        return f"<UserChangeTracker(org_id={self.org_id}, user_id={self.user_id})>"
