"""User change tracker repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import select

from chronicle.db.models.tracker import UserChangeTracker
from chronicle.db.repositories.base import BaseRepository


class TrackerRepository(BaseRepository[UserChangeTracker, UUID]):
    """Repository for UserChangeTracker model operations."""

    model = UserChangeTracker

    async def get_for_user(self, org_id: str, user_id: str) -> UserChangeTracker | None:
        """Get the tracker singleton for a user in an org."""
        stmt = select(UserChangeTracker).where(
            UserChangeTracker.org_id == org_id,
            UserChangeTracker.user_id == user_id,
        )
        return await self.fetch_one(stmt)

    async def upsert(self, org_id: str, user_id: str, values: dict[str, Any]) -> UserChangeTracker:
        """Create the tracker or update the given fields on it."""
        tracker = await self.get_for_user(org_id, user_id)
        if tracker is not None:
            return await self.update(tracker, values)
        return await self.create(UserChangeTracker(org_id=org_id, user_id=user_id, **values))
