"""Base repository with common persistence operations.

Provides a generic repository pattern for SQLAlchemy models with async
support. Rows in this engine are append-only or flag-flipped, so there is
no generic delete.

Usage:
    from chronicle.db.repositories.base import BaseRepository

    class AlertRepository(BaseRepository[ChangeAlert, UUID]):
        pass

    repo = AlertRepository(db_session)
    alert = await repo.get(alert_id)
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.db.models.base import Base
from chronicle.db.retry import db_read_retry

ModelType = TypeVar("ModelType", bound=Base)
PKType = TypeVar("PKType", bound=UUID | int | str)


class BaseRepository(Generic[ModelType, PKType]):
    """Generic repository for SQLAlchemy models.

    Type Parameters:
        ModelType: The SQLAlchemy model class
        PKType: The type of the primary key (UUID, int, or str)

    Attributes:
        model: The model class
        db: The database session
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    def __init_subclass__(cls, **kwargs):
        """Extract model type from generic parameter."""
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            args = getattr(base, "__args__", None)
            if args and len(args) >= 1:
                first_arg = args[0]
                if isinstance(first_arg, type) and issubclass(first_arg, Base):
                    cls.model = first_arg
                    break

    @db_read_retry
    async def get(self, pk: PKType) -> ModelType | None:
        """Get a single record by primary key.

        Returns:
            Model instance or None if not found
        """
        return await self.db.get(self.model, pk)

    async def create(self, obj: ModelType) -> ModelType:
        """Add a new record and flush it.

        The caller keeps control of the transaction.

        Args:
            obj: Model instance to create

        Returns:
            Created model instance
        """
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def update(self, obj: ModelType, updates: dict[str, Any]) -> ModelType:
        """Update a record with given values and flush.

        Args:
            obj: Model instance to update
            updates: Dictionary of field: value to update

        Returns:
            Updated model instance
        """
        for field, value in updates.items():
            if hasattr(obj, field):
                setattr(obj, field, value)

        await self.db.flush()
        return obj

    @db_read_retry
    async def fetch_all(self, stmt: Select) -> list[ModelType]:
        """Execute a select over this model and return all rows."""
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    @db_read_retry
    async def fetch_one(self, stmt: Select) -> ModelType | None:
        """Execute a select expected to match at most one row."""
        result = await self.db.execute(stmt.limit(1))
        return result.scalars().first()

    @db_read_retry
    async def count_where(self, *criteria: Any) -> int:
        """Count records matching the given criteria."""
        pk_col = self._get_pk_column()
        stmt = select(func.count(pk_col)).where(*criteria)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    def _get_pk_column(self):
        """Get the primary key column for this model.

        Raises:
            ValueError: If no primary key found
        """
        mapper = self.model.__mapper__
        pk_cols = mapper.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]
