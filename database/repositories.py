"""
Repository pattern for database access.

Provides async repositories for the state table.
"""

import logging
from typing import TypeVar, Generic, Type, Optional, Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete

from .models import AlertStateRecord

logger = logging.getLogger(__name__)

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Base repository with common operations.

    Provides generic database operations for any model type.
    """

    def __init__(self, session: AsyncSession, model: Type[T]):
        """
        Initialize repository.

        Args:
            session: Async database session
            model: SQLAlchemy model class
        """
        self.session = session
        self.model = model

    async def get_by_id(self, id: int) -> Optional[T]:
        """
        Get record by ID.

        Args:
            id: Record ID

        Returns:
            Model instance or None if not found

        Raises:
            Exception: If the query fails
        """
        try:
            return await self.session.get(self.model, id)
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by ID {id}: {e}")
            raise


class AlertStateRepository(BaseRepository[AlertStateRecord]):
    """Repository for the single alert state row"""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AlertStateRecord)

    async def get_state(self) -> Optional[AlertStateRecord]:
        """Return the state row, or None if nothing was ever saved"""
        return await self.get_by_id(AlertStateRecord.STATE_ID)

    async def upsert(self, **fields: Any) -> AlertStateRecord:
        """
        Overwrite the state row, creating it on first save.

        Args:
            **fields: Column values to write

        Returns:
            The persisted record
        """
        try:
            record = await self.get_state()
            if record is None:
                record = AlertStateRecord(id=AlertStateRecord.STATE_ID)
                self.session.add(record)
            for name, value in fields.items():
                setattr(record, name, value)
            await self.session.flush()
            return record
        except Exception as e:
            logger.error(f"Failed to save alert state: {e}", exc_info=True)
            raise

    async def clear(self) -> bool:
        """
        Delete the state row.

        Returns:
            True if a row was removed
        """
        result = await self.session.execute(
            delete(AlertStateRecord).where(AlertStateRecord.id == AlertStateRecord.STATE_ID)
        )
        await self.session.flush()
        return bool(result.rowcount)
