"""
Database-backed alert state storage.

The only durability mechanism of the monitor: the tracked slug, both latch
flags and the daily digest date live in one row and are reloaded on start.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from common import AlertState, PersistenceError
from database import DatabaseManager, AlertStateRepository, AlertStateRecord

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class StateStore:
    """
    Loads and saves the AlertState aggregate.

    load() never raises: missing or unreadable storage yields default state.
    save() overwrites the stored record and stamps updated_at.
    """

    def __init__(self, db_manager: DatabaseManager):
        """
        Initialize state storage.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager

    async def load(self) -> AlertState:
        """Return the persisted state, or defaults if none can be read"""
        try:
            await self.db_manager.init_db()
            async with self.db_manager.session() as session:
                record = await AlertStateRepository(session).get_state()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"⚠️ Could not read alert state, starting from defaults: {e}")
            return AlertState()

        if record is None:
            logger.info("No stored alert state, starting from defaults")
            return AlertState()

        state = self._to_state(record)
        logger.info(
            f"📂 Restored state: slug={state.tracked_slug}, "
            f"warn={state.warn_triggered}, crit={state.crit_triggered}"
        )
        return state

    async def save(self, state: AlertState) -> AlertState:
        """
        Persist the given state, overwriting the previous record.

        Sets state.updated_at to the time of the write.

        Raises:
            PersistenceError: If the write fails
        """
        state.updated_at = datetime.now(timezone.utc)
        try:
            await self.db_manager.init_db()
            async with self.db_manager.session() as session:
                await AlertStateRepository(session).upsert(
                    tracked_slug=state.tracked_slug,
                    warn_triggered=state.warn_triggered,
                    crit_triggered=state.crit_triggered,
                    last_daily_status_date=state.last_daily_status_date,
                    last_probability=state.last_probability,
                    updated_at=state.updated_at,
                )
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Failed to save alert state: {e}") from e

        logger.debug(f"Saved alert state for {state.tracked_slug}")
        return state

    async def reset(self) -> bool:
        """
        Forget the stored state entirely.

        Returns:
            True if a record existed
        """
        try:
            await self.db_manager.init_db()
            async with self.db_manager.session() as session:
                return await AlertStateRepository(session).clear()
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Failed to reset alert state: {e}") from e

    @staticmethod
    def _to_state(record: AlertStateRecord) -> AlertState:
        # NULL columns (older or partial rows) fall back to defaults
        probability = record.last_probability
        return AlertState(
            tracked_slug=record.tracked_slug or None,
            warn_triggered=bool(record.warn_triggered),
            crit_triggered=bool(record.crit_triggered),
            last_daily_status_date=record.last_daily_status_date or None,
            last_probability=float(probability) if probability is not None else None,
            updated_at=_as_utc(record.updated_at),
        )
