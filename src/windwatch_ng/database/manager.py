"""
Database manager for WindWatch-NG.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError

from .models import Base, AlertRecord
from ..core.models import EnrichedAlert
from ..core.config import AppConfig

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Database operation error."""

    pass


class DatabaseManager:
    """Manages database operations for WindWatch-NG."""

    def __init__(self, config: AppConfig):
        """
        Initialize database manager.

        Args:
            config: Application configuration
        """
        self.config = config
        self.engine = None
        self.async_session_factory = None
        self._is_initialized = False

    async def initialize(self, database_url: Optional[str] = None) -> None:
        """
        Initialize database connection and create tables.

        Args:
            database_url: Database URL (defaults to the configured URL, then
                SQLite in data_dir)
        """
        if self._is_initialized:
            return

        database_url = database_url or self.config.database.url
        try:
            if not database_url:
                self.config.data_dir.mkdir(parents=True, exist_ok=True)
                db_path = self.config.data_dir / "windwatch_ng.db"
                database_url = f"sqlite+aiosqlite:///{db_path}"

            self.engine = create_async_engine(
                database_url,
                echo=False,
                pool_pre_ping=True,
                pool_recycle=3600,
            )

            self.async_session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

            self._is_initialized = True
            logger.info(f"Database initialized: {self.engine.url.render_as_string(hide_password=True)}")

        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize database: {e}")
            raise DatabaseError(f"Database initialization failed: {e}") from e

    async def close(self) -> None:
        """Close database connections."""
        if self.engine:
            await self.engine.dispose()
            self._is_initialized = False
            logger.info("Database connections closed")

    def get_session(self) -> AsyncSession:
        """Get a database session."""
        if not self._is_initialized:
            raise DatabaseError("Database not initialized")
        return self.async_session_factory()

    def _apply(self, record: AlertRecord, alert: EnrichedAlert) -> None:
        record.headline = alert.headline
        record.sent = alert.sent
        record.details = alert.to_details()
        record.is_processed = False
        record.updated_at = datetime.now(timezone.utc)

    async def upsert_alert(self, alert: EnrichedAlert) -> None:
        """
        Insert an alert, or update it if its ID is already stored.

        The processed flag is cleared either way.
        """
        await self.upsert_alerts([alert])

    async def upsert_alerts(self, alerts: Iterable[EnrichedAlert]) -> int:
        """
        Upsert several alerts in one transaction.

        Returns:
            Number of alerts written
        """
        count = 0
        try:
            async with self.get_session() as session:
                for alert in alerts:
                    existing = await session.get(AlertRecord, alert.id)
                    if existing:
                        self._apply(existing, alert)
                    else:
                        record = AlertRecord(id=alert.id, event=alert.event)
                        self._apply(record, alert)
                        session.add(record)
                    count += 1

                await session.commit()
                logger.debug(f"Upserted {count} alerts")
                return count

        except SQLAlchemyError as e:
            logger.error(f"Failed to store alerts: {e}")
            raise DatabaseError(f"Failed to store alerts: {e}") from e

    async def get_alert(self, alert_id: str) -> Optional[AlertRecord]:
        """
        Get an alert by ID.

        Args:
            alert_id: Alert ID

        Returns:
            Alert record or None if not found
        """
        try:
            async with self.get_session() as session:
                return await session.get(AlertRecord, alert_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to get alert {alert_id}: {e}")
            raise DatabaseError(f"Failed to get alert: {e}") from e

    async def get_unprocessed_alerts(self, limit: int = 100) -> List[AlertRecord]:
        """Alerts waiting for a downstream consumer, oldest update first."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    select(AlertRecord)
                    .where(AlertRecord.is_processed.is_(False))
                    .order_by(AlertRecord.updated_at)
                    .limit(limit)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Failed to get unprocessed alerts: {e}")
            raise DatabaseError(f"Failed to get unprocessed alerts: {e}") from e

    async def mark_processed(self, alert_id: str) -> bool:
        """
        Flag an alert as handled by a downstream consumer.

        Returns:
            False if no alert with that ID exists
        """
        try:
            async with self.get_session() as session:
                record = await session.get(AlertRecord, alert_id)
                if record is None:
                    return False
                record.is_processed = True
                await session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error(f"Failed to mark alert {alert_id} processed: {e}")
            raise DatabaseError(f"Failed to mark alert processed: {e}") from e
