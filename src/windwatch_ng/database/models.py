"""
Database models for WindWatch-NG.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertRecord(Base):
    """Database model for enriched wind alerts."""

    __tablename__ = "alerts"

    # Primary key
    id = Column(String(255), primary_key=True)  # NWS alert ID

    # Alert details
    event = Column(String(128), nullable=False, index=True)
    headline = Column(Text)
    sent = Column(DateTime(timezone=True), index=True)
    details = Column(JSON, nullable=False)  # EnrichedAlert document

    # Reset on every upsert so consumers pick up new or updated data
    is_processed = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index('idx_alerts_processed_updated', 'is_processed', 'updated_at'),
    )
