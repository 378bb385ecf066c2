"""
Database Models (SQLAlchemy ORM)
Scheduled transaction snapshot tables - READ ONLY for this service

Rows are written by the schedule-management side. `frequency` is stored as
plain text so that an unknown value reaches the engine and is skipped there
instead of failing the whole query.
"""

from sqlalchemy import (
    Column, Integer, String, Numeric, Date, DateTime,
    Boolean, ForeignKey, Index
)
from sqlalchemy.orm import relationship

from occurrence_engine.config import settings
from occurrence_engine.infrastructure.db.database import Base
from occurrence_engine.utils.time import now_naive


def _now():
    return now_naive(settings.TIMEZONE)


class ScheduledTransactionModel(Base):
    """Recurring schedule definition (rent, salary, subscriptions)"""
    __tablename__ = "scheduled_transactions"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, default="")
    amount = Column(Numeric(14, 2), nullable=False)
    currency_code = Column(String(3), nullable=False, default="USD")

    frequency = Column(String(16), nullable=False)
    next_due_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    occurrences_remaining = Column(Integer, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    is_transfer = Column(Boolean, nullable=False, default=False)
    auto_post = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=_now)

    # Relationships
    overrides = relationship(
        "ScheduledTransactionOverrideModel",
        back_populates="scheduled_transaction",
        lazy="selectin",
    )

    # Indexes
    __table_args__ = (
        Index('ix_scheduled_transactions_active_due', 'is_active', 'next_due_date'),
    )


class ScheduledTransactionOverrideModel(Base):
    """Per-occurrence amount override"""
    __tablename__ = "scheduled_transaction_overrides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scheduled_transaction_id = Column(
        String(36), ForeignKey("scheduled_transactions.id"), nullable=False, index=True
    )
    override_date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=True)

    # Relationships
    scheduled_transaction = relationship("ScheduledTransactionModel", back_populates="overrides")

    __table_args__ = (
        Index('ix_override_lookup', 'scheduled_transaction_id', 'override_date', unique=True),
    )
