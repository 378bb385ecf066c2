"""
Scheduled Transaction Repository
Read-only access to recurring schedule snapshots
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Any, Optional

from occurrence_engine.core.logging import get_logger
from occurrence_engine.infrastructure.db.models import ScheduledTransactionModel

logger = get_logger(__name__)


class ScheduledTransactionRepository:
    """Repository for scheduled transaction snapshots"""

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def list_snapshots(self, active_only: bool = False) -> list[dict[str, Any]]:
        """
        Fetch schedule snapshots in creation order

        Rows are returned as plain mappings; turning them into rules (and
        skipping malformed ones) is the engine's job.

        Args:
            active_only: Only rows with is_active set

        Returns:
            List of snapshot dicts with a created_order tie-break key
        """
        query = select(ScheduledTransactionModel).order_by(
            ScheduledTransactionModel.created_at,
            ScheduledTransactionModel.id,
        )
        if active_only:
            query = query.where(ScheduledTransactionModel.is_active.is_(True))

        result = await self.session.execute(query)
        models = result.scalars().all()

        logger.debug("SCHEDULE_SNAPSHOTS_LOADED | count=%s", len(models))
        return [self._to_snapshot(model, order) for order, model in enumerate(models)]

    async def get_snapshot(self, rule_id: str) -> Optional[dict[str, Any]]:
        """
        Fetch a single snapshot

        Returns:
            Snapshot dict or None
        """
        result = await self.session.execute(
            select(ScheduledTransactionModel).where(ScheduledTransactionModel.id == rule_id)
        )
        model = result.scalar_one_or_none()

        return self._to_snapshot(model, 0) if model else None

    @staticmethod
    def _to_snapshot(model: ScheduledTransactionModel, order: int) -> dict[str, Any]:
        """Convert database model to an engine snapshot"""
        return {
            "id": model.id,
            "display_name": model.name,
            "amount": model.amount,
            "currency_code": model.currency_code,
            "frequency": model.frequency,
            "cursor_date": model.next_due_date,
            "end_date": model.end_date,
            "occurrences_remaining": model.occurrences_remaining,
            "is_active": model.is_active,
            "is_transfer": model.is_transfer,
            "auto_post": model.auto_post,
            "overrides": {
                o.override_date: o.amount
                for o in model.overrides
                if o.amount is not None
            },
            "created_order": order,
        }
