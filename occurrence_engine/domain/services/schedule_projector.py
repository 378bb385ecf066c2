"""
SCHEDULE PROJECTOR
Classify generated occurrences against an injected today

RESPONSIBILITIES:
- Status (OVERDUE / DUE_TODAY / UPCOMING) and signed day offset
- Display labels and urgency tier
- Consumer policies: dashboard bills widget, due list, upcoming list,
  bill/deposit filter, pagination
- Stable chronological ordering

RULES:
❌ No generation, no aggregation
❌ No clock reads
✅ Same input -> same order (ties broken by rule creation order)
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Literal

from occurrence_engine.domain.models import (
    ItemType,
    Occurrence,
    OccurrencePage,
    OccurrenceStatus,
    ProjectionWindow,
    Urgency,
)
from occurrence_engine.utils.dates import date_key

logger = logging.getLogger(__name__)

TypeFilter = Literal["all", "bills", "deposits"]

DEFAULT_DUE_SOON_DAYS = 2
DEFAULT_UPCOMING_WINDOW_DAYS = 7
DEFAULT_UPCOMING_LIMIT = 5
DEFAULT_PAGE_SIZE = 25


def sort_key(occurrence: Occurrence) -> tuple:
    """Chronological, then rule creation order, then rule id and sequence"""
    return (
        occurrence.due_date,
        occurrence.created_order,
        occurrence.rule_id,
        occurrence.sequence_index,
    )


class ScheduleProjector:
    """
    Schedule Projector
    Turns raw occurrences into classified, ordered rows for consumers
    """

    def __init__(self, due_soon_days: int = DEFAULT_DUE_SOON_DAYS):
        self.due_soon_days = due_soon_days

    def project(
        self,
        occurrences: Iterable[Occurrence],
        window: ProjectionWindow,
    ) -> list[Occurrence]:
        """
        Classify and sort occurrences

        Args:
            occurrences: Generated occurrences, any number of rules
            window: Supplies today

        Returns:
            Classified occurrences in stable chronological order
        """
        classified = [self.classify(o, window.today) for o in occurrences]
        return sorted(classified, key=sort_key)

    def classify(self, occurrence: Occurrence, today: date) -> Occurrence:
        """Fill status, days_until_due, due_label and urgency"""
        days = (occurrence.due_date - today).days

        if days < 0:
            status = OccurrenceStatus.OVERDUE
        elif days == 0:
            status = OccurrenceStatus.DUE_TODAY
        else:
            status = OccurrenceStatus.UPCOMING

        return replace(
            occurrence,
            status=status,
            days_until_due=days,
            due_label=self.due_label(occurrence.due_date, days),
            urgency=self.urgency(days),
        )

    @staticmethod
    def due_label(due_date: date, days: int) -> str:
        if days == 0:
            return "Today"
        if days == 1:
            return "Tomorrow"
        if days == -1:
            return "Yesterday"
        if days < -1:
            return f"{-days} days overdue"
        if days <= DEFAULT_UPCOMING_WINDOW_DAYS:
            return f"{days} days"
        return date_key(due_date)

    def urgency(self, days: int) -> Urgency:
        if days <= 0:
            return Urgency.OVERDUE_OR_TODAY
        if days <= self.due_soon_days:
            return Urgency.SOON
        return Urgency.NORMAL

    # ------------------------------------------------------------------
    # Consumer policies (input must already be projected)
    # ------------------------------------------------------------------

    @staticmethod
    def upcoming_bills(
        projected: Iterable[Occurrence],
        limit: int = DEFAULT_UPCOMING_LIMIT,
        window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
    ) -> list[Occurrence]:
        """
        Dashboard widget: non-transfer outflows due within window_days

        Inactive rules never generate, so only transfer/sign/offset are
        checked here.
        """
        bills = [
            o for o in projected
            if not o.is_transfer
            and o.amount < Decimal('0')
            and 0 <= o.days_until_due <= window_days
        ]
        bills.sort(key=sort_key)
        if limit is not None and limit > 0:
            bills = bills[:limit]
        return bills

    @staticmethod
    def due(projected: Iterable[Occurrence]) -> list[Occurrence]:
        """Overdue or due today"""
        return [
            o for o in projected
            if o.status in (OccurrenceStatus.OVERDUE, OccurrenceStatus.DUE_TODAY)
        ]

    @staticmethod
    def upcoming(projected: Iterable[Occurrence], days: int) -> list[Occurrence]:
        """Due between today and today + days (inclusive)"""
        return [o for o in projected if 0 <= o.days_until_due <= days]

    @staticmethod
    def filter_by_type(
        projected: Iterable[Occurrence],
        type_filter: TypeFilter = "all",
    ) -> list[Occurrence]:
        if type_filter == "bills":
            return [o for o in projected if o.item_type == ItemType.BILL]
        if type_filter == "deposits":
            return [o for o in projected if o.item_type == ItemType.DEPOSIT]
        if type_filter == "all":
            return list(projected)
        raise ValueError(f"Unknown type filter: {type_filter!r}")

    @staticmethod
    def paginate(
        projected: list[Occurrence],
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> OccurrencePage:
        """
        Slice a chronological list into pages (1-based)

        Non-positive page/page_size values are clamped.
        """
        if page_size is None or page_size <= 0:
            logger.warning(
                "PAGE_SIZE_CLAMPED | requested=%s | applied=%s",
                page_size, DEFAULT_PAGE_SIZE,
            )
            page_size = DEFAULT_PAGE_SIZE
        if page is None or page < 1:
            page = 1

        start = (page - 1) * page_size
        return OccurrencePage(
            items=tuple(projected[start:start + page_size]),
            page=page,
            page_size=page_size,
            total=len(projected),
        )
