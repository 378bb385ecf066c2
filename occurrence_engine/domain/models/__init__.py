"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Limits
    DEFAULT_HORIZON_MONTHS,
    DEFAULT_MAX_OCCURRENCES_PER_RULE,
    MAX_HORIZON_MONTHS,

    # Enums
    Frequency,
    ItemType,
    OccurrenceStatus,
    Urgency,

    # Entities
    BillsReport,
    CalendarDay,
    CalendarGrid,
    CursorAdvance,
    Occurrence,
    OccurrencePage,
    OccurrenceSummary,
    ProjectionWindow,
    RecurrenceRule,
    ScheduleOverview,
)

__all__ = [
    # Limits
    "DEFAULT_HORIZON_MONTHS",
    "DEFAULT_MAX_OCCURRENCES_PER_RULE",
    "MAX_HORIZON_MONTHS",

    # Enums
    "Frequency",
    "ItemType",
    "OccurrenceStatus",
    "Urgency",

    # Entities
    "BillsReport",
    "CalendarDay",
    "CalendarGrid",
    "CursorAdvance",
    "Occurrence",
    "OccurrencePage",
    "OccurrenceSummary",
    "ProjectionWindow",
    "RecurrenceRule",
    "ScheduleOverview",
]
