"""
CALENDAR AGGREGATOR
Bucket occurrences into a whole-week month grid

RESPONSIBILITIES:
- Build the Sunday..Saturday range around a month
- Flag in-month days and today
- Attach every occurrence to its day

RULES:
❌ No truncation ("+N more" is a display concern)
❌ No timestamp comparisons (days are matched by ISO date key)
✅ Grid is always a whole number of weeks
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional

from occurrence_engine.domain.models import CalendarDay, CalendarGrid, Occurrence
from occurrence_engine.utils.dates import date_key, first_of_month, grid_bounds, same_month


class CalendarAggregator:
    """
    Calendar Aggregator
    Month grid for calendar navigation
    """

    def build_grid(
        self,
        month: date,
        occurrences: Iterable[Occurrence],
        today: Optional[date] = None,
    ) -> CalendarGrid:
        """
        Build the grid for the month containing `month`

        Args:
            month: Any date inside the displayed month
            occurrences: Occurrences to place (order within a day is kept)
            today: Injected today, used only for the is_today flag

        Returns:
            CalendarGrid covering whole weeks
        """
        start, end = grid_bounds(month)

        by_day: dict[str, list[Occurrence]] = defaultdict(list)
        for occurrence in occurrences:
            by_day[date_key(occurrence.due_date)].append(occurrence)

        days = []
        current = start
        while current <= end:
            key = date_key(current)
            days.append(
                CalendarDay(
                    date=current,
                    in_current_month=same_month(current, month),
                    is_today=today is not None and key == date_key(today),
                    occurrences=tuple(by_day.get(key, ())),
                )
            )
            current += timedelta(days=1)

        return CalendarGrid(month=first_of_month(month), days=tuple(days))
