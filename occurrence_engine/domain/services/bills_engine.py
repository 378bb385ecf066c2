"""
BILLS ENGINE
Batch orchestration: snapshots -> generate -> project -> aggregate

RESPONSIBILITIES:
- Turn raw rule snapshots into RecurrenceRule objects
- Isolate malformed rules (skip + log, never abort the batch)
- Serve the dashboard widget, the flat list, the calendar grid,
  the summary totals and the rule overview

RULES:
❌ No persistence, no posting, no clock reads
✅ One bad schedule never blanks the whole result
✅ Every stage is a pure transform over immutable inputs
"""

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Union

from occurrence_engine.domain.errors import MalformedRuleError
from occurrence_engine.domain.models import (
    DEFAULT_HORIZON_MONTHS,
    BillsReport,
    CalendarGrid,
    Occurrence,
    OccurrencePage,
    OccurrenceSummary,
    ProjectionWindow,
    RecurrenceRule,
    ScheduleOverview,
)
from occurrence_engine.domain.services.calendar_aggregator import CalendarAggregator
from occurrence_engine.domain.services.occurrence_generator import OccurrenceGenerator
from occurrence_engine.domain.services.schedule_projector import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_UPCOMING_LIMIT,
    DEFAULT_UPCOMING_WINDOW_DAYS,
    ScheduleProjector,
    TypeFilter,
)
from occurrence_engine.domain.services.summary_aggregator import SummaryAggregator
from occurrence_engine.utils.dates import grid_bounds, months_between

logger = logging.getLogger(__name__)

RuleInput = Union[RecurrenceRule, Mapping[str, Any]]


class BillsEngine:
    """
    Bills Engine
    Single entry point used by the API layer
    """

    def __init__(
        self,
        generator: Optional[OccurrenceGenerator] = None,
        projector: Optional[ScheduleProjector] = None,
        calendar: Optional[CalendarAggregator] = None,
        summary: Optional[SummaryAggregator] = None,
    ):
        """Initialize with stage dependencies (defaults are stateless)"""
        self.generator = generator or OccurrenceGenerator()
        self.projector = projector or ScheduleProjector()
        self.calendar = calendar or CalendarAggregator()
        self.summary = summary or SummaryAggregator()

    def load_rules(self, snapshots: Iterable[RuleInput]) -> list[RecurrenceRule]:
        """
        Build rules from snapshots, skipping the malformed ones

        Args:
            snapshots: RecurrenceRule objects or mapping snapshots

        Returns:
            Valid rules, input order preserved
        """
        rules: list[RecurrenceRule] = []
        skipped = 0

        for snapshot in snapshots:
            if isinstance(snapshot, RecurrenceRule):
                rules.append(snapshot)
                continue
            try:
                rules.append(RecurrenceRule.from_snapshot(snapshot))
            except MalformedRuleError as e:
                skipped += 1
                logger.warning(
                    "RULE_SKIPPED | rule_id=%s | reason=%s", e.rule_id, e.reason
                )

        if skipped:
            logger.info("RULES_LOADED | valid=%s | skipped=%s", len(rules), skipped)
        return rules

    def generate_all(
        self,
        rules: Iterable[RuleInput],
        window: ProjectionWindow,
        include_transfers: bool = True,
    ) -> list[Occurrence]:
        """Raw (unclassified) occurrences for every valid rule"""
        occurrences: list[Occurrence] = []
        for rule in self.load_rules(rules):
            if rule.is_transfer and not include_transfers:
                continue
            occurrences.extend(self.generator.generate(rule, window))
        return occurrences

    def occurrences(
        self,
        rules: Iterable[RuleInput],
        window: ProjectionWindow,
        type_filter: TypeFilter = "all",
        include_transfers: bool = True,
    ) -> list[Occurrence]:
        """Flat chronological list of classified occurrences"""
        projected = self.projector.project(
            self.generate_all(rules, window, include_transfers=include_transfers),
            window,
        )
        return self.projector.filter_by_type(projected, type_filter)

    def upcoming_bills(
        self,
        rules: Iterable[RuleInput],
        today: date,
        limit: int = DEFAULT_UPCOMING_LIMIT,
        window_days: int = DEFAULT_UPCOMING_WINDOW_DAYS,
    ) -> list[Occurrence]:
        """
        Dashboard widget: top-N bills due in the next window_days

        Args:
            rules: Rule snapshots
            today: Injected today
            limit: Maximum rows
            window_days: Look-ahead in days (inclusive)
        """
        horizon = max(DEFAULT_HORIZON_MONTHS, window_days // 28 + 1)
        window = ProjectionWindow(today=today, horizon_months=horizon)
        projected = self.occurrences(rules, window, include_transfers=False)
        return self.projector.upcoming_bills(projected, limit=limit, window_days=window_days)

    def calendar_grid(
        self,
        rules: Iterable[RuleInput],
        month: date,
        window: ProjectionWindow,
    ) -> CalendarGrid:
        """
        Month grid of bills and deposits (transfers excluded)

        The horizon is stretched so that the whole displayed grid is
        covered when the month lies beyond the requested horizon.
        """
        window = self._covering_window(window, month)
        projected = self.occurrences(rules, window, include_transfers=False)
        return self.calendar.build_grid(month, projected, today=window.today)

    def month_summary(
        self,
        rules: Iterable[RuleInput],
        month: date,
        window: ProjectionWindow,
    ) -> OccurrenceSummary:
        """Overdue and this-month totals for the displayed month"""
        window = self._covering_window(window, month)
        projected = self.occurrences(rules, window, include_transfers=False)
        return self.summary.summarize(projected, month)

    def bills_page(
        self,
        rules: Iterable[RuleInput],
        window: ProjectionWindow,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        type_filter: TypeFilter = "all",
    ) -> OccurrencePage:
        """Paginated chronological list"""
        projected = self.occurrences(
            rules, window, type_filter=type_filter, include_transfers=False
        )
        return self.projector.paginate(projected, page=page, page_size=page_size)

    def report(
        self,
        rules: Iterable[RuleInput],
        month: date,
        window: ProjectionWindow,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> BillsReport:
        """
        Full bills report: grid + one page of the list + totals

        Rules are projected once and shared by all three views.
        """
        window = self._covering_window(window, month)
        projected = self.occurrences(rules, window, include_transfers=False)
        return BillsReport(
            grid=self.calendar.build_grid(month, projected, today=window.today),
            page=self.projector.paginate(projected, page=page, page_size=page_size),
            summary=self.summary.summarize(projected, month),
        )

    def overview(self, rules: Iterable[RuleInput], today: date) -> ScheduleOverview:
        """Rule-level counts and monthly-normalized totals"""
        return self.summary.summarize_rules(self.load_rules(rules), today)

    @staticmethod
    def _covering_window(window: ProjectionWindow, month: date) -> ProjectionWindow:
        _, grid_end = grid_bounds(month)
        if grid_end <= window.horizon_end:
            return window

        needed = months_between(window.today, grid_end) + 1
        return ProjectionWindow(
            today=window.today,
            horizon_months=max(window.horizon_months, needed),
            max_occurrences_per_rule=window.max_occurrences_per_rule,
        )
