"""
SUMMARY AGGREGATOR
Reduce occurrences and rules into headline totals

RESPONSIBILITIES:
- Overdue count/total
- This-month count/total for the displayed month
- Rule overview: bill/deposit counts and monthly-normalized amounts

RULES:
❌ No float arithmetic
✅ Totals are sums of abs(amount) in Decimal
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from occurrence_engine.domain.models import (
    Frequency,
    Occurrence,
    OccurrenceStatus,
    OccurrenceSummary,
    RecurrenceRule,
    ScheduleOverview,
)
from occurrence_engine.utils.dates import same_month

CENT = Decimal('0.01')

# Multipliers that turn one occurrence amount into a per-month figure
MONTHLY_FACTORS = {
    Frequency.DAILY: Decimal('30'),
    Frequency.WEEKLY: Decimal('4.33'),
    Frequency.BIWEEKLY: Decimal('2.17'),
    Frequency.MONTHLY: Decimal('1'),
    Frequency.QUARTERLY: Decimal('1') / Decimal('3'),
    Frequency.YEARLY: Decimal('1') / Decimal('12'),
    Frequency.ONCE: Decimal('0'),
}


class SummaryAggregator:
    """
    Summary Aggregator
    Headline numbers for the bills report
    """

    def summarize(
        self,
        projected: Iterable[Occurrence],
        displayed_month: date,
    ) -> OccurrenceSummary:
        """
        Overdue and this-month totals

        Args:
            projected: Classified occurrences
            displayed_month: Any date inside the month being viewed

        Returns:
            OccurrenceSummary
        """
        overdue_count = 0
        overdue_total = Decimal('0')
        month_count = 0
        month_total = Decimal('0')

        for occurrence in projected:
            if occurrence.status == OccurrenceStatus.OVERDUE:
                overdue_count += 1
                overdue_total += abs(occurrence.amount)
            elif same_month(occurrence.due_date, displayed_month):
                month_count += 1
                month_total += abs(occurrence.amount)

        return OccurrenceSummary(
            overdue_count=overdue_count,
            overdue_total=overdue_total,
            this_month_count=month_count,
            this_month_total=month_total,
        )

    def summarize_rules(
        self,
        rules: Iterable[RecurrenceRule],
        today: date,
    ) -> ScheduleOverview:
        """
        Rule-level overview (active, non-transfer rules only)

        Args:
            rules: Rule snapshots
            today: Injected today, used for due_count

        Returns:
            ScheduleOverview with monthly amounts rounded to cents
        """
        total_bills = 0
        total_deposits = 0
        monthly_bills = Decimal('0')
        monthly_deposits = Decimal('0')
        due_count = 0

        for rule in rules:
            if not rule.is_active:
                continue

            if rule.cursor_date is not None and rule.cursor_date <= today:
                due_count += 1

            if rule.is_bill:
                total_bills += 1
                monthly_bills += self.monthly_amount(rule)
            elif rule.is_deposit:
                total_deposits += 1
                monthly_deposits += self.monthly_amount(rule)

        return ScheduleOverview(
            total_bills=total_bills,
            total_deposits=total_deposits,
            monthly_bills=monthly_bills.quantize(CENT, rounding=ROUND_HALF_UP),
            monthly_deposits=monthly_deposits.quantize(CENT, rounding=ROUND_HALF_UP),
            due_count=due_count,
        )

    @staticmethod
    def monthly_amount(rule: RecurrenceRule) -> Decimal:
        """abs(amount) scaled to a per-month figure"""
        return abs(rule.amount) * MONTHLY_FACTORS[rule.frequency]
