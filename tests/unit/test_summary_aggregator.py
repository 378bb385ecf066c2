"""
Unit Tests for SummaryAggregator
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from occurrence_engine.domain.models import ItemType, Occurrence, ProjectionWindow
from occurrence_engine.domain.services.schedule_projector import ScheduleProjector
from occurrence_engine.domain.services.summary_aggregator import SummaryAggregator

TODAY = date(2026, 2, 17)


def projected(*items):
    occurrences = [
        Occurrence(
            rule_id=f"r{i}",
            due_date=TODAY + timedelta(days=days),
            amount=Decimal(amount),
            sequence_index=0,
            item_type=ItemType.BILL if Decimal(amount) < 0 else ItemType.DEPOSIT,
        )
        for i, (days, amount) in enumerate(items)
    ]
    return ScheduleProjector().project(occurrences, ProjectionWindow(today=TODAY))


@pytest.fixture
def aggregator():
    return SummaryAggregator()


def test_overdue_and_this_month(aggregator):
    items = projected(
        (-20, "-100.10"),   # overdue (January)
        (-2, "-0.20"),      # overdue (February)
        (0, "-50.00"),      # this month
        (5, "1200.00"),     # this month, deposit counted by absolute value
        (20, "-75.00"),     # March
    )

    summary = aggregator.summarize(items, date(2026, 2, 1))

    assert summary.overdue_count == 2
    assert summary.overdue_total == Decimal("100.30")
    assert summary.this_month_count == 2
    assert summary.this_month_total == Decimal("1250.00")


def test_overdue_not_double_counted_in_month(aggregator):
    summary = aggregator.summarize(projected((-1, "-10")), date(2026, 2, 1))
    assert summary.overdue_count == 1
    assert summary.this_month_count == 0


def test_displayed_month_other_than_current(aggregator):
    items = projected((20, "-75.00"), (25, "-25.00"), (0, "-5"))
    summary = aggregator.summarize(items, date(2026, 3, 1))
    assert summary.this_month_count == 2
    assert summary.this_month_total == Decimal("100.00")


def test_decimal_sums_are_exact(aggregator):
    items = projected(*[(1, "-0.10")] * 3)
    summary = aggregator.summarize(items, TODAY)
    assert summary.this_month_total == Decimal("0.30")


def test_empty_summary(aggregator):
    summary = aggregator.summarize([], TODAY)
    assert summary.overdue_count == 0
    assert summary.overdue_total == Decimal("0")
    assert summary.this_month_total == Decimal("0")


# ----------------------------------------------------------------------
# Rule overview
# ----------------------------------------------------------------------

def test_summarize_rules(aggregator, make_rule):
    rules = [
        make_rule("rent", frequency="MONTHLY", amount="-1500.00"),
        make_rule("gym", frequency="WEEKLY", amount="-10.00", cursor_date=TODAY + timedelta(days=3)),
        make_rule("salary", frequency="BIWEEKLY", amount="2000.00", cursor_date=TODAY - timedelta(days=1)),
        make_rule("insurance", frequency="YEARLY", amount="-1200.00", cursor_date=TODAY + timedelta(days=30)),
        make_rule("savings", frequency="MONTHLY", amount="-300.00", is_transfer=True),
        make_rule("old", frequency="MONTHLY", amount="-99.00", is_active=False),
    ]

    overview = aggregator.summarize_rules(rules, TODAY)

    assert overview.total_bills == 3
    assert overview.total_deposits == 1
    # 1500 + 10 * 4.33 + 1200 / 12
    assert overview.monthly_bills == Decimal("1643.30")
    assert overview.monthly_deposits == Decimal("4340.00")
    # rent (today), salary (yesterday) and the transfer are due
    assert overview.due_count == 3


def test_monthly_amount_factors(aggregator, make_rule):
    assert aggregator.monthly_amount(make_rule(frequency="DAILY", amount="-2")) == Decimal("60")
    assert aggregator.monthly_amount(make_rule(frequency="ONCE", amount="-500")) == Decimal("0")
    quarterly = aggregator.monthly_amount(make_rule(frequency="QUARTERLY", amount="-300"))
    assert quarterly.quantize(Decimal("0.01")) == Decimal("100.00")
