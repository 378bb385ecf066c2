"""
Unit Tests for BillsEngine

Batch behaviour across many rules: malformed-rule isolation,
transfer exclusion, covering windows and combined views.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from occurrence_engine.domain.models import (
    ItemType,
    OccurrenceStatus,
    ProjectionWindow,
    RecurrenceRule,
)
from occurrence_engine.domain.services.bills_engine import BillsEngine

TODAY = date(2026, 2, 17)


@pytest.fixture
def engine():
    return BillsEngine()


@pytest.fixture
def snapshots():
    return [
        {"id": "rent", "name": "Rent", "frequency": "MONTHLY", "nextDueDate": "2026-02-01",
         "amount": "-1500.00", "isActive": True, "createdOrder": 0},
        {"id": "salary", "name": "Salary", "frequency": "BIWEEKLY", "nextDueDate": "2026-02-20T00:00:00Z",
         "amount": "2400.00", "isActive": True, "createdOrder": 1},
        {"id": "phone", "name": "Phone", "frequency": "monthly", "next_due_date": "2026-02-18",
         "amount": "-45.50", "is_active": True, "created_order": 2},
        {"id": "savings", "name": "Savings", "frequency": "MONTHLY", "nextDueDate": "2026-02-19",
         "amount": "-200.00", "isActive": True, "isTransfer": True, "createdOrder": 3},
        {"id": "cancelled", "name": "Old gym", "frequency": "MONTHLY", "nextDueDate": "2026-02-18",
         "amount": "-30.00", "isActive": False, "createdOrder": 4},
    ]


def test_load_rules_skips_malformed(engine, snapshots, caplog):
    bad = [
        {"id": "weird", "frequency": "FORTNIGHTLY", "nextDueDate": "2026-02-18", "amount": "-1"},
        {"id": "no-amount", "frequency": "MONTHLY", "nextDueDate": "2026-02-18"},
        {"frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-1"},
    ]

    with caplog.at_level(logging.WARNING):
        rules = engine.load_rules(snapshots + bad)

    assert [r.id for r in rules] == ["rent", "salary", "phone", "savings", "cancelled"]
    assert "RULE_SKIPPED" in caplog.text
    assert "weird" in caplog.text


def test_load_rules_accepts_rule_objects(engine):
    rule = RecurrenceRule(
        id="x", frequency="WEEKLY", cursor_date=TODAY, is_active=True, amount=Decimal("-1")
    )
    assert engine.load_rules([rule]) == [rule]


def test_invalid_cursor_rule_is_treated_as_inactive(engine):
    rules = [{"id": "broken", "frequency": "MONTHLY", "nextDueDate": "someday", "amount": "-10"}]
    window = ProjectionWindow(today=TODAY)
    assert engine.occurrences(rules, window) == []


def test_occurrences_flat_list(engine, snapshots):
    window = ProjectionWindow(today=TODAY, horizon_months=1)

    result = engine.occurrences(snapshots, window)

    assert [o.due_date for o in result] == sorted(o.due_date for o in result)
    assert {o.rule_id for o in result} == {"rent", "salary", "phone", "savings"}
    rent = [o for o in result if o.rule_id == "rent"]
    assert rent[0].status == OccurrenceStatus.OVERDUE
    assert rent[0].due_label == "16 days overdue"


def test_occurrences_without_transfers(engine, snapshots):
    window = ProjectionWindow(today=TODAY, horizon_months=1)
    result = engine.occurrences(snapshots, window, include_transfers=False)
    assert all(o.item_type != ItemType.TRANSFER for o in result)


def test_occurrences_type_filter(engine, snapshots):
    window = ProjectionWindow(today=TODAY, horizon_months=1)
    deposits = engine.occurrences(snapshots, window, type_filter="deposits")
    assert {o.rule_id for o in deposits} == {"salary"}


def test_upcoming_bills(engine, snapshots):
    bills = engine.upcoming_bills(snapshots, TODAY)

    # rent is overdue, salary is a deposit, savings is a transfer,
    # cancelled is inactive
    assert [o.rule_id for o in bills] == ["phone"]
    assert bills[0].due_label == "Tomorrow"


def test_upcoming_bills_same_day_follows_creation_order(engine):
    rules = [
        {"id": "b", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-1", "createdOrder": 1},
        {"id": "a", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-1", "createdOrder": 0},
    ]
    assert [o.rule_id for o in engine.upcoming_bills(rules, TODAY)] == ["a", "b"]


def test_calendar_grid_excludes_transfers(engine, snapshots):
    window = ProjectionWindow(today=TODAY)

    grid = engine.calendar_grid(snapshots, date(2026, 2, 1), window)
    by_key = {d.key: d for d in grid.days}

    assert [o.rule_id for o in by_key["2026-02-18"].occurrences] == ["phone"]
    assert by_key["2026-02-19"].occurrences == ()
    assert by_key["2026-02-17"].is_today


def test_calendar_grid_beyond_horizon_is_covered(engine, snapshots):
    window = ProjectionWindow(today=TODAY, horizon_months=1)

    grid = engine.calendar_grid(snapshots, date(2026, 6, 1), window)

    rent_days = [d.date for d in grid.days for o in d.occurrences if o.rule_id == "rent"]
    assert date(2026, 6, 1) in rent_days


def test_month_summary(engine, snapshots):
    window = ProjectionWindow(today=TODAY)

    summary = engine.month_summary(snapshots, date(2026, 2, 1), window)

    # Overdue: rent 2026-02-01
    assert summary.overdue_count == 1
    assert summary.overdue_total == Decimal("1500.00")
    # February (not overdue): phone 02-18, salary 02-20
    assert summary.this_month_count == 2
    assert summary.this_month_total == Decimal("2445.50")


def test_bills_page(engine, snapshots):
    window = ProjectionWindow(today=TODAY, horizon_months=1)

    page = engine.bills_page(snapshots, window, page=1, page_size=3, type_filter="bills")

    assert page.total_pages == (page.total + 2) // 3
    assert [o.rule_id for o in page.items] == ["rent", "phone", "rent"]


def test_report_shares_one_projection(engine, snapshots):
    window = ProjectionWindow(today=TODAY)
    month = date(2026, 2, 1)

    report = engine.report(snapshots, month, window, page_size=10)

    assert report.summary == engine.month_summary(snapshots, month, window)
    assert report.grid == engine.calendar_grid(snapshots, month, window)
    assert report.page.items[0].rule_id == "rent"


def test_overview(engine, snapshots):
    overview = engine.overview(snapshots, TODAY)

    assert overview.total_bills == 2
    assert overview.total_deposits == 1
    assert overview.monthly_bills == Decimal("1545.50")
    assert overview.monthly_deposits == Decimal("5208.00")
    assert overview.due_count == 1


GOOD_RULE = {"id": "good", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-20.00"}


@pytest.mark.parametrize(
    "bad_rule",
    [
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "abc"},
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "NaN"},
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "Infinity"},
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-10",
         "overrides": {"2026-03-18": "abc"}},
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-10",
         "overrides": {"2026-03-18": "NaN"}},
        {"id": "bad", "frequency": "MONTHLY", "nextDueDate": "2026-02-18", "amount": "-10",
         "overrides": {"2026-03-18": "-Infinity"}},
    ],
)
def test_bad_amount_only_drops_its_own_rule(engine, bad_rule, caplog):
    window = ProjectionWindow(today=TODAY, horizon_months=3)

    with caplog.at_level(logging.WARNING):
        result = engine.occurrences([GOOD_RULE, bad_rule], window)
        overview = engine.overview([GOOD_RULE, bad_rule], TODAY)

    assert [o.due_date for o in result] == [date(2026, 2, 18), date(2026, 3, 18), date(2026, 4, 18)]
    assert {o.rule_id for o in result} == {"good"}
    assert overview.total_bills == 1
    assert overview.monthly_bills == Decimal("20.00")
    assert "RULE_SKIPPED | rule_id=bad" in caplog.text


def test_inactive_string_flag_generates_nothing(engine):
    rule = dict(GOOD_RULE, isActive="false")
    assert engine.occurrences([rule], ProjectionWindow(today=TODAY)) == []
