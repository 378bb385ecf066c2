"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from occurrence_engine.domain.errors import MalformedRuleError
from occurrence_engine.utils.dates import (
    add_months,
    date_key,
    parse_calendar_date,
)

logger = logging.getLogger(__name__)

# Projection limits
DEFAULT_HORIZON_MONTHS = 3
MAX_HORIZON_MONTHS = 120
DEFAULT_MAX_OCCURRENCES_PER_RULE = 100


class Frequency(str, Enum):
    """How often a scheduled transaction repeats"""
    ONCE = "ONCE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class OccurrenceStatus(str, Enum):
    """Where an occurrence sits relative to today"""
    OVERDUE = "OVERDUE"
    DUE_TODAY = "DUE_TODAY"
    UPCOMING = "UPCOMING"


class Urgency(str, Enum):
    """Display urgency tier"""
    OVERDUE_OR_TODAY = "OVERDUE_OR_TODAY"
    SOON = "SOON"
    NORMAL = "NORMAL"


class ItemType(str, Enum):
    """Bill (outflow), deposit (inflow) or transfer"""
    BILL = "bill"
    DEPOSIT = "deposit"
    TRANSFER = "transfer"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _to_decimal(value: Any, rule_id: Any, what: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise MalformedRuleError(f"{what} is missing", rule_id=rule_id)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise MalformedRuleError(f"{what} is not a number: {value!r}", rule_id=rule_id)
    # NaN and Infinity parse fine but break comparisons and quantize
    if not result.is_finite():
        raise MalformedRuleError(f"{what} is not finite: {value!r}", rule_id=rule_id)
    return result


FALSE_STRINGS = {"false", "0", "no", "off", "n", "f", ""}


def _to_bool(value: Any) -> bool:
    """Snapshot flag to bool; common false strings count as False"""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Snapshot of a scheduled transaction - Immutable

    `cursor_date` is the next unposted due date. It is None when the stored
    value could not be parsed; such a rule generates nothing.
    """
    id: str
    frequency: Frequency
    cursor_date: Optional[date]
    is_active: bool
    amount: Decimal
    currency_code: str = "USD"
    is_transfer: bool = False
    auto_post: bool = False
    display_name: str = ""
    end_date: Optional[date] = None
    occurrences_remaining: Optional[int] = None
    overrides: Dict[date, Decimal] = field(default_factory=dict, hash=False)
    created_order: int = 0

    def __post_init__(self):
        if self.id is None or self.id == "":
            raise MalformedRuleError("rule id is required")

        if not isinstance(self.frequency, Frequency):
            try:
                frequency = Frequency(str(self.frequency).strip().upper())
            except ValueError:
                raise MalformedRuleError(
                    f"unknown frequency {self.frequency!r}", rule_id=self.id
                )
            object.__setattr__(self, "frequency", frequency)

        object.__setattr__(self, "amount", _to_decimal(self.amount, self.id, "amount"))

        if self.cursor_date is not None and not isinstance(self.cursor_date, date):
            object.__setattr__(self, "cursor_date", parse_calendar_date(self.cursor_date))
        if self.end_date is not None and not isinstance(self.end_date, date):
            object.__setattr__(self, "end_date", parse_calendar_date(self.end_date))

        overrides: Dict[date, Decimal] = {}
        for raw_date, raw_amount in (self.overrides or {}).items():
            override_date = parse_calendar_date(raw_date)
            if override_date is None or raw_amount is None:
                continue
            overrides[override_date] = _to_decimal(raw_amount, self.id, "override amount")
        object.__setattr__(self, "overrides", overrides)

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> "RecurrenceRule":
        """
        Build a rule from a storage/API snapshot

        Accepts snake_case or camelCase keys.

        Raises:
            MalformedRuleError: If id, frequency or amount cannot be interpreted
        """
        rule_id = _pick(data, "id")
        if rule_id is None:
            raise MalformedRuleError("rule id is required")

        remaining = _pick(data, "occurrences_remaining", "occurrencesRemaining")
        if remaining is not None:
            try:
                remaining = int(remaining)
            except (TypeError, ValueError):
                raise MalformedRuleError(
                    f"occurrences_remaining is not an integer: {remaining!r}",
                    rule_id=rule_id,
                )

        return cls(
            id=str(rule_id),
            frequency=_pick(data, "frequency"),
            cursor_date=parse_calendar_date(
                _pick(data, "cursor_date", "cursorDate", "next_due_date", "nextDueDate")
            ),
            is_active=_to_bool(_pick(data, "is_active", "isActive", default=True)),
            amount=_pick(data, "amount"),
            currency_code=str(_pick(data, "currency_code", "currencyCode", default="USD")),
            is_transfer=_to_bool(_pick(data, "is_transfer", "isTransfer", default=False)),
            auto_post=_to_bool(_pick(data, "auto_post", "autoPost", default=False)),
            display_name=str(_pick(data, "display_name", "displayName", "name", default="") or ""),
            end_date=parse_calendar_date(_pick(data, "end_date", "endDate")),
            occurrences_remaining=remaining,
            overrides=dict(_pick(data, "overrides", default=None) or {}),
            created_order=int(_pick(data, "created_order", "createdOrder", default=0) or 0),
        )

    @property
    def is_bill(self) -> bool:
        """Outflow that is not a transfer"""
        return self.amount < Decimal('0') and not self.is_transfer

    @property
    def is_deposit(self) -> bool:
        """Inflow that is not a transfer"""
        return self.amount > Decimal('0') and not self.is_transfer

    def effective_amount(self, due_date: date) -> Decimal:
        """Amount for one occurrence, honouring a per-date override"""
        return self.overrides.get(due_date, self.amount)


@dataclass(frozen=True)
class Occurrence:
    """
    One concrete instance of a rule on a calendar date - Immutable

    Generated occurrences carry no status; the projector fills in
    `status`, `days_until_due`, `due_label` and `urgency`.
    """
    rule_id: str
    due_date: date
    amount: Decimal
    sequence_index: int
    item_type: ItemType
    status: Optional[OccurrenceStatus] = None
    days_until_due: Optional[int] = None
    due_label: str = ""
    urgency: Optional[Urgency] = None
    is_override: bool = False
    frequency: Frequency = Frequency.ONCE
    display_name: str = ""
    currency_code: str = "USD"
    is_transfer: bool = False
    auto_post: bool = False
    created_order: int = 0

    @property
    def key(self) -> str:
        """ISO calendar-date key"""
        return date_key(self.due_date)

    @property
    def is_bill(self) -> bool:
        return self.item_type == ItemType.BILL


@dataclass(frozen=True)
class ProjectionWindow:
    """
    Query window: injected today, horizon and per-rule safety cap

    Out-of-range values are clamped rather than rejected.
    """
    today: date
    horizon_months: int = DEFAULT_HORIZON_MONTHS
    max_occurrences_per_rule: int = DEFAULT_MAX_OCCURRENCES_PER_RULE

    def __post_init__(self):
        horizon = self.horizon_months
        if not isinstance(horizon, int) or isinstance(horizon, bool) or horizon <= 0:
            logger.warning(
                "HORIZON_CLAMPED | requested=%s | applied=%s",
                horizon, DEFAULT_HORIZON_MONTHS,
            )
            horizon = DEFAULT_HORIZON_MONTHS
        elif horizon > MAX_HORIZON_MONTHS:
            logger.warning(
                "HORIZON_CLAMPED | requested=%s | applied=%s",
                horizon, MAX_HORIZON_MONTHS,
            )
            horizon = MAX_HORIZON_MONTHS

        cap = self.max_occurrences_per_rule
        if not isinstance(cap, int) or isinstance(cap, bool) or cap <= 0:
            logger.warning(
                "OCCURRENCE_CAP_CLAMPED | requested=%s | applied=%s",
                cap, DEFAULT_MAX_OCCURRENCES_PER_RULE,
            )
            cap = DEFAULT_MAX_OCCURRENCES_PER_RULE

        object.__setattr__(self, "horizon_months", horizon)
        object.__setattr__(self, "max_occurrences_per_rule", cap)

    @property
    def horizon_end(self) -> date:
        """Last date (inclusive) that may be projected"""
        try:
            return add_months(self.today, self.horizon_months)
        except OverflowError:
            return date.max


@dataclass(frozen=True)
class CalendarDay:
    """One cell of a month grid"""
    date: date
    in_current_month: bool
    is_today: bool
    occurrences: Tuple[Occurrence, ...] = ()

    @property
    def key(self) -> str:
        return date_key(self.date)

    @property
    def total(self) -> Decimal:
        """Sum of absolute amounts due on this day"""
        return sum((abs(o.amount) for o in self.occurrences), Decimal('0'))


@dataclass(frozen=True)
class CalendarGrid:
    """Whole-week month grid, Sunday first"""
    month: date
    days: Tuple[CalendarDay, ...]

    def __post_init__(self):
        if len(self.days) % 7 != 0:
            raise ValueError("Calendar grid must contain whole weeks")

    @property
    def start(self) -> date:
        return self.days[0].date

    @property
    def end(self) -> date:
        return self.days[-1].date

    @property
    def weeks(self) -> list[Tuple[CalendarDay, ...]]:
        return [self.days[i:i + 7] for i in range(0, len(self.days), 7)]


@dataclass(frozen=True)
class OccurrenceSummary:
    """Overdue and this-month totals"""
    overdue_count: int
    overdue_total: Decimal
    this_month_count: int
    this_month_total: Decimal


@dataclass(frozen=True)
class OccurrencePage:
    """One page of a chronological occurrence list"""
    items: Tuple[Occurrence, ...]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


@dataclass(frozen=True)
class ScheduleOverview:
    """Rule-level bill/deposit overview, amounts normalized per month"""
    total_bills: int
    total_deposits: int
    monthly_bills: Decimal
    monthly_deposits: Decimal
    due_count: int


@dataclass(frozen=True)
class CursorAdvance:
    """
    Result of stepping a rule's cursor after an occurrence posts or is skipped

    The engine never persists this; the posting side applies it.
    """
    rule_id: str
    next_cursor_date: Optional[date]
    occurrences_remaining: Optional[int]
    is_active: bool


@dataclass(frozen=True)
class BillsReport:
    """Calendar grid, chronological page and totals for one displayed month"""
    grid: CalendarGrid
    page: OccurrencePage
    summary: OccurrenceSummary
