"""
Schedule Occurrence API Routes
Forecast views over recurring schedules: flat list, dashboard widget,
calendar grid, summary totals, paginated bills list, overview
"""

from datetime import date
from decimal import Decimal
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from occurrence_engine.config import settings
from occurrence_engine.domain.models import (
    CalendarDay,
    CalendarGrid,
    Frequency,
    ItemType,
    Occurrence,
    OccurrencePage,
    OccurrenceStatus,
    OccurrenceSummary,
    ProjectionWindow,
    ScheduleOverview,
    Urgency,
)
from occurrence_engine.domain.services.bills_engine import BillsEngine
from occurrence_engine.domain.services.schedule_projector import ScheduleProjector, TypeFilter
from occurrence_engine.infrastructure.db.database import get_db
from occurrence_engine.infrastructure.db.repositories.scheduled_transaction_repository import (
    ScheduledTransactionRepository,
)
from occurrence_engine.utils.dates import format_month, parse_month
from occurrence_engine.utils.time import today_in

logger = logging.getLogger(__name__)
router = APIRouter()

bills_engine = BillsEngine(projector=ScheduleProjector(due_soon_days=settings.DUE_SOON_DAYS))


# Response models
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OccurrenceResponse(CamelModel):
    rule_id: str
    due_date: date
    amount: Decimal
    status: OccurrenceStatus
    days_until_due: int
    sequence_index: int
    due_label: str
    urgency: Urgency
    item_type: ItemType
    is_override: bool
    frequency: Frequency
    display_name: str
    currency_code: str
    is_transfer: bool
    auto_post: bool

    @classmethod
    def from_domain(cls, o: Occurrence) -> "OccurrenceResponse":
        return cls(
            rule_id=o.rule_id,
            due_date=o.due_date,
            amount=o.amount,
            status=o.status,
            days_until_due=o.days_until_due,
            sequence_index=o.sequence_index,
            due_label=o.due_label,
            urgency=o.urgency,
            item_type=o.item_type,
            is_override=o.is_override,
            frequency=o.frequency,
            display_name=o.display_name,
            currency_code=o.currency_code,
            is_transfer=o.is_transfer,
            auto_post=o.auto_post,
        )


class CalendarDayResponse(CamelModel):
    day: date = Field(alias="date")
    in_current_month: bool
    is_today: bool
    total: Decimal
    occurrences: List[OccurrenceResponse]

    @classmethod
    def from_domain(cls, day: CalendarDay) -> "CalendarDayResponse":
        return cls(
            day=day.date,
            in_current_month=day.in_current_month,
            is_today=day.is_today,
            total=day.total,
            occurrences=[OccurrenceResponse.from_domain(o) for o in day.occurrences],
        )


class CalendarGridResponse(CamelModel):
    month: str
    start: date
    end: date
    days: List[CalendarDayResponse]

    @classmethod
    def from_domain(cls, grid: CalendarGrid) -> "CalendarGridResponse":
        return cls(
            month=format_month(grid.month),
            start=grid.start,
            end=grid.end,
            days=[CalendarDayResponse.from_domain(d) for d in grid.days],
        )


class SummaryResponse(CamelModel):
    month: str
    overdue_count: int
    overdue_total: Decimal
    this_month_count: int
    this_month_total: Decimal

    @classmethod
    def from_domain(cls, month: date, summary: OccurrenceSummary) -> "SummaryResponse":
        return cls(
            month=format_month(month),
            overdue_count=summary.overdue_count,
            overdue_total=summary.overdue_total,
            this_month_count=summary.this_month_count,
            this_month_total=summary.this_month_total,
        )


class OccurrencePageResponse(CamelModel):
    items: List[OccurrenceResponse]
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def from_domain(cls, page: OccurrencePage) -> "OccurrencePageResponse":
        return cls(
            items=[OccurrenceResponse.from_domain(o) for o in page.items],
            page=page.page,
            page_size=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
        )


class BillsReportResponse(CamelModel):
    grid: CalendarGridResponse
    page: OccurrencePageResponse
    summary: SummaryResponse


class OverviewResponse(CamelModel):
    total_bills: int
    total_deposits: int
    monthly_bills: Decimal
    monthly_deposits: Decimal
    due_count: int

    @classmethod
    def from_domain(cls, overview: ScheduleOverview) -> "OverviewResponse":
        return cls(
            total_bills=overview.total_bills,
            total_deposits=overview.total_deposits,
            monthly_bills=overview.monthly_bills,
            monthly_deposits=overview.monthly_deposits,
            due_count=overview.due_count,
        )


def _resolve_today(today: Optional[date]) -> date:
    """Explicit override (tests, previews) or server date in TIMEZONE"""
    return today or today_in(settings.TIMEZONE)


def _resolve_month(month: Optional[str], today: date) -> date:
    if month is None:
        return today.replace(day=1)
    try:
        return parse_month(month)
    except ValueError as e:
        logger.warning("INVALID_MONTH | month=%s", month)
        raise HTTPException(status_code=422, detail=str(e))


async def _load_snapshots(db: AsyncSession) -> list[dict]:
    return await ScheduledTransactionRepository(db).list_snapshots()


TODAY_QUERY = Query(None, description="Override today (YYYY-MM-DD); defaults to server date")


@router.get(
    "/occurrences",
    response_model=List[OccurrenceResponse],
    summary="Projected occurrences",
    description="Chronological occurrences of all active schedules within the horizon",
)
async def list_occurrences(
    horizon_months: int = Query(settings.DEFAULT_HORIZON_MONTHS, alias="horizonMonths"),
    cap: int = Query(settings.MAX_OCCURRENCES_PER_RULE, description="Max occurrences per schedule"),
    type_filter: TypeFilter = Query("all", alias="type"),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    window = ProjectionWindow(
        today=_resolve_today(today),
        horizon_months=horizon_months,
        max_occurrences_per_rule=cap,
    )
    snapshots = await _load_snapshots(db)
    occurrences = bills_engine.occurrences(snapshots, window, type_filter=type_filter)
    return [OccurrenceResponse.from_domain(o) for o in occurrences]


@router.get(
    "/upcoming-bills",
    response_model=List[OccurrenceResponse],
    summary="Upcoming bills widget",
    description="Top-N non-transfer bills due within the next few days",
)
async def upcoming_bills(
    limit: int = Query(settings.UPCOMING_BILLS_LIMIT, ge=1),
    days: int = Query(settings.UPCOMING_WINDOW_DAYS, ge=0),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    snapshots = await _load_snapshots(db)
    bills = bills_engine.upcoming_bills(
        snapshots, _resolve_today(today), limit=limit, window_days=days
    )
    return [OccurrenceResponse.from_domain(o) for o in bills]


@router.get(
    "/calendar/{month}",
    response_model=CalendarGridResponse,
    summary="Bills calendar",
    description="Whole-week month grid with occurrences bucketed by day",
)
async def calendar_grid(
    month: str = Path(..., examples=["2026-02"], description="Month in YYYY-MM format"),
    horizon_months: int = Query(settings.DEFAULT_HORIZON_MONTHS, alias="horizonMonths"),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    resolved_today = _resolve_today(today)
    displayed = _resolve_month(month, resolved_today)
    window = ProjectionWindow(
        today=resolved_today,
        horizon_months=horizon_months,
        max_occurrences_per_rule=settings.MAX_OCCURRENCES_PER_RULE,
    )
    snapshots = await _load_snapshots(db)
    grid = bills_engine.calendar_grid(snapshots, displayed, window)
    return CalendarGridResponse.from_domain(grid)


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Bills summary",
    description="Overdue and this-month counts and totals",
)
async def month_summary(
    month: Optional[str] = Query(None, examples=["2026-02"], description="Month in YYYY-MM format"),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    resolved_today = _resolve_today(today)
    displayed = _resolve_month(month, resolved_today)
    window = ProjectionWindow(
        today=resolved_today,
        horizon_months=settings.DEFAULT_HORIZON_MONTHS,
        max_occurrences_per_rule=settings.MAX_OCCURRENCES_PER_RULE,
    )
    snapshots = await _load_snapshots(db)
    summary = bills_engine.month_summary(snapshots, displayed, window)
    return SummaryResponse.from_domain(displayed, summary)


@router.get(
    "/bills",
    response_model=OccurrencePageResponse,
    summary="Bills list",
    description="Paginated chronological list of bills and deposits",
)
async def bills_list(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.BILLS_PAGE_SIZE, alias="pageSize", ge=1, le=500),
    type_filter: TypeFilter = Query("all", alias="type"),
    horizon_months: int = Query(settings.DEFAULT_HORIZON_MONTHS, alias="horizonMonths"),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    window = ProjectionWindow(
        today=_resolve_today(today),
        horizon_months=horizon_months,
        max_occurrences_per_rule=settings.MAX_OCCURRENCES_PER_RULE,
    )
    snapshots = await _load_snapshots(db)
    result = bills_engine.bills_page(
        snapshots, window, page=page, page_size=page_size, type_filter=type_filter
    )
    return OccurrencePageResponse.from_domain(result)


@router.get(
    "/report/{month}",
    response_model=BillsReportResponse,
    summary="Bills report",
    description="Calendar grid, first page of the list and totals in one call",
)
async def bills_report(
    month: str = Path(..., examples=["2026-02"], description="Month in YYYY-MM format"),
    page_size: int = Query(settings.BILLS_PAGE_SIZE, alias="pageSize", ge=1, le=500),
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    resolved_today = _resolve_today(today)
    displayed = _resolve_month(month, resolved_today)
    window = ProjectionWindow(
        today=resolved_today,
        horizon_months=settings.DEFAULT_HORIZON_MONTHS,
        max_occurrences_per_rule=settings.MAX_OCCURRENCES_PER_RULE,
    )
    snapshots = await _load_snapshots(db)
    report = bills_engine.report(snapshots, displayed, window, page=1, page_size=page_size)
    return BillsReportResponse(
        grid=CalendarGridResponse.from_domain(report.grid),
        page=OccurrencePageResponse.from_domain(report.page),
        summary=SummaryResponse.from_domain(displayed, report.summary),
    )


@router.get(
    "/overview",
    response_model=OverviewResponse,
    summary="Schedules overview",
    description="Active bill/deposit counts and monthly-normalized totals",
)
async def overview(
    today: Optional[date] = TODAY_QUERY,
    db: AsyncSession = Depends(get_db),
):
    snapshots = await _load_snapshots(db)
    return OverviewResponse.from_domain(
        bills_engine.overview(snapshots, _resolve_today(today))
    )
