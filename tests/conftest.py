from datetime import date, datetime
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from occurrence_engine.api.routes import schedules
from occurrence_engine.domain.models import ProjectionWindow, RecurrenceRule
from occurrence_engine.infrastructure.db.database import Base, get_db
from occurrence_engine.infrastructure.db import models


TODAY = date(2026, 2, 17)


@pytest.fixture()
def make_rule():
    """Factory for rule snapshots with sensible defaults"""
    def _make(rule_id: str = "rule-1", **overrides) -> RecurrenceRule:
        fields = {
            "id": rule_id,
            "frequency": "MONTHLY",
            "cursor_date": TODAY,
            "is_active": True,
            "amount": Decimal("-100.00"),
        }
        fields.update(overrides)
        return RecurrenceRule(**fields)
    return _make


@pytest.fixture()
def window() -> ProjectionWindow:
    return ProjectionWindow(today=TODAY, horizon_months=3)


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        future=True,
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture()
def add_schedule(db_session):
    """Insert a scheduled transaction row (plus optional overrides)"""
    counter = {"n": 0}

    async def _add(schedule_id: str, overrides=None, **fields):
        counter["n"] += 1
        row = models.ScheduledTransactionModel(
            id=schedule_id,
            overrides=[
                models.ScheduledTransactionOverrideModel(override_date=d, amount=a)
                for d, a in (overrides or {}).items()
            ],
            name=fields.pop("name", schedule_id),
            amount=fields.pop("amount", Decimal("-100.00")),
            frequency=fields.pop("frequency", "MONTHLY"),
            next_due_date=fields.pop("next_due_date", TODAY),
            created_at=fields.pop("created_at", datetime(2026, 1, 1, 0, 0, counter["n"])),
            **fields,
        )
        db_session.add(row)
        await db_session.commit()
        # Repository reads must hit the database, not the identity map
        db_session.expunge_all()
        return row

    return _add


@pytest.fixture()
async def app(db_session) -> FastAPI:
    app = FastAPI()
    app.include_router(schedules.router, prefix="/api/v1/schedules", tags=["Schedules"])

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
