"""
FastAPI Main Application
Read-only forecast API over recurring schedules
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from occurrence_engine.api.routes import schedules
from occurrence_engine.config import settings
from occurrence_engine.core.logging import setup_logging
from occurrence_engine.infrastructure.db.database import close_db, engine, init_db

setup_logging(settings.LOG_LEVEL, quiet_loggers=settings.QUIET_LOGGERS)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Schedule Occurrence Engine"
VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Opens and closes the snapshot store
    """
    logger.info("APP_STARTING | env=%s | timezone=%s", settings.APP_ENV, settings.TIMEZONE)
    await init_db()
    logger.info(
        "APP_READY | docs=http://%s:%s/docs", settings.API_HOST, settings.API_PORT
    )

    yield

    logger.info("APP_STOPPING")
    await close_db()


app = FastAPI(
    title=SERVICE_NAME,
    description="Projected occurrences, calendar grid and totals for recurring bills and deposits",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Service and database health"""
    db_status = "connected"
    db_error = None
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error("HEALTH_DB_ERROR | error=%s", exc)
        db_status = "error"
        db_error = str(exc)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": SERVICE_NAME,
        "version": VERSION,
        "services": {
            "api": "running",
            "database": db_status,
        },
        "database_error": db_error,
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": SERVICE_NAME,
        "version": VERSION,
        "timezone": settings.TIMEZONE,
        "docs": "/docs",
    }


app.include_router(schedules.router, prefix="/api/v1/schedules", tags=["Schedules"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "occurrence_engine.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
