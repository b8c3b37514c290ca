"""Background scheduler for the nightly hour-total reconciliation."""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.reconciliation_service import find_discrepancies, repair

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


def run_reconciliation_once(*, auto_repair: bool | None = None) -> dict[str, int]:
    """Check (and optionally repair) every student's total. Returns a summary."""

    if auto_repair is None:
        auto_repair = get_settings().reconciliation_auto_repair

    session = SessionLocal()
    try:
        if auto_repair:
            discrepancies = repair(session)
            session.commit()
        else:
            discrepancies = find_discrepancies(session)
        return {"discrepancies": len(discrepancies), "repaired": len(discrepancies) if auto_repair else 0}
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


async def _scheduled_job() -> None:
    try:
        summary = run_reconciliation_once()
        logger.info("reconciliation completed: %s", summary)
    except Exception:  # pragma: no cover - safeguard for background job
        logger.exception("reconciliation job failed")
        raise


def register_scheduler(app: FastAPI) -> None:
    """Attach APScheduler lifecycle hooks to the FastAPI app."""

    settings = get_settings()
    if _scheduler.get_job("reconciliation") is None:
        _scheduler.add_job(
            _scheduled_job,
            "cron",
            hour=settings.reconciliation_hour,
            minute=settings.reconciliation_minute,
            id="reconciliation",
            misfire_grace_time=3600,
        )

    @app.on_event("startup")
    async def start_scheduler() -> None:
        if not _scheduler.running:
            _scheduler.start()
            logger.info("reconciliation scheduler started")

    @app.on_event("shutdown")
    async def shutdown_scheduler() -> None:
        if _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("reconciliation scheduler stopped")
