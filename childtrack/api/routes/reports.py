"""Report generation and history endpoints."""

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from childtrack.api.dependencies import ChildDep, DbDep, TzDep
from childtrack.models.report import ReportRequest, SavedReport, SavedReportSummary
from childtrack.services import event_service, report_service
from childtrack.stats.buckets import Window

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/{child_id}", response_model=SavedReport, status_code=status.HTTP_201_CREATED)
async def generate_report(
    payload: ReportRequest, child: ChildDep, db: DbDep, tz: TzDep
) -> SavedReport:
    """Generate a report over `[start_date, end_date]` and save it to the history."""
    window = Window(payload.start_date, payload.end_date, tz)
    lo, hi = window.bounds()
    event_type = None if payload.report_type == "all" else payload.report_type
    # Sleep sessions still running at the start of the window count toward it
    events = await event_service.list_events(
        db, child.id, event_type=event_type, start=lo, end=hi,
        newest_first=False, tz=tz, overlapping=True,
    )
    report = report_service.build_report(
        child, payload.report_type, events, window, datetime.now(tz)
    )
    saved = await report_service.save_report(db, report)
    logger.info(
        "Saved %s report %s for child %s (%d entries)",
        payload.report_type, saved.id, child.id, report.total_entries,
    )
    return saved


@router.get("/{child_id}", response_model=list[SavedReportSummary])
async def list_reports(
    child: ChildDep,
    db: DbDep,
    limit: int = Query(20, ge=1, le=100),
) -> list[SavedReportSummary]:
    """Return the history of generated reports, most recent first."""
    return await report_service.list_reports(db, child.id, limit=limit)


@router.get("/{child_id}/{report_id}", response_model=SavedReport)
async def get_report(child: ChildDep, report_id: int, db: DbDep) -> SavedReport:
    """Return a saved report with its full payload."""
    report = await report_service.get_report(db, report_id)
    if not report or report.child_id != child.id:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
    return report


@router.delete("/{child_id}/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(child: ChildDep, report_id: int, db: DbDep) -> None:
    """Delete a saved report."""
    report = await report_service.get_report(db, report_id)
    if not report or report.child_id != child.id:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
    await report_service.delete_report(db, report_id)
