"""
Report Endpoints
================
GET /api/user_reports.json          — actionable reports grouped by domain
GET /api/inconsistent_entries.json  — known / unknown partition per domain
GET /api/classified_reports.json    — flat list, optional ?prediction= filter

All three take ?from=YYYY-MM-DD&to=YYYY-MM-DD (inclusive day range). The
fetch + transform runs in a dedicated worker through the ReportDispatcher;
the handler only validates input and relays the worker's JSON verbatim.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from webcompat_triage.core.constants import ReportView
from webcompat_triage.worker.dispatcher import ReportDispatcher, WorkerError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])

dispatcher = ReportDispatcher()


async def _handle_report(
    view: ReportView,
    param_from: Optional[str],
    param_to: Optional[str],
    param_prediction: Optional[str] = None,
) -> Response:
    if not (param_from and param_to):
        raise HTTPException(status_code=400, detail="`from` and `to` query parameters required")

    request_logger = logging.getLogger(f"{__name__}.{view.value}")
    request_logger.debug("Entered handler (from=%s to=%s prediction=%s)", param_from, param_to, param_prediction)

    try:
        result = await dispatcher.dispatch(
            view,
            param_from,
            param_to,
            param_prediction=param_prediction,
            request_logger=request_logger,
        )
    except WorkerError as exc:
        request_logger.error("Handler failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    request_logger.debug("Handler done.")
    return Response(content=result, media_type="application/json")


@router.get("/user_reports.json")
async def user_reports(
    param_from: Optional[str] = Query(None, alias="from"),
    param_to: Optional[str] = Query(None, alias="to"),
):
    return await _handle_report(ReportView.USER_REPORTS, param_from, param_to)


@router.get("/inconsistent_entries.json")
async def inconsistent_entries(
    param_from: Optional[str] = Query(None, alias="from"),
    param_to: Optional[str] = Query(None, alias="to"),
):
    return await _handle_report(ReportView.INCONSISTENT_ENTRIES, param_from, param_to)


@router.get("/classified_reports.json")
async def classified_reports(
    param_from: Optional[str] = Query(None, alias="from"),
    param_to: Optional[str] = Query(None, alias="to"),
    prediction: Optional[str] = Query(None),
):
    return await _handle_report(ReportView.CLASSIFIED_REPORTS, param_from, param_to, prediction)
