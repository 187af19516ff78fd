"""
Report Action Endpoints
=======================
POST /api/add_label.json      {report_uuid, label}
POST /api/mark_invalid.json   {report_uuid}
POST /api/track_action.json   {report_uuid, type}

Each call appends audit rows in the warehouse (labels / report_actions);
nothing is ever updated in place. The next transform run picks the rows up
through has_actions / action, which is how actioned reports drop out of the
triage views.

All endpoints require write access (see permissions.py) and answer 201 on
success, 400 on a missing field, 500 with the warehouse error otherwise.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from webcompat_triage.api.permissions import require_write_access
from webcompat_triage.core.config import BQ_PROJECT_ID
from webcompat_triage.services.warehouse import BigQueryWarehouse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Actions"], dependencies=[Depends(require_write_access)])

warehouse = BigQueryWarehouse(BQ_PROJECT_ID)


# ---------------------------------------------------------------------------
# Payloads (fields optional so that missing ones map to 400, not 422)
# ---------------------------------------------------------------------------
class AddLabelPayload(BaseModel):
    report_uuid: Optional[str] = None
    label: Optional[str] = None


class MarkInvalidPayload(BaseModel):
    report_uuid: Optional[str] = None


class TrackActionPayload(BaseModel):
    report_uuid: Optional[str] = None
    type: Optional[str] = None


class ActionResponse(BaseModel):
    message: str = "success"


async def _run_write(description: str, write) -> ActionResponse:
    try:
        await write
    except Exception as exc:
        logger.error("[ACTIONS] %s failed: %s", description, exc, exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc))
    logger.info("[ACTIONS] %s", description)
    return ActionResponse()


@router.post("/add_label.json", status_code=201, response_model=ActionResponse)
async def add_label(payload: AddLabelPayload):
    if not (payload.report_uuid and payload.label):
        raise HTTPException(status_code=400, detail="Missing report_uuid or label")
    return await _run_write(
        f"label {payload.label!r} added to {payload.report_uuid}",
        warehouse.add_label(payload.report_uuid, payload.label),
    )


@router.post("/mark_invalid.json", status_code=201, response_model=ActionResponse)
async def mark_invalid(payload: MarkInvalidPayload):
    if not payload.report_uuid:
        raise HTTPException(status_code=400, detail="Missing report_uuid")
    return await _run_write(
        f"{payload.report_uuid} marked invalid",
        warehouse.mark_invalid(payload.report_uuid),
    )


@router.post("/track_action.json", status_code=201, response_model=ActionResponse)
async def track_action(payload: TrackActionPayload):
    if not (payload.report_uuid and payload.type):
        raise HTTPException(status_code=400, detail="Missing report_uuid or type")
    return await _run_write(
        f"action {payload.type!r} tracked for {payload.report_uuid}",
        warehouse.track_action(payload.report_uuid, payload.type),
    )
