"""Health records routes.

Patients submit vitals which are validated, stored in Firestore and
answered with an alert plus personalised recommendations. Patients read
their own history; doctors and admins can read any patient's.
"""
import json
import queue
import time
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from google.cloud.firestore import FieldFilter

from health_monitor.api.deps import get_current_user, has_role, require_db, require_role
from health_monitor.core.config import settings
from health_monitor.models.health_data import RiskFactorOut, VitalsAlertOut, VitalsIn
from health_monitor.services import health_service, user_service, vitals_trends
from health_monitor.services.health_service import HEALTH_RECORDS
from health_monitor.services.logger import get_logger, log_debug
from health_monitor.services.snapshot_stream import SnapshotStream, StreamClosed
from health_monitor.services.vitals_advisor import (
    analyze_vitals,
    assess_reading,
    generate_recommendations,
    identify_risk_factors,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/health_records", tags=["health_records"])

STREAM_KEEPALIVE_SECONDS = 15


def _target_patient(user, patient_id: Optional[str]) -> str:
    """Patients may only read themselves; doctors/admins pick a patient."""
    if not patient_id or patient_id == user["uid"]:
        return user["uid"]
    if not has_role(user, ["doctor", "admin"]):
        raise HTTPException(status_code=403, detail="Cannot read records for this patient")
    return patient_id


@router.post("/", status_code=201)
async def submit_vitals(
    payload: VitalsIn = Body(...),
    user=Depends(require_role(["patient"])),
):
    """Validate, store and assess a new reading."""
    alert = analyze_vitals(payload.bp, payload.heart_rate, payload.temperature)
    if not alert.valid:
        logger.info("Rejected vitals from %s: %r", user["uid"], payload.bp)
        raise HTTPException(status_code=400, detail=alert.message)

    db = require_db()
    record = health_service.build_record(user["uid"], payload)
    record_id = health_service.add_record(db, record)

    profile = user_service.get_profile(db, user["uid"])
    recommendations = generate_recommendations(payload.bp, payload.heart_rate, profile)
    log_debug("vitals_submitted", {"id": record_id, "record": record, "alert": alert})

    return {
        "id": record_id,
        "alert": VitalsAlertOut(
            valid=alert.valid,
            severity=alert.severity.value,
            message=alert.message,
            should_alert=alert.should_alert,
        ),
        "recommendations": recommendations,
    }


@router.get("/")
async def list_records(
    patient_id: Optional[str] = Query(None),
    user=Depends(get_current_user),
):
    db = require_db()
    target = _target_patient(user, patient_id)
    records = health_service.list_records(db, target)
    return {"items": health_service.with_statuses(records)}


@router.get("/chart")
async def chart(
    patient_id: Optional[str] = Query(None),
    user=Depends(get_current_user),
):
    db = require_db()
    target = _target_patient(user, patient_id)
    records = health_service.list_records(db, target)
    return {
        "series": vitals_trends.chart_series(records),
        "summary": vitals_trends.trend_summary(records),
    }


@router.get("/assessment")
async def assessment(
    patient_id: Optional[str] = Query(None),
    user=Depends(get_current_user),
):
    """Risk assessment of the latest reading combined with the lifestyle profile."""
    db = require_db()
    target = _target_patient(user, patient_id)

    latest = health_service.latest_record(db, target)
    if latest is None:
        raise HTTPException(status_code=404, detail="No health records yet")

    profile = user_service.get_profile(db, target)
    result = assess_reading(
        latest.get("bp"),
        latest.get("heartRate"),
        latest.get("temperature"),
        profile,
    )
    factors = [RiskFactorOut(name=f.name, detail=f.detail) for f in identify_risk_factors(profile)]
    return {"record_id": latest["id"], "assessment": result, "risk_factors": factors}


def _sse(data) -> str:
    return f"data: {json.dumps(data, default=str)}\n\n"


@router.get("/stream")
async def stream_records(
    request: Request,
    patient_id: Optional[str] = Query(None),
    user=Depends(get_current_user),
):
    """
    Server-sent events: every event carries the complete current list of
    readings (newest first, with statuses). Clients replace, never merge.
    """
    db = require_db()
    target = _target_patient(user, patient_id)
    query = db.collection(HEALTH_RECORDS).where(filter=FieldFilter("userId", "==", target))

    def _prepare(items):
        return health_service.with_statuses(health_service.sort_newest_first(items))

    snapshots = SnapshotStream(query, transform=_prepare).open()

    async def events():
        deadline = time.monotonic() + settings.STREAM_MAX_SECONDS
        try:
            while not await request.is_disconnected():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                try:
                    items = await run_in_threadpool(
                        snapshots.get, min(STREAM_KEEPALIVE_SECONDS, remaining)
                    )
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                except StreamClosed:
                    break
                yield _sse({"items": items})
        finally:
            snapshots.close()
            logger.info("Record stream for %s closed", target)

    return StreamingResponse(events(), media_type="text/event-stream")
