"""Appointment routes.

Patients book (status Pending), doctors approve or decline their own
appointments, admins see and manage everything.
"""
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from google.cloud.firestore import FieldFilter

from health_monitor.api.deps import get_current_user, has_role, require_db, require_role
from health_monitor.models.appointment import AppointmentIn
from health_monitor.services import appointment_service, user_service
from health_monitor.services.appointment_service import (
    APPOINTMENTS,
    APPROVED,
    DECLINED,
    InvalidStatusTransition,
)
from health_monitor.services.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("/", status_code=201)
async def book_appointment(
    payload: AppointmentIn = Body(...),
    user=Depends(require_role(["patient"])),
):
    if not payload.doctor_name.strip():
        raise HTTPException(status_code=400, detail="Please select a doctor.")
    if appointment_service.is_in_past(payload.appointment_date):
        raise HTTPException(status_code=400, detail="Cannot book appointments in the past.")

    db = require_db()
    patient = user_service.get_user(db, user["uid"]) or {}
    data = appointment_service.build_appointment(
        patient_id=user["uid"],
        patient_name=patient.get("name") or user.get("name") or "",
        doctor_name=payload.doctor_name.strip(),
        when=payload.appointment_date,
    )

    _, doc_ref = db.collection(APPOINTMENTS).add(data)
    logger.info("Appointment %s booked by %s with %s", doc_ref.id, user["uid"], data["doctorName"])
    return {"id": doc_ref.id, "status": data["status"]}


@router.get("/")
async def list_appointments(
    view: str = Query("all", pattern="^(all|today|upcoming|past)$"),
    status: str = Query("all", pattern="(?i)^(all|pending|approved|declined)$"),
    search: Optional[str] = Query(None),
    user=Depends(get_current_user),
):
    """
    - Patients see their own appointments.
    - Doctors see appointments booked under their name.
    - Admins see everything, newest first.
    """
    db = require_db()
    is_admin = has_role(user, ["admin"])
    coll = db.collection(APPOINTMENTS)

    if is_admin:
        docs = coll.stream()
    elif has_role(user, ["doctor"]):
        me = user_service.get_user(db, user["uid"]) or {}
        if not me.get("name"):
            raise HTTPException(status_code=404, detail="Doctor profile not found")
        docs = coll.where(filter=FieldFilter("doctorName", "==", me["name"])).stream()
    else:
        docs = coll.where(filter=FieldFilter("patientId", "==", user["uid"])).stream()

    items = [{"id": d.id, **(d.to_dict() or {})} for d in docs]
    counts = appointment_service.count_by_status(items)
    items = appointment_service.filter_appointments(items, view=view, status=status, search=search)
    items = appointment_service.sort_by_date(items, descending=is_admin)
    return {"items": items, "counts": counts}


def _review(appointment_id: str, target: str, user):
    db = require_db()
    ref = db.collection(APPOINTMENTS).document(appointment_id)
    doc = ref.get()
    if not doc.exists:
        raise HTTPException(status_code=404, detail="Appointment not found")

    data = doc.to_dict() or {}
    # Doctors only review appointments booked under their own name
    if not has_role(user, ["admin"]):
        me = user_service.get_user(db, user["uid"]) or {}
        if data.get("doctorName") != me.get("name"):
            raise HTTPException(status_code=403, detail="Not your appointment")

    try:
        new_status = appointment_service.next_status(data.get("status"), target)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    ref.update({"status": new_status, "updatedAt": datetime.now(timezone.utc)})
    logger.info("Appointment %s %s by %s", appointment_id, new_status, user["uid"])
    return {"id": appointment_id, "status": new_status}


@router.post("/{appointment_id}/approve")
async def approve(appointment_id: str, user=Depends(require_role(["doctor", "admin"]))):
    return _review(appointment_id, APPROVED, user)


@router.post("/{appointment_id}/decline")
async def decline(appointment_id: str, user=Depends(require_role(["doctor", "admin"]))):
    return _review(appointment_id, DECLINED, user)


@router.delete("/{appointment_id}")
async def delete_appointment(appointment_id: str, user=Depends(require_role(["admin"]))):
    db = require_db()
    ref = db.collection(APPOINTMENTS).document(appointment_id)
    if not ref.get().exists:
        raise HTTPException(status_code=404, detail="Appointment not found")
    ref.delete()
    return {"message": "Deleted"}
