from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Any, List
from google.cloud.firestore import FieldFilter

from health_monitor.api.deps import require_db, require_role
from health_monitor.services import appointment_service, health_service, user_service
from health_monitor.services.appointment_service import APPOINTMENTS
from health_monitor.services.health_service import HEALTH_RECORDS
from health_monitor.services.vitals_advisor import compute_overall_risk_tier

router = APIRouter(prefix="/doctor/dashboard", tags=["doctor_dashboard"])


@router.get("/")
async def doctor_dashboard(user=Depends(require_role(["doctor"]))):
    """
    Doctor dashboard:
    - Pending count and today's appointments for this doctor
    - Latest reading statuses and lifestyle risk tier per patient
    """
    db = require_db()

    me = user_service.get_user(db, user["uid"]) or {}
    if not me.get("name"):
        raise HTTPException(status_code=404, detail="Doctor profile not found")

    # 1️⃣ Appointments booked under this doctor's name
    docs = db.collection(APPOINTMENTS).where(filter=FieldFilter("doctorName", "==", me["name"])).stream()
    appointments = [{"id": d.id, **(d.to_dict() or {})} for d in docs]
    today = appointment_service.sort_by_date(
        appointment_service.filter_appointments(appointments, view="today")
    )

    # 2️⃣ Latest reading per patient, one pass over the collection
    latest_map: Dict[str, Dict[str, Any]] = {}
    for doc in db.collection(HEALTH_RECORDS).stream():
        data = {"id": doc.id, **(doc.to_dict() or {})}
        uid = data.get("userId")
        if not uid:
            continue
        prev = latest_map.get(uid)
        if prev is None or health_service.sort_newest_first([prev, data])[0] is data:
            latest_map[uid] = data

    rows: List[Dict[str, Any]] = []
    for patient in user_service.list_users(db, role="patient"):
        latest = latest_map.get(patient["id"])
        tier = compute_overall_risk_tier(patient)
        rows.append({
            "patient_id": patient["id"],
            "patient_name": patient.get("name"),
            "risk_tier": tier.tier.value,
            "risk_score": tier.score,
            "latest_record": {**latest, **health_service.record_statuses(latest)} if latest else None,
        })

    return {
        "doctor_name": me["name"],
        "counts": appointment_service.count_by_status(appointments),
        "today": today,
        "patients": rows,
    }
