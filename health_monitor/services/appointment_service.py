"""Appointment booking, review and listing helpers."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

APPOINTMENTS = "appointments"

PENDING = "Pending"
APPROVED = "Approved"
DECLINED = "Declined"
STATUSES = (PENDING, APPROVED, DECLINED)

VIEWS = ("all", "today", "upcoming", "past")


class InvalidStatusTransition(ValueError):
    """Raised when an appointment is not Pending or the target is not a decision."""


def next_status(current: Optional[str], target: str) -> str:
    """Only Pending -> Approved and Pending -> Declined are allowed."""
    if target not in (APPROVED, DECLINED):
        raise InvalidStatusTransition(f"Unknown target status: {target}")
    if (current or PENDING).lower() != PENDING.lower():
        raise InvalidStatusTransition(f"Appointment is already {current}")
    return target


def _as_utc(value: Any) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_appointment(patient_id: str, patient_name: str, doctor_name: str, when: datetime) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    return {
        "patientId": patient_id,
        "patientName": patient_name,
        "doctorName": doctor_name,
        "appointmentDate": _as_utc(when),
        "status": PENDING,
        "createdAt": now,
    }


def is_in_past(when: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now(timezone.utc)
    return _as_utc(when) < now


def _matches_view(appointment: Dict[str, Any], view: str, now: datetime) -> bool:
    if view == "all":
        return True
    when = _as_utc(appointment.get("appointmentDate"))
    if when is None:
        return False

    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if view == "today":
        return start_of_today <= when < start_of_today + timedelta(days=1)
    if view == "upcoming":
        return when >= start_of_today
    if view == "past":
        return when < start_of_today
    return True


def filter_appointments(
    appointments: List[Dict[str, Any]],
    view: str = "all",
    status: str = "all",
    search: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    now = _as_utc(now) or datetime.now(timezone.utc)
    term = (search or "").strip().lower()
    wanted = status.lower()

    result = []
    for app in appointments:
        if not _matches_view(app, view, now):
            continue
        if wanted != "all" and (app.get("status") or "").lower() != wanted:
            continue
        if term and term not in (app.get("patientName") or "").lower() \
                and term not in (app.get("doctorName") or "").lower():
            continue
        result.append(app)
    return result


def sort_by_date(appointments: List[Dict[str, Any]], descending: bool = False) -> List[Dict[str, Any]]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(
        appointments,
        key=lambda a: _as_utc(a.get("appointmentDate")) or oldest,
        reverse=descending,
    )


def count_by_status(appointments: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {"pending": 0, "approved": 0, "declined": 0}
    for app in appointments:
        key = (app.get("status") or "").lower()
        if key in counts:
            counts[key] += 1
    counts["total"] = len(appointments)
    return counts
