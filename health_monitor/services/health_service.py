"""Health-related business logic.

Stores and queries vitals readings in the `healthRecords` collection.
Readings are append-only: there is no update or delete path.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from health_monitor.models.health_data import VitalsIn
from health_monitor.services.vitals_advisor import (
    classify_blood_pressure,
    classify_heart_rate,
    classify_temperature,
)

HEALTH_RECORDS = "healthRecords"


def _sort_key(record: Dict[str, Any]):
    ts = record.get("timestamp")
    if isinstance(ts, datetime):
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.timestamp()
    return float("-inf")


def build_record(uid: str, vitals: VitalsIn) -> Dict[str, Any]:
    record = {
        "userId": uid,
        "bp": vitals.bp.strip(),
        "heartRate": vitals.heart_rate.strip(),
        "timestamp": datetime.now(timezone.utc),
    }
    if vitals.temperature is not None and vitals.temperature.strip():
        record["temperature"] = vitals.temperature.strip()
    if vitals.notes:
        record["notes"] = vitals.notes
    return record


def add_record(db, record: Dict[str, Any]) -> str:
    _, doc_ref = db.collection(HEALTH_RECORDS).add(record)
    return doc_ref.id


def record_statuses(record: Dict[str, Any]) -> Dict[str, str]:
    return {
        "bpStatus": classify_blood_pressure(record.get("bp")).value,
        "hrStatus": classify_heart_rate(record.get("heartRate")).value,
        "temperatureStatus": classify_temperature(record.get("temperature")).value,
    }


def with_statuses(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**r, **record_statuses(r)} for r in records]


def sort_newest_first(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(records, key=_sort_key, reverse=True)


def list_records(db, user_id: str) -> List[Dict[str, Any]]:
    # Single-field query: avoids needing a composite index for order_by
    docs = db.collection(HEALTH_RECORDS).where(filter=FieldFilter("userId", "==", user_id)).stream()
    return sort_newest_first([{"id": d.id, **(d.to_dict() or {})} for d in docs])


def latest_record(db, user_id: str) -> Optional[Dict[str, Any]]:
    records = list_records(db, user_id)
    return records[0] if records else None
