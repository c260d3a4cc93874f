"""Chart series and trend summary for a patient's vitals history."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from health_monitor.services.vitals_advisor import (
    Status,
    classify_blood_pressure,
    parse_blood_pressure,
    parse_number,
)
from health_monitor.services.health_service import record_statuses

COLUMNS = ["timestamp", "systolic", "diastolic", "heartRate", "temperature", "bpStatus"]
METRICS = ["systolic", "diastolic", "heartRate", "temperature"]


def _as_utc(ts: Any) -> Optional[datetime]:
    if not isinstance(ts, datetime):
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def readings_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per reading, oldest first. Unparseable values become NaN."""
    rows = []
    for r in records:
        ts = _as_utc(r.get("timestamp"))
        if ts is None:
            # Charts need an x value
            continue
        pressure = parse_blood_pressure(r.get("bp"))
        rows.append({
            "timestamp": ts,
            "systolic": pressure[0] if pressure else None,
            "diastolic": pressure[1] if pressure else None,
            "heartRate": parse_number(r.get("heartRate")),
            "temperature": parse_number(r.get("temperature")),
            "bpStatus": classify_blood_pressure(r.get("bp")).value,
        })

    df = pd.DataFrame(rows, columns=COLUMNS)
    if df.empty:
        return df
    df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    for col in METRICS:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df.sort_values("timestamp", kind="stable").reset_index(drop=True)


def chart_series(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    df = readings_frame(records)
    if df.empty:
        return []
    out = df.copy()
    out["timestamp"] = out["timestamp"].map(lambda t: t.isoformat())
    out = out.astype(object).where(pd.notna(out), None)
    return out.to_dict(orient="records")


def _mean(series: pd.Series) -> Optional[float]:
    value = series.mean()
    if pd.isna(value):
        return None
    return round(float(value), 1)


def trend_summary(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    df = readings_frame(records)
    if df.empty:
        return {"count": 0, "averages": {m: None for m in METRICS}, "highBpReadings": 0, "latest": None}

    latest = max(
        (r for r in records if _as_utc(r.get("timestamp")) is not None),
        key=lambda r: _as_utc(r["timestamp"]),
    )

    return {
        "count": int(len(df)),
        "averages": {m: _mean(df[m]) for m in METRICS},
        "highBpReadings": int((df["bpStatus"] == Status.HIGH.value).sum()),
        "latest": {"timestamp": _as_utc(latest["timestamp"]).isoformat(), **record_statuses(latest)},
    }
