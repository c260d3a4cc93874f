"""Helpers around the `users` collection.

A user document is keyed by the Firebase Auth uid and holds
`name`, `email`, `role` plus the onboarding answers (age, gender,
ethnicity and the lifestyle fields the risk advisor reads).
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from health_monitor.models.health_data import LifestyleProfile, OnboardingIn
from health_monitor.services.vitals_advisor import compute_overall_risk_tier

USERS = "users"


def get_user(db, uid: str) -> Optional[Dict[str, Any]]:
    doc = db.collection(USERS).document(uid).get()
    if not doc.exists:
        return None
    return {"id": doc.id, **(doc.to_dict() or {})}


def get_role(db, uid: str) -> Optional[str]:
    user = get_user(db, uid)
    return user.get("role") if user else None


def get_profile(db, uid: str) -> Optional[LifestyleProfile]:
    user = get_user(db, uid)
    if user is None:
        return None
    return LifestyleProfile.model_validate(user)


def risk_fields(profile: LifestyleProfile) -> Dict[str, Any]:
    result = compute_overall_risk_tier(profile)
    return {"riskTier": result.tier.value, "riskScore": result.score}


def onboarding_update(payload: OnboardingIn, current: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Map the onboarding form to the camelCase fields the frontend reads.

    Fields left out of the form keep their stored values, so the risk
    tier is scored on `current` overlaid with the update.
    """
    answers = LifestyleProfile(
        bmi=payload.bmi,
        smoking_habits=payload.smoking_habits,
        alcohol_use=payload.alcohol_use,
        stress_levels=payload.stress_levels,
        diet=payload.diet,
        physical_activity=payload.physical_activity,
    )
    update = {
        "age": payload.age,
        "gender": payload.gender,
        "ethnicity": payload.ethnicity,
        **answers.model_dump(by_alias=True),
    }
    update = {k: v for k, v in update.items() if v is not None}

    merged = {**(current or {}), **update}
    update.update(risk_fields(LifestyleProfile.model_validate(merged)))
    return update


def list_users(db, role: Optional[str] = None, search: Optional[str] = None) -> List[Dict[str, Any]]:
    coll = db.collection(USERS)
    docs = coll.where(filter=FieldFilter("role", "==", role)).stream() if role else coll.stream()
    users = [{"id": d.id, **(d.to_dict() or {})} for d in docs]

    if search:
        term = search.strip().lower()
        users = [
            u for u in users
            if term in (u.get("name") or "").lower() or term in (u.get("email") or "").lower()
        ]

    return sorted(users, key=lambda u: (u.get("name") or "").lower())


def count_by_role(users: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {"patients": 0, "doctors": 0, "admins": 0}
    for u in users:
        key = f"{u.get('role')}s"
        if key in counts:
            counts[key] += 1
    counts["total"] = len(users)
    return counts
