"""User account routes: signup record, onboarding and admin management."""

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from health_monitor.api.deps import get_current_user, require_db, require_role
from health_monitor.models.health_data import OnboardingIn
from health_monitor.models.user import UserRegistration
from health_monitor.services import user_service
from health_monitor.services.logger import get_logger, log_debug
from health_monitor.services.user_service import USERS

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", status_code=201)
async def register(
    payload: UserRegistration = Body(...),
    user=Depends(get_current_user),
):
    """Create users/{uid} right after Firebase signup."""
    db = require_db()
    ref = db.collection(USERS).document(user["uid"])
    if ref.get().exists:
        raise HTTPException(status_code=409, detail="User already registered")

    data = payload.model_dump()
    ref.set(data)
    logger.info("Registered %s as %s", user["uid"], data["role"])
    return {"id": user["uid"], **data}


@router.get("/me")
async def get_me(user=Depends(get_current_user)):
    db = require_db()
    me = user_service.get_user(db, user["uid"])
    if me is None:
        raise HTTPException(status_code=404, detail="User not found")
    profile = user_service.get_profile(db, user["uid"])
    return {**me, **user_service.risk_fields(profile)}


@router.put("/me/onboarding")
async def complete_onboarding(
    payload: OnboardingIn = Body(...),
    user=Depends(require_role(["patient"])),
):
    db = require_db()
    ref = db.collection(USERS).document(user["uid"])
    doc = ref.get()
    if not doc.exists:
        raise HTTPException(status_code=404, detail="User not found")

    update = user_service.onboarding_update(payload, current=doc.to_dict())
    ref.update(update)
    log_debug("onboarding_saved", {"uid": user["uid"], "update": update})
    return {"id": user["uid"], **update}


@router.get("/doctors")
async def list_doctors(user=Depends(get_current_user)):
    """Doctors a patient can book with."""
    db = require_db()
    doctors = user_service.list_users(db, role="doctor")
    return {"items": [{"id": d["id"], "name": d.get("name")} for d in doctors]}


@router.get("/patients")
async def list_patients(user=Depends(require_role(["doctor", "admin"]))):
    db = require_db()
    patients = user_service.list_users(db, role="patient")
    return {"items": patients}


@router.get("/")
async def list_users(
    role: Optional[str] = Query(None, pattern="^(patient|doctor|admin)$"),
    search: Optional[str] = Query(None),
    user=Depends(require_role(["admin"])),
):
    db = require_db()
    users = user_service.list_users(db, role=role, search=search)
    return {"items": users, "counts": user_service.count_by_role(users)}


@router.delete("/{user_id}")
async def delete_user(user_id: str, user=Depends(require_role(["admin"]))):
    db = require_db()
    ref = db.collection(USERS).document(user_id)
    if not ref.get().exists:
        raise HTTPException(status_code=404, detail="User not found")
    ref.delete()
    logger.info("Admin %s deleted user %s", user["uid"], user_id)
    return {"message": "Deleted"}
