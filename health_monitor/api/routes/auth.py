"""Authentication-related routes.

The frontend signs in with Firebase; the backend only reports what the
verified token says about the caller.
"""
from fastapi import APIRouter, Depends
from health_monitor.api.deps import get_current_user, resolve_role

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me")
async def get_me(user=Depends(get_current_user)):
    return {"uid": user.get("uid"), "email": user.get("email"), "role": resolve_role(user)}
