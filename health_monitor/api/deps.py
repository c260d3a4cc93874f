"""
API dependencies (Firebase auth verification and role checks).

Provides FastAPI dependencies to verify Firebase ID tokens and to
resolve the caller's portal role.
"""

from typing import List, Callable

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth

from health_monitor.core.firebase import get_db
from health_monitor.services import user_service

# FastAPI security scheme (Swagger + header binding)
security = HTTPBearer(auto_error=True)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
):
    """
    Verify Firebase ID token from Authorization header.

    Expects:
        Authorization: Bearer <id_token>
    """
    try:
        id_token = credentials.credentials
        decoded = auth.verify_id_token(id_token)
        return decoded
    except Exception as exc:
        raise HTTPException(
            status_code=401,
            detail="Invalid ID token",
        ) from exc


def require_db():
    db = get_db()
    if db is None:
        raise HTTPException(status_code=500, detail="Firestore client not initialized")
    return db


def resolve_role(user: dict):
    """
    Role from the `role` custom claim; falls back to users/{uid}.role,
    which is where the portal writes it at signup.
    """
    role = user.get("role") or user.get("roles")
    if role:
        return role
    db = get_db()
    if db is None:
        return None
    return user_service.get_role(db, user["uid"])


def has_role(user: dict, allowed: List[str]) -> bool:
    role = resolve_role(user)
    if isinstance(role, list):
        return any(r in allowed for r in role)
    return role in allowed


def require_role(allowed: List[str]) -> Callable:
    """
    Return a FastAPI dependency that enforces a user's role.

    Example claims:
        {'role': 'patient'}
        {'role': 'doctor'}
        {'role': 'admin'}
    """

    def _checker(user=Depends(get_current_user)):
        role = resolve_role(user)

        if isinstance(role, list):
            is_allowed = any(r in allowed for r in role)
        else:
            is_allowed = role in allowed

        if not is_allowed:
            raise HTTPException(
                status_code=403,
                detail="Insufficient permissions",
            )

        return {**user, "role": role}

    return _checker
