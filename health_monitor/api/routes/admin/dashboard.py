from fastapi import APIRouter, Depends

from health_monitor.api.deps import require_db, require_role
from health_monitor.services import appointment_service, user_service
from health_monitor.services.appointment_service import APPOINTMENTS
from health_monitor.services.health_service import HEALTH_RECORDS

router = APIRouter(prefix="/admin/dashboard", tags=["admin_dashboard"])


@router.get("/")
async def admin_dashboard(user=Depends(require_role(["admin"]))):
    """Portal-wide counts for the admin landing page."""
    db = require_db()

    users = user_service.list_users(db)
    appointments = [d.to_dict() or {} for d in db.collection(APPOINTMENTS).stream()]
    record_count = sum(1 for _ in db.collection(HEALTH_RECORDS).stream())

    return {
        "users": user_service.count_by_role(users),
        "appointments": appointment_service.count_by_status(appointments),
        "health_records": record_count,
    }
