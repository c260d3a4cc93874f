from fastapi import APIRouter

from health_monitor.api.routes.auth import router as auth_router
from health_monitor.api.routes.users import router as users_router
from health_monitor.api.routes.health_records import router as health_records_router
from health_monitor.api.routes.appointments import router as appointments_router

from health_monitor.api.routes.doctor.dashboard import router as doctor_dashboard_router
from health_monitor.api.routes.admin.dashboard import router as admin_dashboard_router

api_router = APIRouter()

# Shared routes
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(health_records_router)
api_router.include_router(appointments_router)

# Doctor routes
api_router.include_router(doctor_dashboard_router)

# Admin routes
api_router.include_router(admin_dashboard_router)
