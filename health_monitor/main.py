from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from health_monitor.core.config import settings
from health_monitor.core.firebase import init_firebase
from health_monitor.api.routes.router import api_router
from health_monitor.services.logger import get_logger
from health_monitor.workers.risk_tier_worker import start_risk_tier_worker

logger = get_logger(__name__)

app = FastAPI(title="Health Monitor Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup():
    """Initialize Firebase and start background workers."""
    init_firebase()

    if settings.ENABLE_RISK_WORKER:
        start_risk_tier_worker()


@app.get("/")
async def root():
    return {"message": "Health Monitor Backend is running"}


@app.get("/health")
async def health_check():
    return {"status": "ok"}


# Include API routers
app.include_router(api_router)
