import threading
import time
from datetime import datetime, timezone

from google.cloud.firestore import FieldFilter

from health_monitor.core.config import settings
from health_monitor.core.firebase import get_db
from health_monitor.models.health_data import LifestyleProfile
from health_monitor.services import user_service
from health_monitor.services.logger import get_logger
from health_monitor.services.user_service import USERS

logger = get_logger(__name__)


def start_risk_tier_worker():
    thread = threading.Thread(target=_run_worker, daemon=True)
    thread.start()
    return thread


def _run_worker():
    logger.info("Risk tier worker started (every %ss)", settings.RISK_REFRESH_INTERVAL_SECONDS)
    while True:
        try:
            db = get_db()
            if db is not None:
                refresh_risk_tiers(db)
        except Exception:
            logger.exception("Error in risk tier job")

        time.sleep(settings.RISK_REFRESH_INTERVAL_SECONDS)


def refresh_risk_tiers(db) -> int:
    """
    Recompute riskTier/riskScore for every patient whose stored values
    are stale. Returns the number of user documents updated.
    """
    updated = 0
    for doc in db.collection(USERS).where(filter=FieldFilter("role", "==", "patient")).stream():
        data = doc.to_dict() or {}
        try:
            fields = user_service.risk_fields(LifestyleProfile.model_validate(data))
            if data.get("riskTier") == fields["riskTier"] and data.get("riskScore") == fields["riskScore"]:
                continue
            fields["riskUpdatedAt"] = datetime.now(timezone.utc)
            db.collection(USERS).document(doc.id).update(fields)
            updated += 1
        except Exception:
            logger.exception("Error refreshing risk tier for %s", doc.id)

    logger.info("Risk tiers refreshed: %d updated", updated)
    return updated
