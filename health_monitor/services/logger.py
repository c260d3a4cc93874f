import json
import logging
from datetime import datetime

from health_monitor.core.config import settings

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Module logger; the root handler is configured once from LOG_LEVEL."""
    global _configured
    if not _configured:
        logging.basicConfig(
            level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        _configured = True
    return logging.getLogger(name)


def log_debug(event: str, data: dict):
    """
    Logs structured debug info if enabled.
    """
    if not settings.DEBUG_MODE:
        return

    entry = {
        "timestamp": datetime.now().isoformat(),
        "event": event,
        "data": data,
    }

    get_logger("health_monitor.debug").info(json.dumps(entry, indent=2, default=str))
