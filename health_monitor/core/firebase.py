"""
Firebase admin initialization and helpers.

The portal frontend signs users in with Firebase Authentication and sends
the Firebase ID token with every request. The backend verifies those
tokens with the Firebase Admin SDK and reads/writes the `users`,
`healthRecords` and `appointments` collections in Firestore.
"""

import os

import firebase_admin
from firebase_admin import credentials, firestore

from health_monitor.core.config import settings
from health_monitor.services.logger import get_logger

logger = get_logger(__name__)

# Global references to avoid re-initialization
_firebase_app = None
db = None


def init_firebase():
    """
    Initialize Firebase Admin SDK if not already initialized.

    The credentials path comes from FIREBASE_CREDENTIALS (env or .env),
    falling back to health_monitor/core/firebase_key.json for local dev.
    """

    global _firebase_app, db

    # Prevent re-initialization (important for Uvicorn reload)
    if firebase_admin._apps:
        if db is None:
            db = firestore.client()
        return

    cred_path = settings.FIREBASE_CREDENTIALS

    if not os.path.exists(cred_path):
        raise RuntimeError(
            f"Firebase credentials not found at: {cred_path}\n"
            "Set FIREBASE_CREDENTIALS env var or place firebase_key.json correctly."
        )

    cred = credentials.Certificate(cred_path)
    _firebase_app = firebase_admin.initialize_app(cred)

    db = firestore.client()

    logger.info("Firebase Admin initialized successfully.")


def get_db():
    """Return the Firestore client set up by init_firebase (None before startup)."""
    return db
