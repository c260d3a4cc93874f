import sys

import firebase_admin
from firebase_admin import credentials, auth

from health_monitor.core.config import settings
from health_monitor.models.user import ROLES


def set_role(uid: str, role: str):
    if not firebase_admin._apps:
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS)
        firebase_admin.initialize_app(cred)

    auth.set_custom_user_claims(uid, {"role": role})


if __name__ == "__main__":
    if len(sys.argv) != 3 or sys.argv[2] not in ROLES:
        print("Usage: python set_role.py <uid> <patient|doctor|admin>")
        sys.exit(1)

    uid, role = sys.argv[1], sys.argv[2]
    set_role(uid, role)

    print(f"✅ Role claim '{role}' set successfully for UID: {uid}")
    print("✅ Now log out and log in again OR refresh token using getIdToken(true)")
