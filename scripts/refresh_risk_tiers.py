import sys

from health_monitor.core import firebase
from health_monitor.workers.risk_tier_worker import refresh_risk_tiers


def main():
    firebase.init_firebase()
    db = firebase.get_db()

    print("Refreshing patient risk tiers...")
    updated = refresh_risk_tiers(db)
    print(f"Successfully updated {updated} patient profiles.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
