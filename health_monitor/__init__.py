"""Health Monitor portal backend (patients, doctors, admins)."""
