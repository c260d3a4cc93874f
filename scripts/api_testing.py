"""Shared setup for API tests: fake Firestore plus an overridable caller."""
import unittest

from fastapi.testclient import TestClient

from firestore_fakes import FakeFirestore
from health_monitor.api.deps import get_current_user
from health_monitor.core import firebase
from health_monitor.main import app

PATIENT = {"uid": "pat-1", "email": "ana@example.com"}
OTHER_PATIENT = {"uid": "pat-2", "email": "ben@example.com"}
DOCTOR = {"uid": "doc-1", "email": "lee@example.com"}
OTHER_DOCTOR = {"uid": "doc-2", "email": "moss@example.com"}
ADMIN = {"uid": "adm-1", "email": "root@example.com"}


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.db = FakeFirestore()
        self._previous_db = firebase.db
        firebase.db = self.db

        users = self.db.collection("users")
        users.document("pat-1").set({
            "name": "Ana Ruiz", "email": "ana@example.com", "role": "patient",
            "bmi": "32", "smokingHabits": "Current smoker",
        })
        users.document("pat-2").set({"name": "Ben Okafor", "email": "ben@example.com", "role": "patient"})
        users.document("doc-1").set({"name": "Lee", "email": "lee@example.com", "role": "doctor"})
        users.document("doc-2").set({"name": "Moss", "email": "moss@example.com", "role": "doctor"})
        users.document("adm-1").set({"name": "Root", "email": "root@example.com", "role": "admin"})

        self.caller = PATIENT
        app.dependency_overrides[get_current_user] = lambda: self.caller
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        firebase.db = self._previous_db

    def as_user(self, user):
        self.caller = user
