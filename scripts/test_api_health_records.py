import json
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from api_testing import ADMIN, DOCTOR, OTHER_PATIENT, ApiTestCase
from health_monitor.api.routes import health_records
from health_monitor.core.config import settings
from health_monitor.services.vitals_advisor import INVALID_INPUT_MESSAGE


class TestSubmitVitals(ApiTestCase):
    def test_valid_reading_is_stored_and_assessed(self):
        resp = self.client.post("/health_records/", json={"bp": "150/95", "heart_rate": 110})
        self.assertEqual(resp.status_code, 201)
        body = resp.json()

        self.assertEqual(body["alert"]["severity"], "warning")
        self.assertTrue(body["alert"]["should_alert"])
        self.assertIn("Tachycardia", body["alert"]["message"])

        recs = body["recommendations"]
        self.assertEqual(recs[0], "Your blood pressure is high.")
        self.assertTrue(recs[1].startswith("Your heart rate is elevated."))
        self.assertIn("current smoker", recs[2])
        self.assertIn("weight management", recs[3])
        self.assertTrue(recs[4].startswith("Your BMI is high."))

        stored = self.db.collection("healthRecords").document(body["id"]).get().to_dict()
        self.assertEqual(stored["userId"], "pat-1")
        self.assertEqual(stored["bp"], "150/95")
        self.assertEqual(stored["heartRate"], "110")
        self.assertNotIn("temperature", stored)
        self.assertIsInstance(stored["timestamp"], datetime)

    def test_invalid_reading_is_not_stored(self):
        resp = self.client.post("/health_records/", json={"bp": "120", "heart_rate": "70"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], INVALID_INPUT_MESSAGE)
        self.assertEqual(list(self.db.collection("healthRecords").stream()), [])

    def test_invalid_temperature_is_rejected(self):
        resp = self.client.post(
            "/health_records/", json={"bp": "120/80", "heart_rate": "70", "temperature": "warm"}
        )
        self.assertEqual(resp.status_code, 400)

    def test_only_patients_submit(self):
        self.as_user(DOCTOR)
        resp = self.client.post("/health_records/", json={"bp": "120/80", "heart_rate": "70"})
        self.assertEqual(resp.status_code, 403)


class TestReadRecords(ApiTestCase):
    def setUp(self):
        super().setUp()
        t0 = datetime(2025, 2, 1, 8, 0, tzinfo=timezone.utc)
        records = self.db.collection("healthRecords")
        records.document("r1").set({"userId": "pat-1", "bp": "120/80", "heartRate": "72", "timestamp": t0})
        records.document("r2").set({
            "userId": "pat-1", "bp": "150/95", "heartRate": "45", "temperature": "35.0",
            "timestamp": t0 + timedelta(days=1),
        })
        records.document("r3").set({"userId": "pat-2", "bp": "85/55", "heartRate": "70", "timestamp": t0})

    def test_own_records_newest_first_with_statuses(self):
        items = self.client.get("/health_records/").json()["items"]
        self.assertEqual([i["id"] for i in items], ["r2", "r1"])
        self.assertEqual(items[0]["bpStatus"], "High")
        self.assertEqual(items[0]["hrStatus"], "Low")
        self.assertEqual(items[0]["temperatureStatus"], "Low")
        self.assertEqual(items[1]["temperatureStatus"], "N/A")

    def test_patient_cannot_read_others(self):
        resp = self.client.get("/health_records/", params={"patient_id": "pat-2"})
        self.assertEqual(resp.status_code, 403)

    def test_doctor_and_admin_read_any_patient(self):
        for user in (DOCTOR, ADMIN):
            self.as_user(user)
            items = self.client.get("/health_records/", params={"patient_id": "pat-2"}).json()["items"]
            self.assertEqual([i["id"] for i in items], ["r3"])

    def test_chart(self):
        body = self.client.get("/health_records/chart").json()
        self.assertEqual([p["systolic"] for p in body["series"]], [120, 150])
        self.assertEqual(body["summary"]["count"], 2)
        self.assertEqual(body["summary"]["highBpReadings"], 1)

    def test_assessment_uses_latest_reading_and_profile(self):
        body = self.client.get("/health_records/assessment").json()
        self.assertEqual(body["record_id"], "r2")
        assessment = body["assessment"]
        self.assertEqual(assessment["alert_severity"], "error")
        self.assertEqual(assessment["metric_statuses"]["blood_pressure"], "High")
        self.assertEqual(assessment["overall_risk_tier"], "Moderate")
        self.assertEqual(assessment["risk_score"], 6)
        self.assertEqual([f["name"] for f in body["risk_factors"]], ["Smoking", "BMI"])

    def test_assessment_without_records(self):
        self.as_user(OTHER_PATIENT)
        self.db.collection("healthRecords").document("r3").delete()
        resp = self.client.get("/health_records/assessment")
        self.assertEqual(resp.status_code, 404)



def _events(body):
    return [json.loads(line[len("data: "):]) for line in body.splitlines() if line.startswith("data: ")]


class TestRecordStream(ApiTestCase):
    def setUp(self):
        super().setUp()
        t0 = datetime(2025, 2, 1, 8, 0, tzinfo=timezone.utc)
        self.records = self.db.collection("healthRecords")
        self.records.document("r1").set({"userId": "pat-1", "bp": "120/80", "heartRate": "72", "timestamp": t0})
        self.records.document("r2").set({
            "userId": "pat-1", "bp": "150/95", "heartRate": "72", "timestamp": t0 + timedelta(days=1),
        })
        self.records.document("r3").set({"userId": "pat-2", "bp": "85/55", "heartRate": "70", "timestamp": t0})

    def test_events_carry_full_set_and_stream_closes(self):
        late = threading.Timer(0.2, lambda: self.records.document("r4").set({
            "userId": "pat-1", "bp": "118/76", "heartRate": "64",
            "timestamp": datetime(2025, 2, 3, 8, 0, tzinfo=timezone.utc),
        }))
        with mock.patch.object(settings, "STREAM_MAX_SECONDS", 1.0), \
                mock.patch.object(health_records, "STREAM_KEEPALIVE_SECONDS", 0.1):
            late.start()
            resp = self.client.get("/health_records/stream")
            late.join()

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.headers["content-type"].startswith("text/event-stream"))
        self.assertIn(": keepalive", resp.text)

        events = _events(resp.text)
        first = events[0]["items"]
        self.assertEqual([i["id"] for i in first], ["r2", "r1"])
        self.assertEqual(first[0]["bpStatus"], "High")
        self.assertEqual([i["id"] for i in events[-1]["items"]], ["r4", "r2", "r1"])

        # The Firestore watch is released when the response ends
        self.assertEqual(self.records._watches, [])

    def test_patient_cannot_stream_others(self):
        resp = self.client.get("/health_records/stream", params={"patient_id": "pat-2"})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.records._watches, [])


if __name__ == "__main__":
    unittest.main()
