import unittest
from datetime import datetime, timedelta, timezone

from api_testing import ADMIN, DOCTOR, OTHER_DOCTOR, OTHER_PATIENT, ApiTestCase


def _future(days=3):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


class TestBooking(ApiTestCase):
    def test_book_is_pending_under_patient_name(self):
        resp = self.client.post(
            "/appointments/", json={"doctor_name": "Lee", "appointment_date": _future()}
        )
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["status"], "Pending")

        stored = self.db.collection("appointments").document(body["id"]).get().to_dict()
        self.assertEqual(stored["patientId"], "pat-1")
        self.assertEqual(stored["patientName"], "Ana Ruiz")
        self.assertEqual(stored["doctorName"], "Lee")

    def test_past_date_rejected(self):
        past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        resp = self.client.post("/appointments/", json={"doctor_name": "Lee", "appointment_date": past})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Cannot book appointments in the past.")

    def test_doctor_required(self):
        resp = self.client.post("/appointments/", json={"doctor_name": "  ", "appointment_date": _future()})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Please select a doctor.")

    def test_only_patients_book(self):
        self.as_user(DOCTOR)
        resp = self.client.post("/appointments/", json={"doctor_name": "Lee", "appointment_date": _future()})
        self.assertEqual(resp.status_code, 403)


class TestListingAndReview(ApiTestCase):
    def setUp(self):
        super().setUp()
        now = datetime.now(timezone.utc)
        coll = self.db.collection("appointments")
        coll.document("a1").set({
            "patientId": "pat-1", "patientName": "Ana Ruiz", "doctorName": "Lee",
            "appointmentDate": now + timedelta(days=2), "status": "Pending",
        })
        coll.document("a2").set({
            "patientId": "pat-2", "patientName": "Ben Okafor", "doctorName": "Lee",
            "appointmentDate": now - timedelta(days=5), "status": "Approved",
        })
        coll.document("a3").set({
            "patientId": "pat-2", "patientName": "Ben Okafor", "doctorName": "Moss",
            "appointmentDate": now + timedelta(days=10), "status": "Pending",
        })

    def test_patient_sees_own(self):
        body = self.client.get("/appointments/").json()
        self.assertEqual([a["id"] for a in body["items"]], ["a1"])
        self.assertEqual(body["counts"]["total"], 1)

    def test_doctor_sees_by_name_with_filters(self):
        self.as_user(DOCTOR)
        body = self.client.get("/appointments/").json()
        self.assertEqual([a["id"] for a in body["items"]], ["a2", "a1"])
        self.assertEqual(body["counts"], {"pending": 1, "approved": 1, "declined": 0, "total": 2})

        body = self.client.get("/appointments/", params={"view": "upcoming"}).json()
        self.assertEqual([a["id"] for a in body["items"]], ["a1"])
        # Counts cover the doctor's whole set, not the filtered view
        self.assertEqual(body["counts"]["total"], 2)

        body = self.client.get("/appointments/", params={"status": "APPROVED", "search": "ben"}).json()
        self.assertEqual([a["id"] for a in body["items"]], ["a2"])

    def test_admin_sees_all_newest_first(self):
        self.as_user(ADMIN)
        body = self.client.get("/appointments/").json()
        self.assertEqual([a["id"] for a in body["items"]], ["a3", "a1", "a2"])

    def test_bad_view_rejected(self):
        self.assertEqual(self.client.get("/appointments/", params={"view": "soon"}).status_code, 422)

    def test_doctor_approves_once(self):
        self.as_user(DOCTOR)
        resp = self.client.post("/appointments/a1/approve")
        self.assertEqual(resp.json(), {"id": "a1", "status": "Approved"})
        stored = self.db.collection("appointments").document("a1").get().to_dict()
        self.assertEqual(stored["status"], "Approved")
        self.assertIn("updatedAt", stored)

        self.assertEqual(self.client.post("/appointments/a1/decline").status_code, 409)

    def test_doctor_cannot_review_colleagues_appointment(self):
        self.as_user(OTHER_DOCTOR)
        self.assertEqual(self.client.post("/appointments/a1/approve").status_code, 403)

    def test_roles_list_claim_keeps_doctor_scope(self):
        self.as_user({**OTHER_DOCTOR, "roles": ["doctor"]})
        self.assertEqual(self.client.post("/appointments/a1/approve").status_code, 403)
        body = self.client.get("/appointments/").json()
        self.assertEqual([a["id"] for a in body["items"]], ["a3"])

    def test_roles_list_claim_for_admin(self):
        self.as_user({**DOCTOR, "roles": ["admin"]})
        body = self.client.get("/appointments/").json()
        self.assertEqual([a["id"] for a in body["items"]], ["a3", "a1", "a2"])
        self.assertEqual(self.client.post("/appointments/a3/approve").json()["status"], "Approved")

    def test_patient_cannot_review(self):
        self.assertEqual(self.client.post("/appointments/a1/approve").status_code, 403)

    def test_admin_declines_and_deletes(self):
        self.as_user(ADMIN)
        self.assertEqual(self.client.post("/appointments/a3/decline").json()["status"], "Declined")
        self.assertEqual(self.client.delete("/appointments/a3").status_code, 200)
        self.assertEqual(self.client.delete("/appointments/a3").status_code, 404)
        self.assertEqual(self.client.post("/appointments/missing/approve").status_code, 404)

    def test_other_patient_view(self):
        self.as_user(OTHER_PATIENT)
        body = self.client.get("/appointments/", params={"view": "past"}).json()
        self.assertEqual([a["id"] for a in body["items"]], ["a2"])


if __name__ == "__main__":
    unittest.main()
