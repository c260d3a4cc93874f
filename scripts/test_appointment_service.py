import unittest
from datetime import datetime, timedelta, timezone

from health_monitor.services.appointment_service import (
    APPROVED,
    DECLINED,
    PENDING,
    InvalidStatusTransition,
    build_appointment,
    count_by_status,
    filter_appointments,
    is_in_past,
    next_status,
    sort_by_date,
)

NOW = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)


def _appointments():
    return [
        {"id": "1", "patientName": "Ana Ruiz", "doctorName": "Lee", "status": "Pending",
         "appointmentDate": NOW + timedelta(hours=3)},
        {"id": "2", "patientName": "Ben Okafor", "doctorName": "Lee", "status": "Approved",
         "appointmentDate": NOW + timedelta(days=3)},
        {"id": "3", "patientName": "Cara Singh", "doctorName": "Moss", "status": "Declined",
         "appointmentDate": NOW - timedelta(days=2)},
    ]


class TestStatusTransitions(unittest.TestCase):
    def test_pending_can_be_decided(self):
        self.assertEqual(next_status(PENDING, APPROVED), APPROVED)
        self.assertEqual(next_status("pending", DECLINED), DECLINED)
        self.assertEqual(next_status(None, APPROVED), APPROVED)

    def test_decided_is_terminal(self):
        for current in (APPROVED, DECLINED):
            for target in (APPROVED, DECLINED):
                with self.assertRaises(InvalidStatusTransition):
                    next_status(current, target)

    def test_cannot_reopen(self):
        with self.assertRaises(InvalidStatusTransition):
            next_status(APPROVED, PENDING)


class TestFilters(unittest.TestCase):
    def test_views(self):
        ids = lambda items: [a["id"] for a in items]
        self.assertEqual(ids(filter_appointments(_appointments(), view="today", now=NOW)), ["1"])
        self.assertEqual(ids(filter_appointments(_appointments(), view="upcoming", now=NOW)), ["1", "2"])
        self.assertEqual(ids(filter_appointments(_appointments(), view="past", now=NOW)), ["3"])
        self.assertEqual(len(filter_appointments(_appointments(), now=NOW)), 3)

    def test_status_is_case_insensitive(self):
        items = filter_appointments(_appointments(), status="APPROVED", now=NOW)
        self.assertEqual([a["id"] for a in items], ["2"])

    def test_search_patient_or_doctor(self):
        self.assertEqual([a["id"] for a in filter_appointments(_appointments(), search="moss", now=NOW)], ["3"])
        self.assertEqual([a["id"] for a in filter_appointments(_appointments(), search="ben", now=NOW)], ["2"])

    def test_sort_and_counts(self):
        ordered = sort_by_date(_appointments(), descending=True)
        self.assertEqual([a["id"] for a in ordered], ["2", "1", "3"])
        counts = count_by_status(_appointments())
        self.assertEqual(counts, {"pending": 1, "approved": 1, "declined": 1, "total": 3})


class TestBuild(unittest.TestCase):
    def test_new_appointment_is_pending(self):
        data = build_appointment("p1", "Ana", "Lee", datetime(2030, 1, 1, 10, 0))
        self.assertEqual(data["status"], PENDING)
        self.assertEqual(data["appointmentDate"].tzinfo, timezone.utc)
        self.assertEqual(data["patientId"], "p1")

    def test_is_in_past(self):
        self.assertTrue(is_in_past(NOW - timedelta(minutes=1), now=NOW))
        self.assertFalse(is_in_past(NOW + timedelta(minutes=1), now=NOW))


if __name__ == "__main__":
    unittest.main()
