"""
Integration tests for booking and the queue boards.

These tests exercise the booking sequence (doctor lookup, leave and
capacity checks, token numbering) and the public queue endpoints using
Django REST Framework's APIClient within the APITestCase base class.

To run the tests:

```
pytest -q clinic/tests
```
"""
from datetime import timedelta
from unittest import mock

from django.core.cache import cache
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from clinic.models import Appointment, DoctorLeave, User
from clinic.services.appointments import format_token, next_token_number, parse_token_serial
from clinic.tests.factories import make_doctor, make_hospital, make_user

BOOK_URL = "/api/v1/appointments/book"


class BookingAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.hospital = make_hospital(name="Sunrise Clinic", slug="sunrise")
        self.doctor = make_doctor(self.hospital, first_name="John", last_name="Smith")
        self.day = timezone.localdate() + timedelta(days=1)
        self.client = APIClient()

    def book(self, **overrides):
        payload = {
            "doctorId": str(self.doctor.id),
            "patientName": "Ravi Kumar",
            "date": self.day.isoformat(),
            "time": "10:00 AM",
            "phone": "9876543210",
            "appointmentType": "Consultation",
        }
        payload.update(overrides)
        return self.client.post(BOOK_URL, payload, format="json")

    def error_message(self, response):
        return response.data["error"]["message"]

    def test_first_booking_gets_serial_001(self):
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["message"], "Appointment booked successfully")
        data = response.data["data"]
        self.assertEqual(data["tokenNumber"], f"{self.day:%Y%m%d}-JS-001")
        self.assertEqual(data["type"], "consultation")
        self.assertEqual(data["reason"], "Consultation")
        self.assertEqual(data["status"], "scheduled")
        self.assertEqual(data["endTime"], "10:00 AM")
        self.assertEqual(data["hospitalId"], str(self.hospital.id))
        self.assertEqual(data["fee"], 500.0)

    def test_serial_increments_across_slots(self):
        self.book()
        self.book(time="10:30 AM")
        third = self.book(time="11:00 AM")
        self.assertEqual(third.data["data"]["tokenNumber"], f"{self.day:%Y%m%d}-JS-003")

    def test_booking_by_doctor_user_id(self):
        response = self.book(doctorId=str(self.doctor.user_id))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["doctorId"], str(self.doctor.id))

    def test_unknown_doctor_is_404(self):
        response = self.book(doctorId="8f1c2b6e-0000-4000-8000-000000000000")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.error_message(response), "Doctor not found")

    def test_missing_fields_rejected(self):
        response = self.client.post(BOOK_URL, {"doctorId": str(self.doctor.id)}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data["success"])
        self.assertEqual(self.error_message(response), "Missing required fields")

    def test_full_day_leave_blocks_booking(self):
        DoctorLeave.objects.create(doctor=self.doctor, date=self.day, type=DoctorLeave.TYPE_FULL_DAY)
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.error_message(response),
            "Doctor is not available on this date. Please choose a different date.",
        )
        self.assertFalse(Appointment.objects.exists())

    def test_slot_leave_blocks_only_that_slot(self):
        DoctorLeave.objects.create(
            doctor=self.doctor, date=self.day, type=DoctorLeave.TYPE_SLOT, blocked_slots=["10:00 AM"]
        )
        blocked = self.book()
        self.assertEqual(blocked.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.error_message(blocked),
            "This time slot is blocked by the doctor. Please choose a different slot.",
        )
        self.assertEqual(self.book(time="11:00 AM").status_code, status.HTTP_201_CREATED)

    def test_slot_capacity_excludes_cancelled(self):
        self.doctor.max_appointments_per_slot = 2
        self.doctor.save()
        first = self.book()
        self.book()
        full = self.book()
        self.assertEqual(full.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            self.error_message(full), "Appointment slot is already full. Please choose a different slot."
        )

        Appointment.objects.filter(pk=first.data["data"]["id"]).update(status=Appointment.STATUS_CANCELLED)
        again = self.book()
        self.assertEqual(again.status_code, status.HTTP_201_CREATED)
        # the cancelled booking keeps its serial
        self.assertEqual(again.data["data"]["tokenNumber"], f"{self.day:%Y%m%d}-JS-003")

    def test_zero_capacity_falls_back_to_default(self):
        self.doctor.max_appointments_per_slot = 0
        self.doctor.save()
        for _ in range(5):
            self.assertEqual(self.book().status_code, status.HTTP_201_CREATED)
        self.assertEqual(self.book().status_code, status.HTTP_400_BAD_REQUEST)

    def test_iso_datetime_date_is_accepted(self):
        response = self.book(date=f"{self.day.isoformat()}T00:00:00.000Z")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["appointmentDate"], self.day.isoformat())

    def test_logged_in_patient_is_recorded_as_creator(self):
        patient = make_user(User.ROLE_PATIENT)
        self.client.force_authenticate(user=patient)
        response = self.book()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Appointment.objects.get().created_by, patient)

    def test_rescheduled_appointment_keeps_its_serial_reserved(self):
        self.book(time="09:00 AM")
        self.book(time="09:30 AM")
        moved = self.book(time="10:00 AM").data["data"]
        self.assertEqual(moved["tokenNumber"], f"{self.day:%Y%m%d}-JS-003")

        staff = make_user(User.ROLE_STAFF, hospital=self.hospital)
        staff_client = APIClient()
        staff_client.force_authenticate(user=staff)
        later = self.day + timedelta(days=1)
        response = staff_client.put(
            f"/api/v1/appointments/{moved['id']}", {"appointmentDate": later.isoformat()}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.book(time="11:00 AM")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["tokenNumber"], f"{self.day:%Y%m%d}-JS-004")
        # the moved appointment does not count towards the new day's serials
        self.assertEqual(next_token_number(self.doctor, later), f"{later:%Y%m%d}-JS-001")

    def test_token_clash_is_a_conflict(self):
        first = self.book().data["data"]
        with mock.patch("clinic.services.appointments.next_token_number", return_value=first["tokenNumber"]):
            response = self.book(time="11:00 AM")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(
            self.error_message(response), "Could not issue a token for this date. Please try again."
        )
        self.assertEqual(Appointment.objects.count(), 1)

    def test_markup_is_stripped_from_free_text(self):
        response = self.book(patientName="<b>Ravi</b> <a href='x'>Kumar</a>", notes="<script>x</script>fasting")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["patientName"], "Ravi Kumar")
        self.assertNotIn("<", response.data["data"]["notes"])


class TokenNumberTests(APITestCase):
    def setUp(self) -> None:
        self.hospital = make_hospital()
        self.day = timezone.localdate()

    def test_parse_token_serial(self):
        self.assertEqual(parse_token_serial("20250314-JS-007"), 7)
        self.assertIsNone(parse_token_serial("garbage"))
        self.assertIsNone(parse_token_serial("20250314-JS-abc"))
        self.assertIsNone(parse_token_serial(""))

    def test_unparseable_tokens_are_ignored(self):
        doctor = make_doctor(self.hospital, first_name="Meera", last_name="Nair")
        for token in ("legacy-token", f"{self.day:%Y%m%d}-MN-004"):
            Appointment.objects.create(
                doctor=doctor, hospital=self.hospital, appointment_date=self.day,
                start_time="09:00 AM", end_time="09:00 AM", reason="x", token_number=token,
            )
        self.assertEqual(next_token_number(doctor, self.day), f"{self.day:%Y%m%d}-MN-005")

    def test_initials_default_to_dr(self):
        doctor = make_doctor(self.hospital, first_name="", last_name="")
        self.assertEqual(next_token_number(doctor, self.day), format_token(self.day, "DR", 1))


class QueueAPITests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.hospital = make_hospital(name="Queue Hospital")
        self.doctor = make_doctor(self.hospital, first_name="Anita", last_name="Desai")
        self.today = timezone.localdate()
        self.client = APIClient()

    def add(self, serial, status_value=Appointment.STATUS_SCHEDULED, name="Patient", doctor=None):
        doctor = doctor or self.doctor
        return Appointment.objects.create(
            doctor=doctor,
            hospital=self.hospital,
            patient_name=name,
            appointment_date=self.today,
            start_time="09:00 AM",
            end_time="09:00 AM",
            reason="consultation",
            status=status_value,
            token_number=format_token(self.today, doctor.initials, serial),
        )

    def test_doctor_queue_shows_current_and_next_five(self):
        self.add(1, Appointment.STATUS_COMPLETED)
        current = self.add(2, Appointment.STATUS_IN_PROGRESS, name="")
        for serial in range(3, 10):
            self.add(serial)

        response = self.client.get(f"/api/v1/appointments/queue/{self.doctor.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["current"]["id"], str(current.id))
        self.assertEqual(data["current"]["patientName"], "Unknown")
        self.assertEqual(len(data["queue"]), 5)
        self.assertEqual(data["queue"][0]["tokenNumber"], format_token(self.today, "AD", 3))
        self.assertEqual(data["doctor"], {"name": "Anita Desai", "specialization": "Cardiology"})

    def test_doctor_queue_accepts_user_id(self):
        self.add(1)
        response = self.client.get(f"/api/v1/appointments/queue/{self.doctor.user_id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["data"]["current"])
        self.assertEqual(len(response.data["data"]["queue"]), 1)

    def test_hospital_queue_counts_all_waiting(self):
        other = make_doctor(self.hospital, first_name="Bala", last_name="Iyer")
        for serial in range(1, 13):
            self.add(serial)
        self.add(1, doctor=other)

        response = self.client.get(f"/api/v1/appointments/queue/hospital/{self.hospital.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data["data"]
        self.assertEqual(data["hospitalName"], "Queue Hospital")
        by_doctor = {q["doctor"]["id"]: q for q in data["queues"]}
        self.assertEqual(len(by_doctor[str(self.doctor.id)]["queue"]), 10)
        self.assertEqual(by_doctor[str(self.doctor.id)]["queueCount"], 12)
        self.assertEqual(by_doctor[str(other.id)]["queueCount"], 1)

    def test_unknown_hospital_queue_is_empty(self):
        response = self.client.get("/api/v1/appointments/queue/hospital/no-such-hospital")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["queues"], [])
        self.assertEqual(response.data["data"]["hospitalName"], "Hospital Queue")


class AppointmentUpdateTests(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        self.hospital = make_hospital()
        self.doctor = make_doctor(self.hospital)
        self.staff = make_user(User.ROLE_STAFF, hospital=self.hospital)
        self.appointment = Appointment.objects.create(
            doctor=self.doctor, hospital=self.hospital, patient_name="Neha",
            appointment_date=timezone.localdate(), start_time="09:00 AM", end_time="09:00 AM",
            reason="consultation", token_number="x-JS-001",
        )

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def test_staff_updates_status(self):
        client = self.authenticate(self.staff)
        response = client.patch(
            f"/api/v1/appointments/{self.appointment.id}/status", {"status": "in-progress"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Appointment status updated")
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.status, "in-progress")

    def test_invalid_status_rejected(self):
        client = self.authenticate(self.staff)
        response = client.patch(
            f"/api/v1/appointments/{self.appointment.id}/status", {"status": "teleported"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_hospital_cannot_touch_appointment(self):
        outsider = make_user(User.ROLE_STAFF, hospital=make_hospital(name="Elsewhere"))
        client = self.authenticate(outsider)
        response = client.patch(
            f"/api/v1/appointments/{self.appointment.id}/status", {"status": "completed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_appointment_is_404(self):
        client = self.authenticate(self.staff)
        response = client.put(
            "/api/v1/appointments/8f1c2b6e-0000-4000-8000-000000000000", {"notes": "x"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Appointment not found")

    def test_update_details_lowercases_type(self):
        client = self.authenticate(self.staff)
        response = client.put(
            f"/api/v1/appointments/{self.appointment.id}",
            {"type": "Follow-Up", "notes": "<b>bring reports</b>"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Appointment updated successfully")
        self.appointment.refresh_from_db()
        self.assertEqual(self.appointment.type, "follow-up")
        self.assertEqual(self.appointment.notes, "bring reports")

    def test_anonymous_cannot_update(self):
        response = APIClient().patch(
            f"/api/v1/appointments/{self.appointment.id}/status", {"status": "completed"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
