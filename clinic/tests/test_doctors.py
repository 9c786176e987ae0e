from datetime import timedelta

import pytest
from django.utils import timezone

from clinic.models import Appointment

pytestmark = pytest.mark.django_db


def _appt(doctor, day, time='09:00 AM', **extra):
    return Appointment.objects.create(
        doctor=doctor, hospital=doctor.hospital, appointment_date=day, start_time=time, end_time=time,
        reason='consultation', **extra,
    )


def test_upcoming_appointments_skip_past(client_for, doctor):
    today = timezone.localdate()
    _appt(doctor, today - timedelta(days=1), patient_name='Past')
    _appt(doctor, today + timedelta(days=1), patient_name='Later')
    _appt(doctor, today, time='11:00 AM', patient_name='Today')
    r = client_for(doctor.user).get('/api/v1/doctors/appointments')
    assert r.status_code == 200
    assert [a['patientName'] for a in r.data['data']] == ['Today', 'Later']


def test_patients_grouped_by_phone(client_for, doctor):
    today = timezone.localdate()
    _appt(doctor, today - timedelta(days=10), patient_name='Old Name', patient_phone='111', token_number='a')
    _appt(doctor, today - timedelta(days=1), patient_name='Ravi', patient_phone='111', token_number='b')
    _appt(doctor, today - timedelta(days=5), patient_name='', patient_phone='222', token_number='c')

    r = client_for(doctor.user).get('/api/v1/doctors/patients')
    rows = r.data['data']
    assert [row['phone'] for row in rows] == ['111', '222']
    assert rows[0]['name'] == 'Ravi'
    assert rows[0]['totalVisits'] == 2
    assert rows[0]['id'] == 'temp-0'
    assert rows[1]['name'] == 'Guest Patient'


def test_profile_update_allow_list(client_for, doctor):
    client = client_for(doctor.user)
    r = client.put('/api/v1/doctors/profile', {
        'maxAppointmentsPerSlot': 3,
        'availableSlots': [{'dayOfWeek': 1, 'startTime': '09:00 AM', 'endTime': '01:00 PM'}],
        'licenseNumber': 'HACKED',
    }, format='json')
    assert r.status_code == 200
    doctor.refresh_from_db()
    assert doctor.max_appointments_per_slot == 3
    assert doctor.available_slots == [
        {'dayOfWeek': 1, 'startTime': '09:00 AM', 'endTime': '01:00 PM', 'isAvailable': True}
    ]
    assert doctor.license_number != 'HACKED'
    assert client.get('/api/v1/doctors/profile').data['data']['maxAppointmentsPerSlot'] == 3


def test_profile_slots_keep_explicit_availability(client_for, doctor):
    r = client_for(doctor.user).put('/api/v1/doctors/profile', {
        'availableSlots': [
            {'dayOfWeek': 2, 'startTime': '10:00 AM', 'endTime': '12:00 PM', 'isAvailable': False},
            {'dayOfWeek': 3, 'startTime': '10:00 AM', 'endTime': '12:00 PM'},
        ],
    }, format='json')
    assert r.status_code == 200
    doctor.refresh_from_db()
    assert [s['isAvailable'] for s in doctor.available_slots] == [False, True]
    assert all(set(s) == {'dayOfWeek', 'startTime', 'endTime', 'isAvailable'} for s in doctor.available_slots)
