from datetime import timedelta

import pytest
from django.utils import timezone

from clinic.models import Attendance

pytestmark = pytest.mark.django_db


@pytest.fixture
def doc_client(client_for, doctor):
    return client_for(doctor.user)


def test_check_in_once_per_day(doc_client):
    r = doc_client.post('/api/v1/attendance/check-in')
    assert r.status_code == 201
    assert r.data['message'] == 'Checked in successfully'
    assert r.data['data']['status'] == 'present'

    r = doc_client.post('/api/v1/attendance/check-in')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Already checked in for today'


def test_check_out_requires_check_in(doc_client):
    r = doc_client.post('/api/v1/attendance/check-out')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'You have not checked in today'


def test_check_out_computes_hours(doc_client, doctor):
    doc_client.post('/api/v1/attendance/check-in')
    Attendance.objects.filter(doctor=doctor).update(check_in=timezone.now() - timedelta(hours=2, minutes=30))

    r = doc_client.post('/api/v1/attendance/check-out')
    assert r.status_code == 200
    assert r.data['message'] == 'Checked out successfully'
    assert r.data['data']['totalHours'] == pytest.approx(2.5, abs=0.01)

    r = doc_client.post('/api/v1/attendance/check-out')
    assert r.status_code == 400
    assert r.data['error']['message'] == 'Already checked out today'


def test_status_reflects_today(doc_client):
    r = doc_client.get('/api/v1/attendance/status')
    assert r.data['data'] == {
        'checkedIn': False, 'checkedOut': False, 'checkInTime': None, 'checkOutTime': None, 'totalHours': 0,
    }
    doc_client.post('/api/v1/attendance/check-in')
    r = doc_client.get('/api/v1/attendance/status')
    assert r.data['data']['checkedIn'] is True
    assert r.data['data']['checkedOut'] is False
    assert r.data['data']['checkInTime']


def test_history_newest_first_limited(doc_client, doctor, settings):
    settings.ATTENDANCE_HISTORY_LIMIT = 3
    today = timezone.localdate()
    for offset in range(5):
        Attendance.objects.create(doctor=doctor, date=today - timedelta(days=offset), check_in=timezone.now())
    r = doc_client.get('/api/v1/attendance/history')
    dates = [row['date'] for row in r.data['data']]
    assert dates == [(today - timedelta(days=o)).isoformat() for o in range(3)]


def test_patient_cannot_check_in(client_for, db):
    from clinic.tests.factories import make_user

    r = client_for(make_user()).post('/api/v1/attendance/check-in')
    assert r.status_code == 403
