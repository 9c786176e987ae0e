from datetime import date, timedelta

import pytest
from django.utils import timezone

from clinic.models import Appointment, Patient, User
from clinic.tests.factories import make_hospital, make_patient, make_user

pytestmark = pytest.mark.django_db


def test_admin_sees_only_own_hospital(client_for, admin_user, hospital):
    mine = make_patient(hospital)
    make_patient(make_hospital(name='Other'), first_name='Not', last_name='Mine')
    r = client_for(admin_user).get('/api/v1/patients')
    assert r.status_code == 200
    assert [p['id'] for p in r.data['data']] == [str(mine.id)]
    row = r.data['data'][0]
    assert row['name'] == 'Asha Rao'
    assert row['email'] == 'N/A'
    assert row['hospitalName'] == hospital.name
    assert row['age'] == date.today().year - 1990
    assert row['totalVisits'] == 0


def test_visits_are_counted(client_for, admin_user, hospital, doctor):
    patient = make_patient(hospital)
    day = timezone.localdate() - timedelta(days=2)
    for n in range(2):
        Appointment.objects.create(patient=patient, doctor=doctor, hospital=hospital, appointment_date=day,
                                   start_time='09:00 AM', end_time='09:00 AM', reason='x', token_number=f't-{n}')
    row = client_for(admin_user).get('/api/v1/patients').data['data'][0]
    assert row['totalVisits'] == 2
    assert row['lastVisit'] == day.isoformat()


def test_superadmin_sees_everyone(client_for, superadmin, hospital):
    make_patient(hospital)
    make_patient(make_hospital(name='Other'))
    assert len(client_for(superadmin).get('/api/v1/patients').data['data']) == 2


def test_detail_is_scoped(client_for, admin_user, hospital):
    foreign = make_patient(make_hospital(name='Other'))
    r = client_for(admin_user).get(f'/api/v1/patients/{foreign.id}')
    assert r.status_code == 404
    assert r.data['error']['message'] == 'Patient not found'

    own = make_patient(hospital, allergies=['penicillin'])
    r = client_for(admin_user).get(f'/api/v1/patients/{own.id}')
    assert r.status_code == 200
    assert r.data['data']['allergies'] == ['penicillin']


def test_staff_registers_patient(client_for, hospital):
    staff = make_user(User.ROLE_STAFF, hospital=hospital)
    r = client_for(staff).post('/api/v1/patients', {
        'firstName': 'Vik', 'lastName': 'Shah', 'dateOfBirth': '2000-01-15', 'gender': 'male',
        'phone': '9000000000', 'address': {'city': 'Surat'},
    }, format='json')
    assert r.status_code == 201
    patient = Patient.objects.get(first_name='Vik')
    assert patient.hospital == hospital
    assert patient.address['city'] == 'Surat'


def test_patient_and_doctor_cannot_list(client_for, doctor):
    assert client_for(make_user()).get('/api/v1/patients').status_code == 403
    assert client_for(doctor.user).get('/api/v1/patients').status_code == 403
