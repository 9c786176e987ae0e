from io import StringIO

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.management import call_command
from django.utils import timezone

from clinic.models import Doctor, Hospital, User
from clinic.services.appointments import book_appointment
from clinic.services.queues import doctor_group, hospital_group
from clinic.tests.factories import make_hospital, make_user

pytestmark = pytest.mark.django_db


def test_booking_today_notifies_queue_groups(hospital, doctor):
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(hospital_group(hospital.id), channel)

    appt = book_appointment(doctor_ref=doctor.id, patient_name='Walk In', day=timezone.localdate(), slot='09:00 AM')

    message = async_to_sync(layer.receive)(channel)
    assert message['type'] == 'queue.update'
    assert message['event'] == 'booked'
    assert message['appointmentId'] == str(appt.id)
    assert message['tokenNumber'] == appt.token_number
    async_to_sync(layer.group_discard)(hospital_group(hospital.id), channel)


def test_group_names():
    assert hospital_group('h1') == 'queue.hospital.h1'
    assert doctor_group('d1') == 'queue.doctor.d1'


def test_health_endpoint(api):
    r = api.get('/health')
    assert r.status_code == 200
    body = r.json()
    assert body['status'] == 'ok'
    assert body['database'] == 'connected'


def test_create_superadmin_is_idempotent():
    out = StringIO()
    call_command('create_superadmin', '--email', 'root@clinic.test', '--password', 'secret123', stdout=out)
    user = User.objects.get(email='root@clinic.test')
    assert user.role == User.ROLE_SUPERADMIN and user.is_superuser

    user.role = User.ROLE_PATIENT
    user.save()
    call_command('create_superadmin', '--email', 'root@clinic.test', stdout=out)
    user.refresh_from_db()
    assert user.role == User.ROLE_SUPERADMIN
    assert user.check_password('secret123')


def test_seed_hospitals_backfills_doctor_profiles():
    hospital = make_hospital(name='Seed Hospital', slug='')
    user = make_user(User.ROLE_DOCTOR, hospital=hospital, name='Priya')
    call_command('seed_hospitals', stdout=StringIO())

    hospital = Hospital.objects.get(pk=hospital.pk)
    assert hospital.slug == 'seed-hospital'
    doctor = Doctor.objects.get(user=user)
    assert (doctor.first_name, doctor.last_name) == ('Priya', 'Smith')

    call_command('seed_hospitals', stdout=StringIO())
    assert Doctor.objects.filter(user=user).count() == 1
