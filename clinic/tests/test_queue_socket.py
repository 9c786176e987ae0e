import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.testing import WebsocketCommunicator
from django.utils import timezone

from clinic.models import Appointment
from clinic.services.appointments import book_appointment, update_status
from clinicflow.asgi import application

pytestmark = pytest.mark.django_db


def _run(coro_fn):
    return async_to_sync(coro_fn)()


def test_hospital_socket_sends_snapshot_then_refreshes_on_booking(hospital, doctor):
    async def scenario():
        comm = WebsocketCommunicator(application, f"/ws/queue/hospital/{hospital.id}/")
        connected, _ = await comm.connect()
        assert connected

        first = await comm.receive_json_from()
        assert first['type'] == 'queue.snapshot'
        assert first['event'] is None
        assert first['data']['hospitalName'] == hospital.name
        assert first['data']['queues'][0]['queueCount'] == 0

        await sync_to_async(book_appointment)(
            doctor_ref=doctor.id, patient_name='Walk In', day=timezone.localdate(), slot='09:00 AM'
        )
        update = await comm.receive_json_from()
        assert update['event'] == 'booked'
        assert update['data']['queues'][0]['queueCount'] == 1
        await comm.disconnect()

    _run(scenario)


def test_doctor_socket_refreshes_on_status_change(doctor):
    appt = Appointment.objects.create(
        doctor=doctor, hospital=doctor.hospital, patient_name='Meena', appointment_date=timezone.localdate(),
        start_time='09:00 AM', end_time='09:00 AM', reason='consultation', token_number='t-001',
    )

    async def scenario():
        comm = WebsocketCommunicator(application, f"/ws/queue/doctor/{doctor.id}/")
        connected, _ = await comm.connect()
        assert connected

        first = await comm.receive_json_from()
        assert first['type'] == 'queue.snapshot'
        assert first['data']['current'] is None
        assert len(first['data']['queue']) == 1

        await sync_to_async(update_status)(appt, Appointment.STATUS_IN_PROGRESS)
        update = await comm.receive_json_from()
        assert update['event'] == 'status'
        assert update['data']['current']['id'] == str(appt.id)
        assert update['data']['queue'] == []
        await comm.disconnect()

    _run(scenario)


@pytest.mark.parametrize('route', ['hospital', 'doctor'])
def test_unknown_target_is_closed_with_4004(route):
    async def scenario():
        comm = WebsocketCommunicator(application, f"/ws/queue/{route}/8f1c2b6e-0000-4000-8000-000000000000/")
        connected, code = await comm.connect()
        assert not connected
        assert code == 4004

    _run(scenario)
