"""
Daily queue views of appointments and their realtime fan-out.

The "queue" of a doctor is simply today's appointments: the one being
seen (``in-progress``) and the ``scheduled`` ones in token order.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.utils import timezone

from clinic.models import Appointment, Doctor, Hospital

logger = logging.getLogger(__name__)


def hospital_group(hospital_id) -> str:
    return f"queue.hospital.{hospital_id}"


def doctor_group(doctor_id) -> str:
    return f"queue.doctor.{doctor_id}"


def _brief(appointment: Optional[Appointment]) -> Optional[dict]:
    if appointment is None:
        return None
    return {
        'id': str(appointment.id),
        'tokenNumber': appointment.token_number,
        'patientName': appointment.patient_name or 'Unknown',
    }


def _todays(doctor: Doctor, day: date):
    return Appointment.objects.filter(doctor=doctor, appointment_date=day)


def current_appointment(doctor: Doctor, day: date) -> Optional[Appointment]:
    return _todays(doctor, day).filter(status=Appointment.STATUS_IN_PROGRESS).order_by('-updated_at').first()


def waiting_appointments(doctor: Doctor, day: date):
    return _todays(doctor, day).filter(status=Appointment.STATUS_SCHEDULED).order_by('token_number')


def doctor_queue(doctor: Doctor, day: Optional[date] = None) -> dict:
    day = day or timezone.localdate()
    waiting = waiting_appointments(doctor, day)[:settings.DOCTOR_QUEUE_PREVIEW]
    return {
        'current': _brief(current_appointment(doctor, day)),
        'queue': [_brief(a) for a in waiting],
        'doctor': {
            'name': doctor.full_name,
            'specialization': doctor.specialization,
        },
    }


def hospital_queues(hospital_ref, hospital: Optional[Hospital], day: Optional[date] = None) -> dict:
    """Queue board for every doctor of a hospital."""
    day = day or timezone.localdate()
    if hospital is None:
        return {'queues': [], 'hospitalId': str(hospital_ref), 'hospitalName': 'Hospital Queue'}
    queues = []
    for doctor in Doctor.objects.filter(hospital=hospital).order_by('first_name', 'last_name'):
        waiting_qs = waiting_appointments(doctor, day)
        queues.append({
            'doctor': {
                'id': str(doctor.id),
                'name': doctor.full_name,
                'specialization': doctor.specialization,
            },
            'current': _brief(current_appointment(doctor, day)),
            'queue': [_brief(a) for a in waiting_qs[:settings.HOSPITAL_QUEUE_PREVIEW]],
            'queueCount': waiting_qs.count(),
        })
    return {'queues': queues, 'hospitalId': str(hospital.id), 'hospitalName': hospital.name}


def broadcast_queue_update(appointment: Appointment, *, event: str) -> None:
    """Tell queue displays of the appointment's doctor and hospital to refresh."""
    if appointment.appointment_date != timezone.localdate():
        return
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {
        'type': 'queue.update',
        'event': event,
        'appointmentId': str(appointment.id),
        'doctorId': str(appointment.doctor_id),
        'hospitalId': str(appointment.hospital_id),
        'tokenNumber': appointment.token_number,
        'status': appointment.status,
        'ts': timezone.now().isoformat(),
    }
    try:
        async_to_sync(channel_layer.group_send)(doctor_group(appointment.doctor_id), payload)
        async_to_sync(channel_layer.group_send)(hospital_group(appointment.hospital_id), payload)
    except Exception:
        logger.warning('Queue broadcast failed for appointment %s', appointment.id, exc_info=True)
