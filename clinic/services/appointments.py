"""
Appointment booking and token numbering.

A booking walks through a fixed sequence: resolve the doctor, refuse
dates or slots blocked by leave, refuse full slots, then issue the next
token of the doctor's day and store the appointment.  The checks and
the insert run in one transaction that locks the doctor row, so two
concurrent bookings for the same doctor cannot observe the same
"highest serial" and both claim it.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from rest_framework import status as http_status
from rest_framework.exceptions import NotFound, ValidationError

from clinic.exceptions import BookingRejected
from clinic.models import Appointment, Doctor, DoctorLeave
from clinic.sanitize import clean_text
from clinic.services.doctors import find_doctor
from clinic.services.queues import broadcast_queue_update

logger = logging.getLogger(__name__)

VALID_TYPES = {choice for choice, _ in Appointment.TYPE_CHOICES}
VALID_STATUSES = {choice for choice, _ in Appointment.STATUS_CHOICES}


def parse_token_serial(token: Optional[str]) -> Optional[int]:
    """Return the serial of a ``YYYYMMDD-XX-NNN`` token, or None."""
    parts = (token or '').split('-')
    if len(parts) != 3:
        return None
    try:
        return int(parts[2], 10)
    except ValueError:
        return None


def format_token(day: date, initials: str, serial: int) -> str:
    return f"{day:%Y%m%d}-{initials}-{serial:03d}"


def next_token_number(doctor: Doctor, day: date) -> str:
    """Next token for ``doctor`` on ``day``.

    Serials come from every token issued for ``day``, so cancelled
    bookings and appointments later moved to another date keep theirs.
    """
    tokens = Appointment.objects.filter(
        doctor=doctor, token_number__startswith=f"{day:%Y%m%d}-"
    ).values_list('token_number', flat=True)
    serials = [s for s in (parse_token_serial(t) for t in tokens) if s is not None]
    return format_token(day, doctor.initials, max(serials, default=0) + 1)


def slot_capacity(doctor: Doctor) -> int:
    return doctor.max_appointments_per_slot or settings.DEFAULT_MAX_APPOINTMENTS_PER_SLOT


def ensure_not_on_leave(doctor: Doctor, day: date, slot: str) -> None:
    leave = DoctorLeave.objects.filter(doctor=doctor, date=day).first()
    if not leave:
        return
    if leave.type == DoctorLeave.TYPE_FULL_DAY:
        raise BookingRejected('Doctor is not available on this date. Please choose a different date.')
    if leave.blocks(slot):
        raise BookingRejected('This time slot is blocked by the doctor. Please choose a different slot.')


def ensure_slot_capacity(doctor: Doctor, day: date, slot: str) -> None:
    booked = (
        Appointment.objects.filter(doctor=doctor, appointment_date=day, start_time=slot)
        .exclude(status=Appointment.STATUS_CANCELLED)
        .count()
    )
    if booked >= slot_capacity(doctor):
        raise BookingRejected('Appointment slot is already full. Please choose a different slot.')


def book_appointment(
    *,
    doctor_ref,
    patient_name: str,
    day: date,
    slot: str,
    email: str = '',
    phone: str = '',
    appointment_type: Optional[str] = None,
    notes: str = '',
    booked_by=None,
) -> Appointment:
    doctor = find_doctor(doctor_ref)
    if not doctor:
        raise NotFound('Doctor not found')

    raw_type = clean_text(appointment_type) or 'consultation'
    kind = raw_type.lower()
    if kind not in VALID_TYPES:
        raise ValidationError({'appointmentType': f"Unsupported appointment type '{raw_type}'"})

    patient = getattr(booked_by, 'patient_profile', None) if booked_by is not None else None
    if patient is not None and patient.hospital_id != doctor.hospital_id:
        patient = None

    try:
        with transaction.atomic():
            # Serialize bookings per doctor for the rest of the transaction
            Doctor.objects.select_for_update().only('id').get(pk=doctor.pk)
            ensure_not_on_leave(doctor, day, slot)
            ensure_slot_capacity(doctor, day, slot)
            token = next_token_number(doctor, day)
            appointment = Appointment.objects.create(
                doctor=doctor,
                hospital_id=doctor.hospital_id,
                patient=patient,
                patient_name=clean_text(patient_name),
                patient_email=(email or '').strip().lower(),
                patient_phone=(phone or '').strip(),
                appointment_date=day,
                start_time=slot,
                end_time=slot,
                type=kind,
                reason=raw_type,
                notes=clean_text(notes),
                fee=doctor.consultation_fee or 0,
                status=Appointment.STATUS_SCHEDULED,
                token_number=token,
                created_by=booked_by,
            )
    except IntegrityError:
        logger.warning('Token clash for doctor %s on %s', doctor.id, day, exc_info=True)
        raise BookingRejected('Could not issue a token for this date. Please try again.', http_status.HTTP_409_CONFLICT)

    logger.info('Booked %s for doctor %s on %s at %s', token, doctor.id, day, slot)
    broadcast_queue_update(appointment, event='booked')
    return appointment


def get_appointment(appointment_id) -> Appointment:
    appointment = Appointment.objects.select_related('doctor', 'hospital').filter(pk=appointment_id).first()
    if not appointment:
        raise NotFound('Appointment not found')
    return appointment


def update_status(appointment: Appointment, new_status: str) -> Appointment:
    if new_status not in VALID_STATUSES:
        raise ValidationError({'status': f"Invalid status '{new_status}'"})
    old_status = appointment.status
    appointment.status = new_status
    appointment.save(update_fields=['status', 'updated_at'])
    logger.info('Appointment %s status %s -> %s', appointment.id, old_status, new_status)
    broadcast_queue_update(appointment, event='status')
    return appointment


UPDATABLE_FIELDS = {
    'patientName': 'patient_name',
    'patientEmail': 'patient_email',
    'patientPhone': 'patient_phone',
    'appointmentDate': 'appointment_date',
    'startTime': 'start_time',
    'endTime': 'end_time',
    'status': 'status',
    'type': 'type',
    'reason': 'reason',
    'notes': 'notes',
    'fee': 'fee',
    'paymentStatus': 'payment_status',
}


def update_details(appointment: Appointment, changes: dict) -> Appointment:
    """Apply validated camelCase ``changes`` to ``appointment``."""
    fields = []
    for key, attr in UPDATABLE_FIELDS.items():
        if key not in changes:
            continue
        value = changes[key]
        if attr in ('patient_name', 'reason', 'notes'):
            value = clean_text(value)
        if attr == 'type':
            value = value.lower()
        setattr(appointment, attr, value)
        fields.append(attr)
    if fields:
        appointment.save(update_fields=fields + ['updated_at'])
        broadcast_queue_update(appointment, event='updated')
    return appointment


def format_appointment(appointment: Appointment) -> dict:
    return {
        'id': str(appointment.id),
        'doctorId': str(appointment.doctor_id),
        'hospitalId': str(appointment.hospital_id),
        'patientId': str(appointment.patient_id) if appointment.patient_id else None,
        'patientName': appointment.patient_name,
        'patientEmail': appointment.patient_email,
        'patientPhone': appointment.patient_phone,
        'appointmentDate': appointment.appointment_date.isoformat(),
        'startTime': appointment.start_time,
        'endTime': appointment.end_time,
        'status': appointment.status,
        'type': appointment.type,
        'reason': appointment.reason,
        'notes': appointment.notes,
        'fee': float(appointment.fee or 0),
        'paymentStatus': appointment.payment_status,
        'tokenNumber': appointment.token_number,
        'createdAt': appointment.created_at.isoformat() if appointment.created_at else None,
        'updatedAt': appointment.updated_at.isoformat() if appointment.updated_at else None,
    }


def format_appointment_row(appointment: Appointment) -> dict:
    """Compact row used by doctor appointment lists."""
    return {
        'id': str(appointment.id),
        'patientName': appointment.patient_name or 'Guest',
        'patientPhone': appointment.patient_phone or '',
        'date': appointment.appointment_date.isoformat(),
        'time': appointment.start_time,
        'type': appointment.type,
        'status': appointment.status,
        'reason': appointment.reason,
        'tokenNumber': appointment.token_number,
    }
