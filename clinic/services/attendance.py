from __future__ import annotations

import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from clinic.exceptions import ApiError
from clinic.models import Attendance, Doctor

logger = logging.getLogger(__name__)


def format_attendance(record: Attendance) -> dict:
    return {
        'id': str(record.id),
        'doctorId': str(record.doctor_id),
        'date': record.date.isoformat(),
        'checkIn': record.check_in.isoformat() if record.check_in else None,
        'checkOut': record.check_out.isoformat() if record.check_out else None,
        'totalHours': record.total_hours,
        'status': record.status,
    }


def today_record(doctor: Doctor):
    return Attendance.objects.filter(doctor=doctor, date=timezone.localdate()).first()


def check_in(doctor: Doctor) -> Attendance:
    if today_record(doctor):
        raise ApiError('Already checked in for today')
    try:
        with transaction.atomic():
            record = Attendance.objects.create(
                doctor=doctor, date=timezone.localdate(), check_in=timezone.now(), status='present'
            )
    except IntegrityError:
        raise ApiError('Already checked in for today')
    logger.info('Doctor %s checked in', doctor.id)
    return record


def check_out(doctor: Doctor) -> Attendance:
    record = today_record(doctor)
    if not record:
        raise ApiError('You have not checked in today')
    if record.check_out:
        raise ApiError('Already checked out today')
    now = timezone.now()
    record.check_out = now
    record.total_hours = round((now - record.check_in).total_seconds() / 3600, 2)
    record.save(update_fields=['check_out', 'total_hours', 'updated_at'])
    logger.info('Doctor %s checked out after %.2fh', doctor.id, record.total_hours)
    return record


def attendance_status(doctor: Doctor) -> dict:
    record = today_record(doctor)
    return {
        'checkedIn': record is not None,
        'checkedOut': bool(record and record.check_out),
        'checkInTime': record.check_in.isoformat() if record else None,
        'checkOutTime': record.check_out.isoformat() if record and record.check_out else None,
        'totalHours': record.total_hours if record else 0,
    }


def attendance_history(doctor: Doctor) -> list[dict]:
    qs = Attendance.objects.filter(doctor=doctor).order_by('-date')[:settings.ATTENDANCE_HISTORY_LIMIT]
    return [format_attendance(r) for r in qs]
