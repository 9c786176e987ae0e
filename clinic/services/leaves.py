from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from django.db import transaction
from rest_framework.exceptions import NotFound

from clinic.exceptions import ApiError
from clinic.models import Doctor, DoctorLeave
from clinic.sanitize import clean_text

logger = logging.getLogger(__name__)


def leaves_between(doctor: Doctor, date_from: Optional[date] = None, date_to: Optional[date] = None):
    qs = DoctorLeave.objects.filter(doctor=doctor)
    if date_from:
        qs = qs.filter(date__gte=date_from)
    if date_to:
        qs = qs.filter(date__lte=date_to)
    return qs.order_by('date')


def format_leave(leave: DoctorLeave) -> dict:
    return {
        'id': str(leave.id),
        'doctorId': str(leave.doctor_id),
        'date': leave.date.isoformat(),
        'type': leave.type,
        'blockedSlots': list(leave.blocked_slots or []),
        'reason': leave.reason,
        'createdAt': leave.created_at.isoformat() if leave.created_at else None,
        'updatedAt': leave.updated_at.isoformat() if leave.updated_at else None,
    }


def blocked_dates(doctor: Doctor, date_from: Optional[date] = None, date_to: Optional[date] = None) -> list[dict]:
    """Public view of a doctor's leave: no reasons, no ids."""
    return [
        {'date': leave.date.isoformat(), 'type': leave.type, 'blockedSlots': list(leave.blocked_slots or [])}
        for leave in leaves_between(doctor, date_from, date_to)
    ]


@transaction.atomic
def add_leave(
    doctor: Doctor, *, day: date, leave_type: str, blocked_slots: list[str], reason: str = ''
) -> tuple[DoctorLeave, bool, str]:
    """Block ``day`` for ``doctor``.

    Returns ``(leave, created, message)``.  A doctor has at most one
    leave per date: a full-day leave absorbs an existing slot leave and
    slot leaves merge their slots.
    """
    if leave_type == DoctorLeave.TYPE_SLOT and not blocked_slots:
        raise ApiError('At least one slot is required for slot-type leave')
    reason = clean_text(reason)

    existing = DoctorLeave.objects.select_for_update().filter(doctor=doctor, date=day).first()
    if existing:
        if existing.type == DoctorLeave.TYPE_FULL_DAY:
            raise ApiError('This date is already blocked as full-day leave')
        if leave_type == DoctorLeave.TYPE_FULL_DAY:
            existing.type = DoctorLeave.TYPE_FULL_DAY
            existing.blocked_slots = []
            existing.reason = reason or existing.reason
            existing.save()
            logger.info('Leave %s for doctor %s upgraded to full-day', day, doctor.id)
            return existing, False, 'Leave updated to full-day'
        existing.blocked_slots = list(dict.fromkeys([*(existing.blocked_slots or []), *blocked_slots]))
        existing.reason = reason or existing.reason
        existing.save()
        logger.info('Leave %s for doctor %s now blocks %s', day, doctor.id, existing.blocked_slots)
        return existing, False, 'Blocked slots updated'

    leave = DoctorLeave.objects.create(
        doctor=doctor,
        date=day,
        type=leave_type,
        blocked_slots=[] if leave_type == DoctorLeave.TYPE_FULL_DAY else list(dict.fromkeys(blocked_slots)),
        reason=reason,
    )
    logger.info('Leave %s (%s) added for doctor %s', day, leave_type, doctor.id)
    return leave, True, 'Leave added successfully'


def _own_leave(doctor: Doctor, leave_id) -> DoctorLeave:
    leave = DoctorLeave.objects.filter(pk=leave_id, doctor=doctor).first()
    if not leave:
        raise NotFound('Leave not found')
    return leave


def delete_leave(doctor: Doctor, leave_id) -> None:
    leave = _own_leave(doctor, leave_id)
    leave.delete()
    logger.info('Leave %s deleted for doctor %s', leave_id, doctor.id)


def remove_slot(doctor: Doctor, leave_id, slot: str) -> Optional[DoctorLeave]:
    """Unblock one slot; returns None when the leave became empty and was deleted."""
    leave = _own_leave(doctor, leave_id)
    if leave.type == DoctorLeave.TYPE_FULL_DAY:
        raise ApiError('Cannot remove a slot from full-day leave. Delete the leave instead.')
    leave.blocked_slots = [s for s in (leave.blocked_slots or []) if s != slot]
    if not leave.blocked_slots:
        leave.delete()
        return None
    leave.save(update_fields=['blocked_slots', 'updated_at'])
    return leave
