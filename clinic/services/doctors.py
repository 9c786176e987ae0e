from __future__ import annotations

import uuid
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Max
from rest_framework.exceptions import NotFound

from clinic.models import Appointment, Doctor, Hospital


def _as_uuid(value) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def find_doctor(identifier) -> Optional[Doctor]:
    """Find a doctor by its own id, falling back to the doctor's user id."""
    value = _as_uuid(identifier)
    if value is None:
        return None
    qs = Doctor.objects.select_related('hospital')
    return qs.filter(pk=value).first() or qs.filter(user_id=value).first()


def doctor_for_user(user) -> Doctor:
    doctor = Doctor.objects.select_related('hospital').filter(user_id=getattr(user, 'pk', None)).first()
    if not doctor:
        raise NotFound('Doctor profile not found')
    return doctor


def resolve_hospital(identifier) -> Optional[Hospital]:
    """Resolve a hospital from its id or, failing that, its slug."""
    hospital = None
    value = _as_uuid(identifier)
    if value is not None:
        hospital = Hospital.objects.filter(pk=value).first()
    if hospital is None and identifier:
        hospital = Hospital.objects.filter(slug=str(identifier).lower()).first()
    return hospital


def split_name(name: str | None, default_last: str = 'Doc') -> tuple[str, str]:
    parts = (name or '').split()
    if not parts:
        return 'Doctor', default_last
    return parts[0], ' '.join(parts[1:]) or default_last


def format_doctor_public(doctor: Doctor) -> dict:
    return {
        'id': str(doctor.id),
        'firstName': doctor.first_name,
        'lastName': doctor.last_name,
        'specialization': doctor.specialization,
        'qualification': doctor.qualification,
        'availableSlots': doctor.available_slots or [],
        'consultationFee': float(doctor.consultation_fee or 0),
    }


def format_doctor(doctor: Doctor) -> dict:
    return {
        **format_doctor_public(doctor),
        'userId': str(doctor.user_id),
        'phone': doctor.phone,
        'licenseNumber': doctor.license_number,
        'hospitalId': str(doctor.hospital_id),
        'maxAppointmentsPerSlot': doctor.max_appointments_per_slot,
        'isActive': doctor.is_active,
        'createdAt': doctor.created_at.isoformat() if doctor.created_at else None,
        'updatedAt': doctor.updated_at.isoformat() if doctor.updated_at else None,
    }


def hospital_doctors_cache_key(hospital_id) -> str:
    return f"hospital-doctors:{hospital_id}"


def invalidate_hospital_doctors(hospital_id) -> None:
    if hospital_id:
        cache.delete(hospital_doctors_cache_key(hospital_id))


def list_hospital_doctors(hospital: Hospital) -> dict:
    """Public doctor listing for a hospital's booking page (cached)."""
    key = hospital_doctors_cache_key(hospital.id)
    cached = cache.get(key)
    if cached:
        return cached
    doctors = Doctor.objects.filter(hospital=hospital, is_active=True).order_by('first_name', 'last_name')
    payload = {
        'hospital': {'name': hospital.name, 'id': str(hospital.id), 'slug': hospital.slug},
        'doctors': [format_doctor_public(d) for d in doctors],
    }
    cache.set(key, payload, settings.CACHE_TTL)
    return payload


def doctor_patients(doctor: Doctor) -> list[dict]:
    """Distinct patients seen by a doctor, grouped by phone number."""
    rows = (
        Appointment.objects.filter(doctor=doctor)
        .values('patient_phone')
        .annotate(last_visit=Max('appointment_date'), total_visits=Count('id'))
        .order_by('-last_visit')
    )
    data = []
    for index, row in enumerate(rows):
        latest = (
            Appointment.objects.filter(doctor=doctor, patient_phone=row['patient_phone'])
            .order_by('-appointment_date', '-created_at')
            .first()
        )
        data.append({
            'id': str(latest.patient_id) if latest and latest.patient_id else f"temp-{index}",
            'name': (latest.patient_name if latest else '') or 'Guest Patient',
            'email': (latest.patient_email if latest else '') or '',
            'phone': row['patient_phone'] or 'N/A',
            'lastVisit': row['last_visit'].isoformat() if row['last_visit'] else None,
            'totalVisits': row['total_visits'],
            'status': 'active',
            'doctorId': str(doctor.id),
        })
    return data
