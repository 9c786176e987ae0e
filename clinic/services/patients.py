from __future__ import annotations

import logging

from django.db.models import Count, Max
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.models import Patient
from clinic.sanitize import clean_text

logger = logging.getLogger(__name__)


def ensure_bound_hospital_or_raise(user):
    if getattr(user, 'role', '') == 'superadmin':
        return None
    if not getattr(user, 'hospital_id', None):
        raise PermissionDenied('Not authorized to access this resource')
    return user.hospital


def patients_for(user):
    """Patients visible to ``user``: all for the super admin, else own hospital."""
    qs = (
        Patient.objects.select_related('user', 'hospital')
        .annotate(total_visits=Count('appointments'), last_visit=Max('appointments__appointment_date'))
        .order_by('-created_at')
    )
    hospital = ensure_bound_hospital_or_raise(user)
    if hospital is not None:
        qs = qs.filter(hospital=hospital)
    return qs


def get_patient_for(user, patient_id) -> Patient:
    obj = patients_for(user).filter(pk=patient_id).first()
    if not obj:
        raise NotFound('Patient not found')
    return obj


def create_patient(current_user, *, first_name, last_name, date_of_birth, gender, phone,
                   address=None, emergency_contact=None, medical_history=None, allergies=None,
                   insurance_info=None) -> Patient:
    hospital = ensure_bound_hospital_or_raise(current_user)
    if hospital is None:
        raise PermissionDenied('Only hospital members can register patients')
    patient = Patient(
        hospital=hospital,
        first_name=clean_text(first_name),
        last_name=clean_text(last_name),
        date_of_birth=date_of_birth,
        gender=gender,
        phone=(phone or '').strip(),
        emergency_contact=emergency_contact or {},
        medical_history=medical_history or [],
        allergies=allergies or [],
        insurance_info=insurance_info or {},
    )
    if address:
        patient.address = {**patient.address, **address}
    patient.save()
    logger.info('Patient %s registered in hospital %s by %s', patient.id, hospital.id, current_user.email)
    return patient


def format_patient_row(patient: Patient) -> dict:
    last_visit = getattr(patient, 'last_visit', None) or patient.updated_at.date()
    return {
        'id': str(patient.id),
        'name': patient.full_name,
        'email': patient.user.email if patient.user_id else 'N/A',
        'phone': patient.phone,
        'status': 'active',
        'hospitalId': str(patient.hospital_id),
        'hospitalName': patient.hospital.name if patient.hospital_id else 'Unknown',
        'lastVisit': last_visit.isoformat(),
        'gender': patient.gender,
        'age': patient.age,
        'totalVisits': getattr(patient, 'total_visits', 0),
    }


def format_patient(patient: Patient) -> dict:
    return {
        **format_patient_row(patient),
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'dateOfBirth': patient.date_of_birth.isoformat(),
        'address': patient.address,
        'emergencyContact': patient.emergency_contact,
        'medicalHistory': patient.medical_history,
        'allergies': patient.allergies,
        'insuranceInfo': patient.insurance_info,
        'createdAt': patient.created_at.isoformat() if patient.created_at else None,
        'updatedAt': patient.updated_at.isoformat() if patient.updated_at else None,
    }
