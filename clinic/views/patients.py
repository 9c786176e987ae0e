"""
Patient record views.

Hospital admins see the patients of their own hospital, the super admin
sees everybody.  Admins and staff can register a new patient record.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated

from clinic.models import User
from clinic.permissions import IsAdminOrSuperAdmin
from clinic.responses import created, ok
from clinic.serializers.patient import PatientCreateSerializer
from clinic.services.audit import log_action
from clinic.services.patients import create_patient, format_patient, format_patient_row, get_patient_for, patients_for


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def patients(request):
    role = getattr(request.user, 'role', '')
    if request.method == 'GET':
        if not IsAdminOrSuperAdmin().has_permission(request, None):
            raise PermissionDenied('Not authorized to access this resource')
        return ok([format_patient_row(p) for p in patients_for(request.user)])

    if role not in (User.ROLE_ADMIN, User.ROLE_STAFF):
        raise PermissionDenied('Not authorized to access this resource')
    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    patient = create_patient(
        request.user,
        first_name=vd['firstName'],
        last_name=vd['lastName'],
        date_of_birth=vd['dateOfBirth'],
        gender=vd['gender'],
        phone=vd['phone'],
        address=vd.get('address'),
        emergency_contact=vd.get('emergencyContact'),
        medical_history=vd.get('medicalHistory'),
        allergies=vd.get('allergies'),
        insurance_info=vd.get('insuranceInfo'),
    )
    log_action(user=request.user, action='patient_create', object_type='patient', object_id=patient.id)
    return created(format_patient(get_patient_for(request.user, patient.id)), 'Patient registered successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrSuperAdmin])
def patient_detail(request, patient_id):
    return ok(format_patient(get_patient_for(request.user, patient_id)))
