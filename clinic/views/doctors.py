"""
Views for a logged-in doctor: upcoming appointments, patients and profile.
"""
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.models import Appointment
from clinic.permissions import IsDoctor
from clinic.responses import ok
from clinic.serializers.doctors import DoctorProfileUpdateSerializer
from clinic.services.appointments import format_appointment_row
from clinic.services.doctors import doctor_for_user, doctor_patients, format_doctor, invalidate_hospital_doctors

PROFILE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'specialization': 'specialization',
    'qualification': 'qualification',
    'phone': 'phone',
    'consultationFee': 'consultation_fee',
    'maxAppointmentsPerSlot': 'max_appointments_per_slot',
    'availableSlots': 'available_slots',
}


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def upcoming_appointments(request):
    doctor = doctor_for_user(request.user)
    qs = (
        Appointment.objects.filter(doctor=doctor, appointment_date__gte=timezone.localdate())
        .order_by('appointment_date', 'start_time')
    )
    return ok([format_appointment_row(a) for a in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def my_patients(request):
    return ok(doctor_patients(doctor_for_user(request.user)))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsDoctor])
def profile(request):
    doctor = doctor_for_user(request.user)
    if request.method == 'GET':
        return ok(format_doctor(doctor))

    s = DoctorProfileUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    changed = []
    for key, attr in PROFILE_FIELDS.items():
        if key in s.validated_data:
            value = s.validated_data[key]
            if key == 'availableSlots':
                value = [{'isAvailable': True, **dict(slot)} for slot in value]
            setattr(doctor, attr, value)
            changed.append(attr)
    if changed:
        doctor.save(update_fields=changed + ['updated_at'])
        invalidate_hospital_doctors(doctor.hospital_id)
    return ok(format_doctor(doctor), 'Profile updated successfully')
