"""
Appointment booking, queue boards and appointment updates.

Booking and the queue boards are public so patients can book from a
hospital's link and waiting rooms can show the queue without a login.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated

from clinic.exceptions import BookingRejected
from clinic.models import User
from clinic.permissions import IsSameHospital
from clinic.responses import created, current_user, ok
from clinic.serializers.appointments import (
    AppointmentUpdateSerializer,
    BookAppointmentSerializer,
    StatusUpdateSerializer,
)
from clinic.services import appointments as booking
from clinic.services.doctors import find_doctor, resolve_hospital
from clinic.services.queues import doctor_queue, hospital_queues

REQUIRED_BOOKING_FIELDS = ('doctorId', 'patientName', 'date', 'time')


@api_view(['POST'])
@permission_classes([AllowAny])
def book_appointment(request):
    if any(not str(request.data.get(f) or '').strip() for f in REQUIRED_BOOKING_FIELDS):
        raise BookingRejected('Missing required fields')
    s = BookAppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    appointment = booking.book_appointment(
        doctor_ref=vd['doctorId'],
        patient_name=vd['patientName'],
        day=vd['date'],
        slot=vd['time'],
        email=vd.get('email'),
        phone=vd.get('phone'),
        appointment_type=vd.get('appointmentType'),
        notes=vd.get('notes'),
        booked_by=current_user(request),
    )
    return created(booking.format_appointment(appointment), 'Appointment booked successfully')

book_appointment.cls.throttle_scope = 'booking'


@api_view(['GET'])
@permission_classes([AllowAny])
def doctor_queue_status(request, doctor_id):
    doctor = find_doctor(doctor_id)
    if not doctor:
        raise NotFound('Doctor not found')
    return ok(doctor_queue(doctor))


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_queue_status(request, hospital_id):
    return ok(hospital_queues(hospital_id, resolve_hospital(hospital_id)))


def _scoped_appointment(request, appointment_id):
    appointment = booking.get_appointment(appointment_id)
    user = request.user
    if user.role == User.ROLE_PATIENT:
        if appointment.created_by_id != user.id:
            raise PermissionDenied('Not authorized to access this resource')
    elif not IsSameHospital().has_object_permission(request, None, appointment):
        raise PermissionDenied('Not authorized to access this resource')
    return appointment


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_appointment_status(request, appointment_id):
    appointment = _scoped_appointment(request, appointment_id)
    s = StatusUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = booking.update_status(appointment, s.validated_data['status'])
    return ok(booking.format_appointment(appointment), 'Appointment status updated')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def update_appointment(request, appointment_id):
    appointment = _scoped_appointment(request, appointment_id)
    s = AppointmentUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    appointment = booking.update_details(appointment, s.validated_data)
    return ok(booking.format_appointment(appointment), 'Appointment updated successfully')
