from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated

from clinic.exceptions import ApiError
from clinic.permissions import IsDoctor
from clinic.responses import ok
from clinic.serializers.leaves import DateRangeQuerySerializer, LeaveCreateSerializer, RemoveSlotSerializer
from clinic.services import leaves as leave_service
from clinic.services.audit import log_action
from clinic.services.doctors import doctor_for_user, find_doctor


def _date_range(request):
    q = DateRangeQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data.get('from'), q.validated_data.get('to')


@api_view(['GET'])
@permission_classes([AllowAny])
def blocked_dates(request, doctor_id):
    """Public list of a doctor's blocked dates for the booking calendar."""
    doctor = find_doctor(doctor_id)
    if not doctor:
        raise NotFound('Doctor not found')
    date_from, date_to = _date_range(request)
    return ok(leave_service.blocked_dates(doctor, date_from, date_to))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def leaves(request):
    doctor = doctor_for_user(request.user)
    if request.method == 'GET':
        date_from, date_to = _date_range(request)
        return ok([leave_service.format_leave(l) for l in leave_service.leaves_between(doctor, date_from, date_to)])

    s = LeaveCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if not vd.get('date') or not vd.get('type'):
        raise ApiError('Date and type are required')
    leave, was_created, message = leave_service.add_leave(
        doctor,
        day=vd['date'],
        leave_type=vd['type'],
        blocked_slots=vd.get('blockedSlots') or [],
        reason=vd.get('reason'),
    )
    log_action(user=request.user, action='leave_add', object_type='leave', object_id=leave.id,
               detail={'date': leave.date.isoformat(), 'type': leave.type})
    return ok(leave_service.format_leave(leave), message,
              status=status.HTTP_201_CREATED if was_created else status.HTTP_200_OK)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsDoctor])
def delete_leave(request, leave_id):
    doctor = doctor_for_user(request.user)
    leave_service.delete_leave(doctor, leave_id)
    log_action(user=request.user, action='leave_delete', object_type='leave', object_id=leave_id)
    return ok(message='Leave deleted successfully')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsDoctor])
def remove_slot(request, leave_id):
    doctor = doctor_for_user(request.user)
    s = RemoveSlotSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    slot = s.validated_data['slot'].strip()
    if not slot:
        raise ApiError('Slot is required')
    leave = leave_service.remove_slot(doctor, leave_id, slot)
    if leave is None:
        return ok(message='All slots removed, leave entry deleted')
    return ok(leave_service.format_leave(leave), 'Slot removed from leave')
