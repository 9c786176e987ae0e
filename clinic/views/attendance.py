from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsDoctor
from clinic.responses import created, ok
from clinic.services import attendance as attendance_service
from clinic.services.doctors import doctor_for_user


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def check_in(request):
    record = attendance_service.check_in(doctor_for_user(request.user))
    return created(attendance_service.format_attendance(record), 'Checked in successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctor])
def check_out(request):
    record = attendance_service.check_out(doctor_for_user(request.user))
    return ok(attendance_service.format_attendance(record), 'Checked out successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def today_status(request):
    return ok(attendance_service.attendance_status(doctor_for_user(request.user)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDoctor])
def history(request):
    return ok(attendance_service.attendance_history(doctor_for_user(request.user)))
