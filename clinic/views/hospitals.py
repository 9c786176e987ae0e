"""
Hospital directory (public) and hospital admin user management.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated

from clinic.models import Hospital, User
from clinic.permissions import IsHospitalAdmin
from clinic.responses import created, ok
from clinic.serializers.hospitals import (
    HospitalDetailsSerializer,
    HospitalUserCreateSerializer,
    UserStatusSerializer,
)
from clinic.services import hospitals as hospital_service
from clinic.services.audit import log_action
from clinic.services.doctors import list_hospital_doctors, resolve_hospital


@api_view(['GET'])
@permission_classes([AllowAny])
def list_hospitals(request):
    data = [
        {'id': str(h.id), 'name': h.name, 'address': h.address, 'phone': h.phone, 'slug': h.slug}
        for h in Hospital.objects.filter(is_active=True).order_by('name')
    ]
    return ok(data)


@api_view(['GET'])
@permission_classes([AllowAny])
def hospital_doctors(request, hospital_ref):
    hospital = resolve_hospital(hospital_ref)
    if not hospital:
        raise NotFound('Hospital not found')
    return ok(list_hospital_doctors(hospital))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def hospital_users(request):
    admin = request.user
    if request.method == 'GET':
        qs = User.objects.filter(hospital_id=admin.hospital_id).select_related('hospital').order_by('-created_at')
        return ok([hospital_service.format_user(u) for u in qs])

    s = HospitalUserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if vd['role'] == User.ROLE_DOCTOR:
        user, _, password = hospital_service.create_doctor_account(
            admin.hospital,
            name=vd['name'],
            email=vd['email'],
            password=vd.get('password') or None,
            specialization=vd.get('specialization'),
            qualification=vd.get('qualification'),
            phone=vd.get('phone'),
        )
    else:
        user, password = hospital_service.create_staff_account(
            admin.hospital, name=vd['name'], email=vd['email'], password=vd.get('password') or None
        )
    log_action(user=admin, action='user_onboard', object_type='user', object_id=user.id, detail={'role': user.role})
    return created(
        {'user': hospital_service.format_user(user), 'credentials': {'email': user.email, 'password': password}},
        'User added successfully',
    )


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def delete_hospital_user(request, user_id):
    hospital_service.remove_member(request.user, user_id)
    log_action(user=request.user, action='user_delete', object_type='user', object_id=user_id)
    return ok(message='User deleted successfully')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def hospital_user_status(request, user_id):
    s = UserStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = hospital_service.set_member_active(request.user, user_id, s.validated_data['isActive'])
    log_action(user=request.user, action='user_status', object_type='user', object_id=user_id,
               detail={'isActive': user.is_active})
    return ok(hospital_service.format_user(user), 'User status updated')


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def hospital_details(request):
    hospital = request.user.hospital
    if hospital is None:
        raise NotFound('Hospital not found')
    s = HospitalDetailsSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    hospital = hospital_service.update_hospital_details(hospital, s.validated_data)
    return ok(hospital_service.format_hospital(hospital), 'Hospital details updated')
