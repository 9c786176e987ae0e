from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.permissions import IsSuperAdmin
from clinic.responses import created, ok
from clinic.serializers.hospitals import HospitalCreateSerializer
from clinic.services import hospitals as hospital_service
from clinic.services.audit import log_action


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def hospitals(request):
    if request.method == 'GET':
        return ok([hospital_service.format_hospital_overview(h) for h in hospital_service.hospitals_overview()])

    s = HospitalCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    hospital, admin = hospital_service.create_hospital_with_admin(
        name=vd['name'],
        email=vd['email'],
        phone=vd['phone'],
        address=vd.get('address'),
        license_number=vd.get('licenseNumber'),
        admin_name=vd.get('adminName'),
        admin_email=vd['adminEmail'],
        admin_password=vd['adminPassword'],
    )
    log_action(user=request.user, action='hospital_create', object_type='hospital', object_id=hospital.id,
               detail={'admin': admin.email})
    return created({
        'hospital': hospital_service.format_hospital(hospital),
        'admin': hospital_service.format_user(admin),
    })
