"""
URL mappings for the ClinicFlow API.

Every REST endpoint lives under ``/api/v1/``; ``/api/v1/users/`` is an
alias of the auth routes kept for older clients.  Trailing slashes are
deliberately omitted.
"""
from django.urls import include, path

from .auth_views import jwt_logout_view, jwt_refresh_view, login_view, profile_view, register_view
from .views import appointments, attendance, doctors, health, hospitals, leaves, patients, superadmin

auth_patterns = [
    path('register', register_view),
    path('login', login_view),
    path('refresh', jwt_refresh_view),
    path('profile', profile_view),
    path('logout', jwt_logout_view),
]

api_patterns = [
    # Authentication
    path('auth/', include(auth_patterns)),
    path('users/', include(auth_patterns)),
    # Hospitals
    path('hospitals', hospitals.list_hospitals),
    path('hospitals/users', hospitals.hospital_users),
    path('hospitals/users/<uuid:user_id>', hospitals.delete_hospital_user),
    path('hospitals/users/<uuid:user_id>/status', hospitals.hospital_user_status),
    path('hospitals/details', hospitals.hospital_details),
    path('hospitals/<str:hospital_ref>/doctors', hospitals.hospital_doctors),
    # Appointments and queues
    path('appointments/book', appointments.book_appointment),
    path('appointments/queue/hospital/<str:hospital_id>', appointments.hospital_queue_status),
    path('appointments/queue/<str:doctor_id>', appointments.doctor_queue_status),
    path('appointments/<uuid:appointment_id>/status', appointments.update_appointment_status),
    path('appointments/<uuid:appointment_id>', appointments.update_appointment),
    # Doctor leave
    path('leaves', leaves.leaves),
    path('leaves/blocked/<str:doctor_id>', leaves.blocked_dates),
    path('leaves/<uuid:leave_id>', leaves.delete_leave),
    path('leaves/<uuid:leave_id>/remove-slot', leaves.remove_slot),
    # Attendance
    path('attendance/check-in', attendance.check_in),
    path('attendance/check-out', attendance.check_out),
    path('attendance/status', attendance.today_status),
    path('attendance/history', attendance.history),
    # Doctor self-service
    path('doctors/appointments', doctors.upcoming_appointments),
    path('doctors/patients', doctors.my_patients),
    path('doctors/profile', doctors.profile),
    # Patients
    path('patients', patients.patients),
    path('patients/<uuid:patient_id>', patients.patient_detail),
    # Super admin
    path('superadmin/hospitals', superadmin.hospitals),
]

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('health', health.health),
    path('api/v1/', include(api_patterns)),
]
