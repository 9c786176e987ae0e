"""
Django admin registrations for the clinic models.

Superusers can inspect hospitals, accounts, appointments, leave and
attendance through ``/admin/``.  Only light configuration is applied.
"""

from django.contrib import admin

from .models import (
    Appointment,
    Attendance,
    AuditEvent,
    Doctor,
    DoctorLeave,
    Hospital,
    Patient,
    User,
)


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'email', 'phone', 'is_active', 'created_at')
    list_filter = ('is_active',)
    search_fields = ('name', 'slug', 'email', 'license_number')


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'role', 'hospital', 'is_active', 'is_superuser')
    list_filter = ('role', 'hospital', 'is_active')
    search_fields = ('email', 'name')
    ordering = ('email',)


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'specialization', 'hospital', 'max_appointments_per_slot', 'is_active')
    list_filter = ('hospital', 'is_active')
    search_fields = ('first_name', 'last_name', 'license_number', 'user__email')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'phone', 'gender', 'hospital', 'created_at')
    list_filter = ('hospital', 'gender')
    search_fields = ('first_name', 'last_name', 'phone')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('token_number', 'patient_name', 'doctor', 'appointment_date', 'start_time', 'status')
    list_filter = ('status', 'type', 'hospital', 'appointment_date')
    search_fields = ('token_number', 'patient_name', 'patient_phone', 'patient_email')


@admin.register(DoctorLeave)
class DoctorLeaveAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'date', 'type', 'reason')
    list_filter = ('type',)


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('doctor', 'date', 'check_in', 'check_out', 'total_hours', 'status')
    list_filter = ('status', 'date')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__email')
