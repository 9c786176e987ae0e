"""
Database models for the ClinicFlow backend.

These models capture the core concepts of the system: hospitals (the
tenants), users and their roles, doctor and patient profiles,
appointments with their daily token numbers, doctor leave blocks and
attendance.  Nested objects such as addresses or weekly slots are kept
as JSON so that the API can return them as-is.

All primary keys are UUIDs.  Booking accepts either a doctor id or the
doctor's user id and UUIDs guarantee the two can never collide.
"""
from __future__ import annotations

import uuid
from datetime import date

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models


def _default_address() -> dict:
    return {
        'street': '',
        'city': '',
        'state': '',
        'zipCode': '',
        'country': getattr(settings, 'DEFAULT_COUNTRY', 'India'),
    }


class Hospital(models.Model):
    """A tenant of the system.

    Every admin, doctor and staff member belongs to exactly one hospital.
    The slug is used in public booking links.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=255, unique=True)
    address = models.JSONField(default=_default_address, blank=True)
    phone = models.CharField(max_length=32)
    email = models.EmailField()
    website = models.URLField(blank=True)
    license_number = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['name'], name='clinic_hosp_name_idx'),
        ]

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        self.slug = (self.slug or '').strip().lower()
        super().save(*args, **kwargs)

    def address_display(self) -> str:
        """Flatten the address object into a single line."""
        addr = self.address if isinstance(self.address, dict) else {}
        parts = [addr.get('street'), addr.get('city'), addr.get('state'), addr.get('country')]
        return ', '.join(p for p in parts if p)

    def __str__(self) -> str:
        return f"{self.name} ({self.slug})"


class UserManager(BaseUserManager):
    """Manager for email based users."""
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email must be set')
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', User.ROLE_SUPERADMIN)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """Custom user model identified by email.

    Roles: 'superadmin' manages the whole platform, 'admin' manages one
    hospital, 'doctor' and 'staff' work in one hospital and 'patient'
    books appointments.  Non-patient users are bound to a hospital.
    """
    ROLE_SUPERADMIN = 'superadmin'
    ROLE_ADMIN = 'admin'
    ROLE_DOCTOR = 'doctor'
    ROLE_STAFF = 'staff'
    ROLE_PATIENT = 'patient'
    ROLE_CHOICES = [
        (ROLE_SUPERADMIN, 'Super Administrator'),
        (ROLE_ADMIN, 'Hospital Administrator'),
        (ROLE_DOCTOR, 'Doctor'),
        (ROLE_STAFF, 'Staff'),
        (ROLE_PATIENT, 'Patient'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = None
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True, default='')
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='users', db_index=True
    )
    experience = models.CharField(max_length=255, blank=True, default='')
    profile_image = models.CharField(max_length=512, blank=True, default='')
    hospital_image = models.CharField(max_length=512, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS: list[str] = []

    objects = UserManager()

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'role'], name='clinic_user_hosp_role_idx'),
        ]

    @property
    def hospital_name(self) -> str:
        return self.hospital.name if self.hospital_id else ''

    def save(self, *args, **kwargs):
        self.email = (self.email or '').strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.email} ({self.role})"


class Doctor(models.Model):
    """Professional profile of a user with the 'doctor' role."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='doctor_profile')
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    specialization = models.CharField(max_length=255, db_index=True)
    qualification = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    license_number = models.CharField(max_length=100, unique=True)
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='doctors')
    consultation_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    max_appointments_per_slot = models.PositiveIntegerField(default=5)
    # [{"dayOfWeek": 0-6, "startTime": "09:00 AM", "endTime": "01:00 PM", "isAvailable": true}]
    available_slots = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'is_active'], name='clinic_doc_hosp_active_idx'),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        first = self.first_name[:1].upper() if self.first_name else ''
        last = self.last_name[:1].upper() if self.last_name else ''
        return (first + last) or 'DR'

    def __str__(self) -> str:
        return f"Dr. {self.full_name} ({self.specialization})"


class Patient(models.Model):
    """A patient record registered with a hospital."""
    GENDER_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
    ]
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='patient_profile'
    )
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    date_of_birth = models.DateField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    phone = models.CharField(max_length=32, db_index=True)
    address = models.JSONField(default=_default_address, blank=True)
    emergency_contact = models.JSONField(default=dict, blank=True)
    medical_history = models.JSONField(default=list, blank=True)
    allergies = models.JSONField(default=list, blank=True)
    insurance_info = models.JSONField(default=dict, blank=True)
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='patients')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['first_name', 'last_name'], name='clinic_pat_name_idx'),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def age(self) -> int:
        return date.today().year - self.date_of_birth.year

    def __str__(self) -> str:
        return f"{self.full_name} ({self.phone})"


class Appointment(models.Model):
    """A booked visit with a daily sequential token number.

    Tokens look like ``20250314-JS-007``: booking date, doctor initials
    and the serial within that doctor's day.
    """
    STATUS_SCHEDULED = 'scheduled'
    STATUS_CONFIRMED = 'confirmed'
    STATUS_IN_PROGRESS = 'in-progress'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_NO_SHOW = 'no-show'
    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_CONFIRMED, 'Confirmed'),
        (STATUS_IN_PROGRESS, 'In progress'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
        (STATUS_NO_SHOW, 'No show'),
    ]
    TYPE_CHOICES = [
        ('consultation', 'Consultation'),
        ('follow-up', 'Follow-up'),
        ('emergency', 'Emergency'),
        ('checkup', 'Checkup'),
    ]
    PAYMENT_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('refunded', 'Refunded'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    patient_name = models.CharField(max_length=255, blank=True, default='')
    patient_email = models.EmailField(blank=True, default='')
    patient_phone = models.CharField(max_length=32, blank=True, default='')
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='appointments')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='appointments')
    appointment_date = models.DateField()
    start_time = models.CharField(max_length=20)
    end_time = models.CharField(max_length=20)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SCHEDULED, db_index=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='consultation')
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True, default='')
    fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_CHOICES, default='pending')
    token_number = models.CharField(max_length=40, blank=True, default='')
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['hospital', 'appointment_date'], name='clinic_appt_hosp_date_idx'),
            models.Index(fields=['doctor', 'appointment_date'], name='clinic_appt_doc_date_idx'),
            models.Index(fields=['doctor', 'appointment_date', 'start_time'], name='clinic_appt_doc_slot_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['doctor', 'token_number'],
                condition=~models.Q(token_number=''),
                name='uniq_doctor_token_number',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.token_number or self.id} {self.patient_name} @ {self.appointment_date} {self.start_time}"


class DoctorLeave(models.Model):
    """A date blocked by a doctor, either entirely or for given slots."""
    TYPE_FULL_DAY = 'full-day'
    TYPE_SLOT = 'slot'
    TYPE_CHOICES = [
        (TYPE_FULL_DAY, 'Full day'),
        (TYPE_SLOT, 'Slot'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name='leaves')
    date = models.DateField()
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    # Only used for slot leaves, e.g. ["09:00 AM", "09:30 AM"]
    blocked_slots = models.JSONField(default=list, blank=True)
    reason = models.CharField(max_length=255, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'date'], name='uniq_doctor_leave_date'),
        ]

    def blocks(self, slot: str) -> bool:
        """Return True if this leave blocks ``slot`` on its date."""
        if self.type == self.TYPE_FULL_DAY:
            return True
        return slot in (self.blocked_slots or [])

    def __str__(self) -> str:
        return f"Leave({self.doctor_id}, {self.date:%Y-%m-%d}, {self.type})"


class Attendance(models.Model):
    """Daily check-in/check-out record of a doctor."""
    STATUS_CHOICES = [
        ('present', 'Present'),
        ('absent', 'Absent'),
        ('leave', 'Leave'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    doctor = models.ForeignKey(Doctor, on_delete=models.PROTECT, related_name='attendance')
    date = models.DateField()
    check_in = models.DateTimeField()
    check_out = models.DateTimeField(null=True, blank=True)
    total_hours = models.FloatField(default=0)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='present')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['doctor', 'date'], name='uniq_doctor_attendance_date'),
        ]

    def __str__(self) -> str:
        return f"Attendance({self.doctor_id}, {self.date:%Y-%m-%d}, {self.status})"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audit_action_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audit_object_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.created_at:%F %T}"
