"""
Hospital onboarding and account provisioning.

Covers the self-service hospital registration (admin + hospital +
initial doctors and staff), the super admin's "create hospital with
admin" and the hospital admin's user management.  Every multi-row flow
runs in a transaction so a failure halfway leaves nothing behind.
"""
from __future__ import annotations

import logging
import random
import re
import secrets
from typing import Iterable, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, ProtectedError, Q
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied

from clinic.exceptions import ApiError
from clinic.models import Doctor, Hospital
from clinic.services.doctors import invalidate_hospital_doctors, split_name

logger = logging.getLogger(__name__)

User = get_user_model()


def create_slug(name: str) -> str:
    slug = (name or '').lower()
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'[^\w\-]+', '', slug)
    slug = re.sub(r'\-\-+', '-', slug)
    return slug.strip('-')


def unique_slug(name: str) -> str:
    slug = create_slug(name) or 'hospital'
    candidate = slug
    while Hospital.objects.filter(slug=candidate).exists():
        candidate = f"{slug}-{random.randint(0, 999)}"
    return candidate


def generate_password() -> str:
    return secrets.token_urlsafe(9)


def doctor_license_number(user) -> str:
    return f"DOC-{str(user.pk).replace('-', '')[:6].upper()}-{random.randint(0, 999)}"


def ensure_email_free(email: str, message: str = 'Email already registered') -> None:
    if User.objects.filter(email__iexact=(email or '').strip()).exists():
        raise ApiError(message)


@transaction.atomic
def create_doctor_account(hospital: Hospital, *, name: str, email: str, password: Optional[str] = None,
                          specialization: str = '', qualification: str = '', phone: str = '') -> tuple:
    """Create a doctor user and its Doctor profile; returns (user, doctor, password)."""
    ensure_email_free(email)
    password = password or generate_password()
    user = User.objects.create_user(
        email=email, password=password, name=name or '', role=User.ROLE_DOCTOR, hospital=hospital
    )
    first_name, last_name = split_name(name)
    doctor = Doctor.objects.create(
        user=user,
        hospital=hospital,
        first_name=first_name,
        last_name=last_name,
        specialization=specialization or 'General',
        qualification=qualification or 'MBBS',
        phone=phone or '0000000000',
        license_number=doctor_license_number(user),
    )
    invalidate_hospital_doctors(hospital.id)
    return user, doctor, password


def create_staff_account(hospital: Hospital, *, name: str, email: str, password: Optional[str] = None) -> tuple:
    ensure_email_free(email)
    password = password or generate_password()
    user = User.objects.create_user(
        email=email, password=password, name=name or '', role=User.ROLE_STAFF, hospital=hospital
    )
    return user, password


def _credential(user, password: str) -> dict:
    return {'name': user.name, 'email': user.email, 'password': password, 'role': user.role}


@transaction.atomic
def register_hospital(*, name: str, email: str, password: str, hospital_name: str,
                      hospital_phone: str = '', doctors: Iterable[dict] = (), staff: Iterable[dict] = ()):
    """Self-service registration of a hospital by its first admin.

    Returns ``(admin_user, hospital, generated_credentials)``.
    """
    ensure_email_free(email)
    slug = unique_slug(hospital_name)
    hospital = Hospital.objects.create(
        name=hospital_name,
        slug=slug,
        email=email,
        phone=hospital_phone or '0000000000',
        license_number=f"PENDING-{slug.upper()}-{random.randint(0, 9999)}",
    )
    admin = User.objects.create_user(
        email=email, password=password, name=name or 'Hospital Admin', role=User.ROLE_ADMIN, hospital=hospital
    )

    credentials = []
    for entry in doctors or ():
        user, _, pwd = create_doctor_account(
            hospital,
            name=entry.get('name', ''),
            email=entry['email'],
            specialization=entry.get('specialization', ''),
            qualification=entry.get('qualification', ''),
            phone=entry.get('phone', ''),
        )
        credentials.append(_credential(user, pwd))
    for entry in staff or ():
        user, pwd = create_staff_account(hospital, name=entry.get('name', ''), email=entry['email'])
        credentials.append(_credential(user, pwd))

    logger.info('Registered hospital %s (%s) with %d onboarded users', hospital.name, hospital.slug, len(credentials))
    return admin, hospital, credentials


def create_hospital_with_admin(*, name: str, email: str, phone: str, address=None, license_number: str = '',
                               admin_name: str, admin_email: str, admin_password: str):
    clash = Q(name__iexact=name) | Q(email__iexact=email)
    if license_number:
        clash |= Q(license_number=license_number)
    if Hospital.objects.filter(clash).exists():
        raise ApiError('Hospital with this name, email, or license number already exists')
    ensure_email_free(admin_email, 'Admin email already exists')

    if isinstance(address, str):
        address = {'street': address}
    with transaction.atomic():
        hospital = Hospital(
            name=name,
            email=email,
            phone=phone,
            slug=unique_slug(name),
            license_number=license_number or f"LIC-{secrets.token_hex(4).upper()}-{random.randint(0, 999)}",
        )
        if address:
            hospital.address = {**hospital.address, **address}
        hospital.save()
        admin = User.objects.create_user(
            email=admin_email, password=admin_password, name=admin_name or '', role=User.ROLE_ADMIN,
            hospital=hospital,
        )
    logger.info('Super admin created hospital %s with admin %s', hospital.name, admin.email)
    return hospital, admin


def hospitals_overview():
    """All hospitals, newest first, with member counts."""
    return Hospital.objects.annotate(
        doctor_count=Count('users', filter=Q(users__role=User.ROLE_DOCTOR), distinct=True),
        admin_count=Count('users', filter=Q(users__role=User.ROLE_ADMIN), distinct=True),
        patient_count=Count('patients', distinct=True),
    ).order_by('-created_at')


def format_hospital_overview(hospital: Hospital) -> dict:
    return {
        'id': str(hospital.id),
        'name': hospital.name,
        'address': hospital.address_display() or 'No Address',
        'phone': hospital.phone,
        'email': hospital.email,
        'doctors': hospital.doctor_count,
        'patients': hospital.patient_count,
        'admins': hospital.admin_count,
        'status': 'active' if hospital.is_active else 'inactive',
        'createdAt': hospital.created_at.isoformat() if hospital.created_at else None,
    }


def format_hospital(hospital: Hospital) -> dict:
    return {
        'id': str(hospital.id),
        'name': hospital.name,
        'slug': hospital.slug,
        'address': hospital.address,
        'phone': hospital.phone,
        'email': hospital.email,
        'website': hospital.website,
        'licenseNumber': hospital.license_number,
        'isActive': hospital.is_active,
        'createdAt': hospital.created_at.isoformat() if hospital.created_at else None,
    }


def format_user(user) -> dict:
    return {
        'id': str(user.id),
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'hospitalId': str(user.hospital_id) if user.hospital_id else None,
        'hospitalName': user.hospital_name,
        'experience': user.experience,
        'profileImage': user.profile_image,
        'hospitalImage': user.hospital_image,
        'isActive': user.is_active,
        'createdAt': user.created_at.isoformat() if user.created_at else None,
    }


def hospital_member(admin, user_id):
    user = User.objects.filter(pk=user_id, hospital_id=admin.hospital_id).first()
    if not user:
        raise NotFound('User not found')
    if user.pk == admin.pk:
        raise PermissionDenied('You cannot modify your own account')
    return user


def remove_member(admin, user_id) -> None:
    user = hospital_member(admin, user_id)
    hospital_id = user.hospital_id
    try:
        user.delete()
    except ProtectedError:
        raise ApiError('User has appointment or attendance history. Deactivate the account instead.',
                       status.HTTP_409_CONFLICT)
    invalidate_hospital_doctors(hospital_id)
    logger.info('Admin %s removed user %s', admin.email, user_id)


def set_member_active(admin, user_id, is_active: bool):
    user = hospital_member(admin, user_id)
    user.is_active = is_active
    user.save(update_fields=['is_active', 'updated_at'])
    Doctor.objects.filter(user=user).update(is_active=is_active)
    invalidate_hospital_doctors(user.hospital_id)
    return user


HOSPITAL_DETAIL_FIELDS = ('name', 'phone', 'email', 'website')


def update_hospital_details(hospital: Hospital, changes: dict) -> Hospital:
    for field in HOSPITAL_DETAIL_FIELDS:
        if field in changes:
            setattr(hospital, field, changes[field])
    if 'address' in changes:
        address = changes['address']
        if isinstance(address, str):
            address = {'street': address}
        hospital.address = {**(hospital.address or {}), **(address or {})}
    hospital.save()
    invalidate_hospital_doctors(hospital.id)
    return hospital
