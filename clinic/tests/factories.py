"""Small builders for test data shared by the API tests."""
import itertools
from datetime import date
from decimal import Decimal

from clinic.models import Doctor, Hospital, Patient, User

_seq = itertools.count(1)


def make_hospital(name='City Care', slug=None, **extra) -> Hospital:
    n = next(_seq)
    return Hospital.objects.create(
        name=name,
        slug=slug if slug is not None else f"city-care-{n}",
        phone='0000000000',
        email=f"contact{n}@citycare.test",
        license_number=f"LIC-{n}",
        **extra,
    )


def make_user(role=User.ROLE_PATIENT, hospital=None, email=None, password='secret123', **extra) -> User:
    n = next(_seq)
    return User.objects.create_user(
        email=email or f"{role}{n}@clinic.test", password=password, role=role, hospital=hospital, **extra
    )


def make_doctor(hospital, first_name='John', last_name='Smith', **extra) -> Doctor:
    user = make_user(User.ROLE_DOCTOR, hospital=hospital, name=f"{first_name} {last_name}")
    return Doctor.objects.create(
        user=user,
        hospital=hospital,
        first_name=first_name,
        last_name=last_name,
        specialization=extra.pop('specialization', 'Cardiology'),
        qualification='MBBS',
        phone='9999999999',
        license_number=f"DOC-{next(_seq)}",
        consultation_fee=extra.pop('consultation_fee', Decimal('500.00')),
        **extra,
    )


def make_patient(hospital, first_name='Asha', last_name='Rao', **extra) -> Patient:
    return Patient.objects.create(
        hospital=hospital,
        first_name=first_name,
        last_name=last_name,
        date_of_birth=extra.pop('date_of_birth', date(1990, 5, 1)),
        gender=extra.pop('gender', 'female'),
        phone=extra.pop('phone', f"98{next(_seq):08d}"),
        **extra,
    )
