# clinic/management/commands/seed_hospitals.py
from django.core.management.base import BaseCommand
from django.db import transaction

from clinic.models import Doctor, Hospital, User
from clinic.services.doctors import invalidate_hospital_doctors, split_name
from clinic.services.hospitals import doctor_license_number, unique_slug


class Command(BaseCommand):
    help = "Backfill hospital slugs and missing doctor profiles (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        slugs = 0
        for hospital in Hospital.objects.filter(slug=""):
            hospital.slug = unique_slug(hospital.name)
            hospital.save(update_fields=["slug", "updated_at"])
            slugs += 1
            self.stdout.write(f"slug: {hospital.name} -> {hospital.slug}")

        profiles = 0
        doctors = User.objects.filter(role=User.ROLE_DOCTOR, hospital__isnull=False, doctor_profile__isnull=True)
        for user in doctors.select_related("hospital"):
            first_name, last_name = split_name(user.name, default_last="Smith")
            Doctor.objects.create(
                user=user,
                hospital=user.hospital,
                first_name=first_name,
                last_name=last_name,
                specialization="General Physician",
                qualification="MBBS",
                phone="0000000000",
                license_number=doctor_license_number(user),
                consultation_fee=500,
            )
            invalidate_hospital_doctors(user.hospital_id)
            profiles += 1
            self.stdout.write(f"doctor profile: {user.email}")

        self.stdout.write(self.style.SUCCESS(f"Seeding completed: {slugs} slugs, {profiles} doctor profiles."))
