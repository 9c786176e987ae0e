# clinic/management/commands/create_superadmin.py
import os

from django.core.management.base import BaseCommand

from clinic.models import User
from clinic.services.hospitals import generate_password


class Command(BaseCommand):
    help = "Create the platform super admin, or promote an existing account (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default=os.getenv("SUPERADMIN_EMAIL", "superadmin@clinic.com"))
        parser.add_argument("--password", default=os.getenv("SUPERADMIN_PASSWORD"))
        parser.add_argument("--name", default="Super Admin")

    def handle(self, *args, **opts):
        email = opts["email"].strip().lower()
        password = opts["password"]
        user = User.objects.filter(email=email).first()
        if user:
            user.role = User.ROLE_SUPERADMIN
            user.is_staff = True
            user.is_superuser = True
            user.is_active = True
            fields = ["role", "is_staff", "is_superuser", "is_active"]
            if password:
                user.set_password(password)
                fields.append("password")
            user.save(update_fields=fields)
            self.stdout.write(self.style.SUCCESS(f"updated: {email} is now superadmin"))
            return

        generated = not password
        password = password or generate_password()
        User.objects.create_superuser(email=email, password=password, name=opts["name"])
        self.stdout.write(self.style.SUCCESS(f"created: {email}"))
        if generated:
            self.stdout.write(f"generated password: {password}")
