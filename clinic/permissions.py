"""
Custom permission classes for role and hospital based access control.
"""
from rest_framework.permissions import BasePermission


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsSuperAdmin(BasePermission):
    """Only the platform super admin."""
    message = "Not authorized to access this resource"

    def has_permission(self, request, view) -> bool:
        return _role(request) == "superadmin"


class IsHospitalAdmin(BasePermission):
    """Hospital administrators bound to a hospital."""
    message = "Not authorized to access this resource"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin" and bool(getattr(request.user, "hospital_id", None))


class IsAdminOrSuperAdmin(BasePermission):
    """Hospital admin (own hospital) or super admin (everything)."""
    message = "Not authorized to access this resource"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in {"admin", "superadmin"}


class IsDoctor(BasePermission):
    """Allow access only to users with the doctor role."""
    message = "Not authorized to access this resource"

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "doctor"


class IsSameHospital(BasePermission):
    """User must work in the same hospital as the object (expects `obj.hospital_id`)."""
    message = "Not authorized to access this resource"

    def has_object_permission(self, request, view, obj) -> bool:
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if getattr(user, "role", None) == "superadmin":
            return True
        return bool(getattr(user, "hospital_id", None)) and getattr(obj, "hospital_id", None) == user.hospital_id
