from rest_framework import serializers

from clinic.models import User
from clinic.sanitize import clean_text


class AddressField(serializers.JSONField):
    """Address given either as an object or as a single street line."""

    def to_internal_value(self, data):
        data = super().to_internal_value(data)
        if isinstance(data, str):
            return {'street': clean_text(data)}
        if not isinstance(data, dict):
            raise serializers.ValidationError('Address must be an object or a string')
        allowed = ('street', 'city', 'state', 'zipCode', 'country')
        return {k: clean_text(str(data[k])) for k in allowed if k in data}


class HospitalUserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=[User.ROLE_DOCTOR, User.ROLE_STAFF])
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    qualification = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')

    def validate_name(self, v):
        return clean_text(v)

    def validate_email(self, v):
        return v.strip().lower()


class UserStatusSerializer(serializers.Serializer):
    isActive = serializers.BooleanField()


class HospitalDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(required=False)
    website = serializers.URLField(required=False, allow_blank=True)
    address = AddressField(required=False)

    def validate_name(self, v):
        return clean_text(v)


class HospitalCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    address = AddressField(required=False)
    licenseNumber = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    adminName = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    adminEmail = serializers.EmailField()
    adminPassword = serializers.CharField(write_only=True, min_length=6)

    def validate_name(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('Hospital name is required')
        return v

    def validate_email(self, v):
        return v.strip().lower()

    def validate_adminEmail(self, v):
        return v.strip().lower()
