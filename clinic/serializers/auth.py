from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from clinic.models import User
from clinic.sanitize import clean_text


class OnboardEntrySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    specialization = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    qualification = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')

    def validate_name(self, v):
        return clean_text(v)

    def validate_email(self, v):
        return v.strip().lower()


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=[c for c, _ in User.ROLE_CHOICES], required=False, default=User.ROLE_PATIENT)
    hospitalName = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    hospitalPhone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    doctors = OnboardEntrySerializer(many=True, required=False, default=list)
    staff = OnboardEntrySerializer(many=True, required=False, default=list)

    def validate_name(self, v):
        return clean_text(v)

    def validate_email(self, v):
        return v.strip().lower()

    def validate_hospitalName(self, v):
        return clean_text(v)

    def validate_password(self, v):
        try:
            validate_password(v)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return v

    def validate(self, attrs):
        role = attrs.get('role')
        if role == User.ROLE_ADMIN and attrs.get('hospitalName'):
            emails = [attrs['email']] + [e['email'] for e in attrs.get('doctors', []) + attrs.get('staff', [])]
            if len(set(emails)) != len(emails):
                raise serializers.ValidationError('Duplicate email in registration')
            return attrs
        if role != User.ROLE_PATIENT:
            raise serializers.ValidationError('Only patients can self-register')
        return attrs


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField()

    def validate_email(self, v):
        v = (v or '').strip().lower()
        if not v:
            raise serializers.ValidationError('Email is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    experience = serializers.CharField(max_length=255, required=False, allow_blank=True)
    profileImage = serializers.CharField(max_length=512, required=False, allow_blank=True)
    hospitalImage = serializers.CharField(max_length=512, required=False, allow_blank=True)

    def validate_name(self, v):
        return clean_text(v)

    def validate_experience(self, v):
        return clean_text(v)
