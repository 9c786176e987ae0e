from rest_framework import serializers

from clinic.models import Patient
from clinic.sanitize import clean_text
from clinic.serializers.appointments import FlexibleDateField
from clinic.serializers.hospitals import AddressField


class PatientCreateSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=150)
    lastName = serializers.CharField(max_length=150)
    dateOfBirth = FlexibleDateField()
    gender = serializers.ChoiceField(choices=[c for c, _ in Patient.GENDER_CHOICES])
    phone = serializers.CharField(max_length=32)
    address = AddressField(required=False)
    emergencyContact = serializers.DictField(required=False)
    medicalHistory = serializers.ListField(required=False)
    allergies = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    insuranceInfo = serializers.DictField(required=False)

    def validate_firstName(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('First name is required')
        return v

    def validate_phone(self, v):
        return clean_text(v)

    def validate_gender(self, v):
        return v.lower()
