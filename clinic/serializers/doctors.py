from rest_framework import serializers

from clinic.sanitize import clean_text


class SlotSerializer(serializers.Serializer):
    dayOfWeek = serializers.IntegerField(min_value=0, max_value=6)
    startTime = serializers.CharField(max_length=20)
    endTime = serializers.CharField(max_length=20)
    isAvailable = serializers.BooleanField(required=False, default=True)


class DoctorProfileUpdateSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=150, required=False)
    lastName = serializers.CharField(max_length=150, required=False)
    specialization = serializers.CharField(max_length=255, required=False)
    qualification = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False)
    consultationFee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    maxAppointmentsPerSlot = serializers.IntegerField(min_value=1, max_value=100, required=False)
    availableSlots = SlotSerializer(many=True, required=False)

    def validate_firstName(self, v):
        return clean_text(v)

    def validate_lastName(self, v):
        return clean_text(v)
