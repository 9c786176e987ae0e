from rest_framework import serializers

from clinic.models import Appointment


class FlexibleDateField(serializers.DateField):
    """Accepts ``YYYY-MM-DD`` or a full ISO datetime and keeps the date part."""

    def to_internal_value(self, value):
        if isinstance(value, str) and 'T' in value:
            value = value.split('T', 1)[0]
        return super().to_internal_value(value)


class BookAppointmentSerializer(serializers.Serializer):
    doctorId = serializers.CharField()
    patientName = serializers.CharField(max_length=255)
    date = FlexibleDateField()
    time = serializers.CharField(max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    appointmentType = serializers.CharField(max_length=32, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_time(self, v):
        return v.strip()


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES])


class AppointmentUpdateSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=255, required=False)
    patientEmail = serializers.EmailField(required=False, allow_blank=True)
    patientPhone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    appointmentDate = FlexibleDateField(required=False)
    startTime = serializers.CharField(max_length=20, required=False)
    endTime = serializers.CharField(max_length=20, required=False)
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES], required=False)
    type = serializers.CharField(max_length=32, required=False)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    paymentStatus = serializers.ChoiceField(choices=[c for c, _ in Appointment.PAYMENT_CHOICES], required=False)

    def validate_type(self, v):
        v = (v or '').strip().lower()
        if v not in {c for c, _ in Appointment.TYPE_CHOICES}:
            raise serializers.ValidationError(f"Unsupported appointment type '{v}'")
        return v
