from rest_framework import serializers

from clinic.models import DoctorLeave
from clinic.serializers.appointments import FlexibleDateField


class DateRangeQuerySerializer(serializers.Serializer):
    # "from" is a keyword, so the fields cannot be class attributes
    def get_fields(self):
        fields = super().get_fields()
        fields['from'] = FlexibleDateField(required=False)
        fields['to'] = FlexibleDateField(required=False)
        return fields


class LeaveCreateSerializer(serializers.Serializer):
    date = FlexibleDateField(required=False)
    type = serializers.ChoiceField(choices=[c for c, _ in DoctorLeave.TYPE_CHOICES], required=False)
    blockedSlots = serializers.ListField(child=serializers.CharField(max_length=20), required=False, default=list)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')

    def validate_blockedSlots(self, v):
        return [s.strip() for s in v if s and s.strip()]


class RemoveSlotSerializer(serializers.Serializer):
    slot = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
