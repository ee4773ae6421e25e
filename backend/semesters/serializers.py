from rest_framework import serializers

from users.serializers import InstructorSerializer
from .models import Semester, SemesterType


class SemesterSerializer(serializers.ModelSerializer):
    hod_at_start = serializers.EmailField(source="hod_at_start.email", read_only=True, default=None)
    dca_convener_at_start = serializers.EmailField(
        source="dca_convener_at_start.email", read_only=True, default=None
    )

    class Meta:
        model = Semester
        fields = [
            "id", "academic_year", "semester_type", "start_date", "end_date",
            "allocation_deadline", "allocation_status", "form",
            "hod_at_start", "dca_convener_at_start", "created_at", "updated_at",
        ]
        read_only_fields = fields


class CreateSemesterSerializer(serializers.Serializer):
    academic_year = serializers.IntegerField(min_value=2000, max_value=2100)
    semester_type = serializers.ChoiceField(choices=SemesterType.choices)
    start_date = serializers.DateTimeField(required=False, allow_null=True)
    end_date = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and end <= start:
            raise serializers.ValidationError({"end_date": "End date must be after the start date."})
        return attrs


class LinkFormSerializer(serializers.Serializer):
    form_id = serializers.IntegerField()


class PublishFormSerializer(serializers.Serializer):
    allocation_deadline = serializers.DateTimeField()
    email_body = serializers.CharField()
    role_id = serializers.IntegerField(required=False, allow_null=True)


class LatestSemesterQuerySerializer(serializers.Serializer):
    minimal = serializers.BooleanField(required=False, default=False)
    stats = serializers.BooleanField(required=False, default=False)


class DegreeStatsSerializer(serializers.Serializer):
    notStarted = serializers.IntegerField()
    pending = serializers.IntegerField()
    completed = serializers.IntegerField()


class LatestSemesterSerializer(serializers.Serializer):
    semester = SemesterSerializer()
    responders = InstructorSerializer(many=True, required=False)
    not_responded = InstructorSerializer(many=True, required=False)
    allocation_stats = serializers.DictField(child=DegreeStatsSerializer(), required=False)
