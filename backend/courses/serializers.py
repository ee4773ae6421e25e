from rest_framework import serializers
from .models import Course, CourseGroup


class CourseSerializer(serializers.ModelSerializer):
    """Serializer for Course model."""

    class Meta:
        model = Course
        fields = [
            'code', 'name', 'lecture_units', 'practical_units', 'total_units',
            'offered_as', 'offered_to', 'offered_also_by',
            'marked_for_allocation', 'fetched_from_ttd', 'timetable_course_id',
        ]
        read_only_fields = ['marked_for_allocation', 'fetched_from_ttd']
        # uniqueness is reported by the service as a conflict
        extra_kwargs = {'code': {'validators': []}}

    def validate_code(self, value):
        value = " ".join(value.upper().split())
        if len(value) < 3:
            raise serializers.ValidationError("Course code must be at least 3 characters long.")
        return value

    def validate_offered_also_by(self, value):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise serializers.ValidationError("Expected a list of department codes.")
        return sorted({v.strip().upper() for v in value if v.strip()})


class MarkCoursesSerializer(serializers.Serializer):
    course_codes = serializers.ListField(child=serializers.CharField(), allow_empty=False)


class CourseGroupSerializer(serializers.ModelSerializer):
    courses = serializers.SlugRelatedField(
        slug_field='code', queryset=Course.objects.all(), many=True, required=False
    )

    class Meta:
        model = CourseGroup
        fields = ['id', 'name', 'description', 'courses']
