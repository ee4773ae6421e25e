from rest_framework import serializers

from courses.models import SectionType
from users.models import UserType
from .models import AllocationSection, MasterAllocation


class InitialSectionSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=SectionType.choices)
    instructors = serializers.ListField(child=serializers.EmailField(), required=False, default=list)


class CreateMasterSerializer(serializers.Serializer):
    course_code = serializers.CharField()
    ic_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    sections = InitialSectionSerializer(many=True, required=False, default=list)


class MasterAllocationSerializer(serializers.ModelSerializer):
    course_name = serializers.CharField(source="course.name", read_only=True)
    ic_email = serializers.EmailField(source="ic.email", read_only=True, default=None)

    class Meta:
        model = MasterAllocation
        fields = ["id", "semester", "course", "course_name", "ic_email", "created_at"]
        read_only_fields = fields


class AddSectionSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=SectionType.choices)


class SectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = AllocationSection
        fields = ["id", "master", "type", "timetable_room_id", "created_at"]
        read_only_fields = fields


class InstructorEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()


class SetICSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_null=True)


class SetRoomSerializer(serializers.Serializer):
    room_id = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=64)


class CandidateQuerySerializer(serializers.Serializer):
    course_code = serializers.CharField()
    section_type = serializers.ChoiceField(choices=SectionType.choices)
    user_type = serializers.ChoiceField(
        choices=[UserType.FACULTY, UserType.PHD], required=False, allow_null=True
    )
    section_id = serializers.IntegerField(required=False, allow_null=True)


class CreditLoadQuerySerializer(serializers.Serializer):
    email = serializers.EmailField()
    section_type = serializers.ChoiceField(choices=SectionType.choices, required=False, allow_null=True)


class PushSerializer(serializers.Serializer):
    send_multi_department_courses = serializers.BooleanField(default=False)
    id_token = serializers.CharField()
