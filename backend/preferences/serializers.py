from rest_framework import serializers

from courses.models import CourseGroup, SectionType
from users.models import Role
from users.serializers import InstructorSerializer
from .models import FieldType, Form, FormResponse, FormTemplate, TemplateField


class TemplateFieldSerializer(serializers.ModelSerializer):
    """Serializer for TemplateField model."""
    group = serializers.PrimaryKeyRelatedField(
        queryset=CourseGroup.objects.all(), required=False, allow_null=True
    )
    viewable_by_role = serializers.PrimaryKeyRelatedField(
        queryset=Role.objects.all(), required=False, allow_null=True
    )
    group_courses = serializers.SerializerMethodField()

    class Meta:
        model = TemplateField
        fields = [
            'id', 'label', 'type', 'is_required', 'order',
            'preference_count', 'preference_type', 'group', 'group_courses', 'viewable_by_role',
        ]
        read_only_fields = ['id', 'group_courses']

    def get_group_courses(self, obj):
        if obj.group_id is None:
            return None
        return list(obj.group.courses.values_list('code', flat=True))

    def validate(self, attrs):
        if attrs.get('type') == FieldType.PREFERENCE:
            if not attrs.get('preference_count'):
                raise serializers.ValidationError({'preference_count': 'Preference fields need a preference count.'})
            if attrs.get('preference_type') not in SectionType.values:
                raise serializers.ValidationError({'preference_type': 'Preference fields need a section type.'})
        else:
            attrs['preference_count'] = None
            attrs['preference_type'] = None
            attrs['group'] = None
        return attrs


class FormTemplateSerializer(serializers.ModelSerializer):
    """Template with its ordered fields; ``template_fields`` is writable on create."""
    template_fields = TemplateFieldSerializer(source='fields', many=True)
    created_by = serializers.EmailField(source='created_by.email', read_only=True, default=None)

    class Meta:
        model = FormTemplate
        fields = ['id', 'name', 'description', 'template_fields', 'created_by', 'created_at']
        read_only_fields = ['id', 'created_by', 'created_at']

    def validate_template_fields(self, value):
        if not value:
            raise serializers.ValidationError('A template needs at least one field.')
        return value


class FormSerializer(serializers.ModelSerializer):
    template_name = serializers.CharField(source='template.name', read_only=True)
    published_to_role = serializers.CharField(source='published_to_role.role_name', read_only=True, default=None)
    is_published = serializers.BooleanField(read_only=True)

    class Meta:
        model = Form
        fields = [
            'id', 'title', 'description', 'template', 'template_name',
            'published_to_role', 'published_date', 'allocation_deadline', 'is_published',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CreateFormSerializer(serializers.Serializer):
    template_id = serializers.IntegerField()
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')


class FormDetailSerializer(FormSerializer):
    """A form with only the template fields the caller may see."""
    visible_fields = serializers.SerializerMethodField()
    already_responded = serializers.SerializerMethodField()

    class Meta(FormSerializer.Meta):
        fields = FormSerializer.Meta.fields + ['visible_fields', 'already_responded']
        read_only_fields = fields

    def get_visible_fields(self, obj):
        return TemplateFieldSerializer(self.context.get('visible_fields', []), many=True).data

    def get_already_responded(self, obj):
        return self.context.get('already_responded')


class ResponseSubmitSerializer(serializers.Serializer):
    """
    ``response`` is a list of items keyed by ``template_field``; preference
    items carry ``course_code``/``preference``/``taken_consecutively`` and
    teaching-allocation items carry ``teaching_allocation``.
    """
    response = serializers.ListField(child=serializers.DictField(), allow_empty=True)


class FormResponseSerializer(serializers.ModelSerializer):
    field_label = serializers.CharField(source='template_field.label', read_only=True)
    field_type = serializers.CharField(source='template_field.type', read_only=True)
    course_name = serializers.CharField(source='course.name', read_only=True, default=None)

    class Meta:
        model = FormResponse
        fields = [
            'id', 'template_field', 'field_label', 'field_type',
            'course', 'course_name', 'preference', 'taken_consecutively',
            'teaching_allocation', 'submitted_at',
        ]
        read_only_fields = fields


class GroupedResponseSerializer(serializers.Serializer):
    submitted_by = InstructorSerializer()
    submitted_at = serializers.DateTimeField()
    rows = FormResponseSerializer(many=True)


class PeerPreferenceSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='submitted_by.email', read_only=True)
    name = serializers.CharField(source='submitted_by.display_name', read_only=True)
    type = serializers.CharField(source='submitted_by.type', read_only=True)

    class Meta:
        model = FormResponse
        fields = ['email', 'name', 'type', 'preference', 'taken_consecutively', 'submitted_at']
        read_only_fields = fields


class PeerPreferenceQuerySerializer(serializers.Serializer):
    course_code = serializers.CharField()
    section_type = serializers.ChoiceField(choices=SectionType.choices)
