#backend/users/serializers.py
from rest_framework import serializers
from .models import User, Role, Permission, UserRoles, Faculty, PhD


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read)."""
    display_name = serializers.SerializerMethodField()
    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'display_name', 'type',
            'roles', 'deactivated', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.get_full_name()

    def get_roles(self, obj):
        return list(obj.get_user_roles().values_list('role_name', flat=True))


class InstructorSerializer(serializers.ModelSerializer):
    """Faculty or PhD scholar as shown in allocation pickers."""
    display_name = serializers.SerializerMethodField()
    external_id = serializers.SerializerMethodField()
    phd_type = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['email', 'name', 'display_name', 'type', 'external_id', 'phd_type']

    def get_display_name(self, obj):
        return obj.display_name

    def get_external_id(self, obj):
        return obj.external_id

    def get_phd_type(self, obj):
        phd = getattr(obj, 'phd', None)
        return phd.phd_type if phd is not None else None


class FacultySerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Faculty
        fields = ['email', 'name', 'psrn', 'department']


class PhDSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = PhD
        fields = ['email', 'name', 'erp_id', 'phd_type']


class RoleSerializer(serializers.ModelSerializer):
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = ['id', 'role_name', 'description', 'permissions', 'created_at', 'updated_at']
        read_only_fields = ['id', 'permissions', 'created_at', 'updated_at']

    def get_permissions(self, obj):
        return list(
            obj.rolepermission_set.order_by('permission__permission_key')
            .values_list('permission__permission_key', flat=True)
        )


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ['id', 'permission_key', 'description', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class UserRolesSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    role_name = serializers.CharField(source='role.role_name', read_only=True)

    class Meta:
        model = UserRoles
        fields = ['id', 'email', 'role_name', 'assigned_at', 'is_active', 'disabled_at']


class RoleAssignmentSerializer(serializers.Serializer):
    role_name = serializers.CharField(max_length=100)

    def validate_role_name(self, value):
        if not Role.objects.filter(role_name=value).exists():
            raise serializers.ValidationError(f"Role '{value}' does not exist.")
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField(help_text="User's email")
    password = serializers.CharField(write_only=True, help_text="User's password")
