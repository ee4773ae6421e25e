from django import forms
from django.contrib import admin
from django.utils import timezone

from .models import Faculty, PhD, Permission, Role, RolePermission, User, UserRoles, UserType


class RoleAssignmentInline(admin.TabularInline):
    """Every assignment, disabled ones included, newest first."""
    model = UserRoles
    extra = 0
    fields = ['role', 'is_active', 'assigned_at', 'disabled_at']
    readonly_fields = ['assigned_at', 'disabled_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('role').order_by('-assigned_at')


class FacultyProfileInline(admin.StackedInline):
    model = Faculty
    extra = 0
    max_num = 1
    fields = ['name', 'psrn', 'department']


class PhdProfileInline(admin.StackedInline):
    model = PhD
    extra = 0
    max_num = 1
    fields = ['name', 'erp_id', 'phd_type']


class InstructorAccountForm(forms.ModelForm):
    new_password = forms.CharField(
        required=False,
        widget=forms.PasswordInput(render_value=False),
        help_text="Only set for accounts that log in with a password.",
    )

    class Meta:
        model = User
        exclude = ['password']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Department members; instructors carry a faculty or PhD profile inline."""
    form = InstructorAccountForm
    inlines = [FacultyProfileInline, PhdProfileInline, RoleAssignmentInline]
    list_display = ['email', 'display_name', 'type', 'timetable_id', 'deactivated', 'active_roles']
    list_filter = ['type', 'deactivated', 'phd__phd_type', 'is_staff']
    search_fields = ['email', 'name', 'faculty__psrn', 'phd__erp_id']
    readonly_fields = ['created_at', 'updated_at', 'last_login']
    actions = ['deactivate', 'reactivate']
    fieldsets = (
        (None, {'fields': ('email', 'new_password', 'name', 'type')}),
        ('Access', {'fields': ('deactivated', 'is_active', 'is_staff')}),
        ('History', {'fields': ('last_login', 'created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('faculty', 'phd')

    def get_inline_instances(self, request, obj=None):
        # profile inline only for the matching user type
        hidden = set()
        if obj is None or obj.type != UserType.FACULTY:
            hidden.add(FacultyProfileInline)
        if obj is None or obj.type != UserType.PHD:
            hidden.add(PhdProfileInline)
        return [i for i in super().get_inline_instances(request, obj) if type(i) not in hidden]

    @admin.display(description='PSRN / ERP id')
    def timetable_id(self, obj):
        return obj.external_id or '-'

    @admin.display(description='Roles')
    def active_roles(self, obj):
        return ', '.join(obj.get_user_roles().values_list('role_name', flat=True)) or '-'

    @admin.action(description='Deactivate (drop from forms and candidate lists)')
    def deactivate(self, request, queryset):
        self.message_user(request, f"{queryset.update(deactivated=True)} user(s) deactivated.")

    @admin.action(description='Reactivate')
    def reactivate(self, request, queryset):
        self.message_user(request, f"{queryset.update(deactivated=False)} user(s) reactivated.")

    def save_model(self, request, obj, form, change):
        raw = form.cleaned_data.get('new_password')
        if raw:
            obj.set_password(raw)
        elif not change:
            obj.set_unusable_password()
        super().save_model(request, obj, form, change)


class CapabilityInline(admin.TabularInline):
    model = RolePermission
    extra = 0
    autocomplete_fields = ['permission']


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    inlines = [CapabilityInline]
    list_display = ['role_name', 'capability_count', 'holder_count']
    search_fields = ['role_name']
    readonly_fields = ['created_at', 'updated_at']

    @admin.display(description='Capabilities')
    def capability_count(self, obj):
        return obj.rolepermission_set.count()

    @admin.display(description='Active holders')
    def holder_count(self, obj):
        return obj.userroles_set.filter(is_active=True).count()


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    """Capability keys such as ``allocation:write``; seeded by ``seed_permission``."""
    list_display = ['permission_key', 'description']
    search_fields = ['permission_key']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(UserRoles)
class UserRolesAdmin(admin.ModelAdmin):
    list_display = ['user', 'role', 'is_active', 'assigned_at', 'disabled_at']
    list_filter = ['role', 'is_active']
    search_fields = ['user__email', 'role__role_name']
    readonly_fields = ['assigned_at', 'disabled_at']
    actions = ['disable_assignments']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user', 'role')

    @admin.action(description='Disable selected assignments')
    def disable_assignments(self, request, queryset):
        count = queryset.filter(is_active=True).update(is_active=False, disabled_at=timezone.now())
        self.message_user(request, f"{count} assignment(s) disabled.")
