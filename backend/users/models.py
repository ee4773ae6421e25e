# backend/users/models.py
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager
from django.db import models, transaction
from django.utils import timezone
from rich.console import Console
import logging

console = Console()
logger = logging.getLogger(__name__)


class UserType(models.TextChoices):
    FACULTY = "faculty", "Faculty"
    PHD = "phd", "PhD"
    STAFF = "staff", "Staff"


class PhdType(models.TextChoices):
    FULL_TIME = "full-time", "Full time"
    PART_TIME = "part-time", "Part time"


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, role_name=None, **extra_fields):
        if not email:
            raise ValueError("The Email field must be set")

        email = self.normalize_email(email).lower()
        extra_fields.setdefault("is_active", True)

        with transaction.atomic():
            user = self.model(email=email, **extra_fields)
            if password:
                user.set_password(password)
            else:
                user.set_unusable_password()
            user.save(using=self._db)
            if role_name:
                self._assign_role_to_user(user, role_name)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_active", True)
        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        return self.create_user(email, password, role_name="Admin", **extra_fields)

    def _assign_role_to_user(self, user, role_name):
        Role = self.model._meta.apps.get_model("users", "Role")
        UserRoles = self.model._meta.apps.get_model("users", "UserRoles")

        essential_roles = ["Admin", "HoD", "DCA Convener", "DCA Member", "Faculty", "PhD"]
        try:
            role = Role.objects.get(role_name=role_name)
        except Role.DoesNotExist:
            if role_name not in essential_roles:
                raise ValueError(f"Role '{role_name}' does not exist and is not an essential role")
            role, _ = Role.objects.get_or_create(
                role_name=role_name,
                defaults={"description": f"{role_name} role"},
            )

        if UserRoles.objects.filter(user=user, role=role, is_active=True).exists():
            return
        UserRoles.objects.create(user=user, role=role, is_active=True)
        console.print(f"[green]✓ Role assigned:[/green] {user.email} -> {role_name}")


class User(AbstractBaseUser):
    """
    Department member identified by email. Instructors are users of type
    faculty or phd; their identity in the timetable system lives on the
    matching profile row.
    """
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True, null=True)
    type = models.CharField(max_length=20, choices=UserType.choices, default=UserType.STAFF)
    deactivated = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ["email"]

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        """Profile name first, then the account name."""
        profile = self.profile
        return (getattr(profile, "name", None) or self.name or "").strip() or None

    @property
    def profile(self):
        if self.type == UserType.FACULTY:
            return getattr(self, "faculty", None)
        if self.type == UserType.PHD:
            return getattr(self, "phd", None)
        return None

    @property
    def external_id(self):
        """PSRN for faculty, ERP id for PhD scholars."""
        faculty = getattr(self, "faculty", None)
        if faculty is not None and faculty.psrn:
            return faculty.psrn
        phd = getattr(self, "phd", None)
        if phd is not None and phd.erp_id:
            return phd.erp_id
        return None

    def get_full_name(self):
        return self.display_name or self.email

    def get_short_name(self):
        return self.display_name or self.email

    # Required methods for Django admin compatibility without PermissionsMixin
    def has_perm(self, perm, obj=None):
        return self.is_staff

    def has_module_perms(self, app_label):
        return self.is_staff

    def has_custom_permission(self, permission_key):
        """True if any active role of this user carries ``permission_key``."""
        return Permission.objects.filter(
            permission_key=permission_key,
            rolepermission__role__userroles__user=self,
            rolepermission__role__userroles__is_active=True,
        ).exists()

    def get_user_roles(self):
        return Role.objects.filter(userroles__user=self, userroles__is_active=True).distinct()

    def get_role_ids(self):
        return set(self.get_user_roles().values_list("id", flat=True))

    def assign_role(self, role_name):
        User.objects._assign_role_to_user(self, role_name)

    def remove_role(self, role_name):
        """Disable the active role ``role_name``; False when it was not held."""
        updated = 0
        for user_role in UserRoles.objects.filter(user=self, role__role_name=role_name, is_active=True):
            user_role.disable()
            updated += 1
        return updated > 0

    def has_role(self, role_name):
        return UserRoles.objects.filter(user=self, role__role_name=role_name, is_active=True).exists()


class Faculty(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="faculty")
    name = models.CharField(max_length=255, blank=True)
    psrn = models.CharField(max_length=32, blank=True, null=True, unique=True)
    department = models.CharField(max_length=64, blank=True)

    class Meta:
        verbose_name = "Faculty"
        verbose_name_plural = "Faculty"

    def __str__(self):
        return f"{self.name or self.user.email} ({self.psrn or 'no PSRN'})"


class PhD(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="phd")
    name = models.CharField(max_length=255, blank=True)
    erp_id = models.CharField(max_length=32, blank=True, null=True, unique=True)
    phd_type = models.CharField(max_length=20, choices=PhdType.choices, default=PhdType.FULL_TIME)

    class Meta:
        verbose_name = "PhD Scholar"
        verbose_name_plural = "PhD Scholars"

    def __str__(self):
        return f"{self.name or self.user.email} ({self.phd_type})"


class Role(models.Model):
    """Role model for custom permission system."""
    role_name = models.CharField(max_length=100, unique=True, null=False)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Role"
        verbose_name_plural = "Roles"

    def __str__(self):
        return self.role_name


class Permission(models.Model):
    """Capability key, e.g. ``allocation:write``."""
    permission_key = models.CharField(max_length=200, unique=True, null=False)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Permission"
        verbose_name_plural = "Permissions"

    def __str__(self):
        return self.permission_key


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE)
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE)

    class Meta:
        unique_together = ("role", "permission")
        verbose_name = "Role Permission"
        verbose_name_plural = "Role Permissions"

    def __str__(self):
        return f"{self.role.role_name} - {self.permission.permission_key}"


class UserRoles(models.Model):
    """User to role link; disabled rows are kept for auditing."""
    user = models.ForeignKey(User, on_delete=models.CASCADE)
    role = models.ForeignKey(Role, on_delete=models.CASCADE)
    assigned_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)
    disabled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "User Role"
        verbose_name_plural = "User Roles"

    def __str__(self):
        status = "Active" if self.is_active else "Disabled"
        return f"{self.user.email} - {self.role.role_name} ({status})"

    def disable(self):
        self.is_active = False
        self.disabled_at = timezone.now()
        self.save(update_fields=["is_active", "disabled_at"])
