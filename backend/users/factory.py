"""
Factory classes for generating test data using Factory Boy and Faker.
"""
import factory
from factory.django import DjangoModelFactory
from django.contrib.auth import get_user_model
from users.models import (
    Role, Permission, RolePermission, UserRoles,
    Faculty, PhD, PhdType, UserType
)

User = get_user_model()


class RoleFactory(DjangoModelFactory):
    """Factory for creating Role instances."""

    class Meta:
        model = Role
        django_get_or_create = ('role_name',)

    role_name = factory.Sequence(lambda n: f"Role_{n}")
    description = factory.Faker('text', max_nb_chars=200)


class PermissionFactory(DjangoModelFactory):
    """Factory for creating Permission instances."""

    class Meta:
        model = Permission
        django_get_or_create = ('permission_key',)

    permission_key = factory.Sequence(lambda n: f"permission:{n}")
    description = factory.Faker('sentence', nb_words=6)


class UserFactory(DjangoModelFactory):
    """Factory for creating User instances."""

    class Meta:
        model = User

    email = factory.Sequence(lambda n: f"user{n}@example.edu")
    name = factory.Faker('name')
    type = UserType.STAFF
    is_active = True
    is_staff = False
    deactivated = False

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        if not create:
            return
        self.set_password(extracted or 'defaultpass123')
        self.save()


class StaffUserFactory(UserFactory):
    is_staff = True


class FacultyUserFactory(UserFactory):
    """Faculty member with a PSRN profile."""

    email = factory.Sequence(lambda n: f"faculty{n}@example.edu")
    type = UserType.FACULTY

    @factory.post_generation
    def profile(self, create, extracted, **kwargs):
        if not create:
            return
        Faculty.objects.create(
            user=self,
            name=self.name or '',
            psrn=kwargs.get('psrn') or f"PSRN{self.pk:04d}",
            department=kwargs.get('department', 'CS'),
        )


class PhdUserFactory(UserFactory):
    """PhD scholar; pass ``profile__phd_type`` for part-time scholars."""

    email = factory.Sequence(lambda n: f"phd{n}@example.edu")
    type = UserType.PHD

    @factory.post_generation
    def profile(self, create, extracted, **kwargs):
        if not create:
            return
        PhD.objects.create(
            user=self,
            name=self.name or '',
            erp_id=kwargs.get('erp_id') or f"ERP{self.pk:04d}",
            phd_type=kwargs.get('phd_type', PhdType.FULL_TIME),
        )


class UserRolesFactory(DjangoModelFactory):
    """Factory for creating UserRoles instances."""

    class Meta:
        model = UserRoles

    user = factory.SubFactory(UserFactory)
    role = factory.SubFactory(RoleFactory)
    is_active = True


class RolePermissionFactory(DjangoModelFactory):
    """Factory for creating RolePermission instances."""

    class Meta:
        model = RolePermission
        django_get_or_create = ('role', 'permission')

    role = factory.SubFactory(RoleFactory)
    permission = factory.SubFactory(PermissionFactory)


# Helper functions for creating test data
def grant(user, *permission_keys, role_name=None):
    """Give ``user`` a role carrying ``permission_keys``; returns the role."""
    role = RoleFactory(role_name=role_name or f"grant-{user.pk}")
    for key in permission_keys:
        RolePermissionFactory(role=role, permission=PermissionFactory(permission_key=key))
    if not UserRoles.objects.filter(user=user, role=role, is_active=True).exists():
        UserRolesFactory(user=user, role=role)
    return role
